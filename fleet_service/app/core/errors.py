from typing import Optional
from shared.core.exceptions import AppError
from shared.utils.app_status_code import AppStatusCode


class EngineError(AppError):
    pass


class ValidationError(EngineError):
    http_status = 422
    status_code = AppStatusCode.INVALID_INPUT


class NotFound(EngineError):
    http_status = 404
    status_code = AppStatusCode.NOT_FOUND

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} '{entity_id}' not found")
        self.entity = entity
        self.entity_id = entity_id


class InsufficientStock(EngineError):
    http_status = 409
    status_code = AppStatusCode.INSUFFICIENT_STOCK

    def __init__(self, item_id, item_name: Optional[str], requested: int, available: int):
        label = f"{item_name} ({item_id})" if item_name else str(item_id)
        super().__init__(
            f"Insufficient stock for {label}: requested {requested}, available {available}",
            data={"item_id": str(item_id), "item_name": item_name,
                  "requested": requested, "available": available},
        )
        self.item_id = item_id
        self.requested = requested
        self.available = available


class InvalidStateTransition(EngineError):
    http_status = 409
    status_code = AppStatusCode.INVALID_STATE_TRANSITION

    def __init__(self, entity: str, current: str, attempted: str):
        super().__init__(
            f"Cannot change {entity} status from '{current}' to '{attempted}'",
            data={"current": current, "attempted": attempted},
        )
        self.current = current
        self.attempted = attempted


class AlreadyReceived(EngineError):
    http_status = 409
    status_code = AppStatusCode.ALREADY_RECEIVED

    def __init__(self, order_number: str):
        super().__init__(f"Purchase order {order_number} has already been received")
        self.order_number = order_number


class ResourceBusy(EngineError):
    http_status = 503
    status_code = AppStatusCode.OPERATION_ERROR
