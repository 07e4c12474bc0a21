from typing import Any, Optional
from shared.utils.app_status_code import AppStatusCode


class AppError(Exception):
    """Base for errors that map onto a JsonOutResult failure response."""

    http_status: int = 400
    status_code: str = AppStatusCode.OPERATION_FAILED

    def __init__(self, message: str, data: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.data = data
