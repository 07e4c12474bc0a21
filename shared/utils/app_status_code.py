class AppStatusCode:
    """Application level status codes carried in the JsonOutResult envelope."""

    DATA_RETRIEVED_SUCCESSFULLY = "100"
    CREATED_SUCCESSFULLY = "101"
    UPDATED_SUCCESSFULLY = "102"
    DELETED_SUCCESSFULLY = "103"

    OPERATION_FAILED = "200"
    OPERATION_ERROR = "201"
    INVALID_INPUT = "202"
    NOT_FOUND = "203"
    DUPLICATE_ADD_ERROR = "204"

    INSUFFICIENT_STOCK = "300"
    INVALID_STATE_TRANSITION = "301"
    ALREADY_RECEIVED = "302"

    AUTHENTICATION_TOKEN_INVALID = "400"
    AUTHENTICATION_TOKEN_EXPIRED = "401"
