import logging
from fastapi import FastAPI, Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from shared.core.exceptions import AppError
from shared.core.schemas import JsonOutResult
from shared.utils.app_status_code import AppStatusCode

logger = logging.getLogger(__name__)


def _failure(message: str, status_code: str, data=None) -> dict:
    return jsonable_encoder(JsonOutResult(
        data=data,
        status="Failure",
        status_code=status_code,
        message=message
    ))


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        logger.warning("%s %s rejected: %s", request.method,
                       request.url.path, exc.message)
        return JSONResponse(
            content=_failure(exc.message, exc.status_code, exc.data),
            status_code=exc.http_status,
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        # detail may already be a wrapped JsonOutResult
        if isinstance(exc.detail, dict) and {"status", "status_code", "message"}.issubset(exc.detail):
            content = exc.detail
        else:
            content = _failure(str(exc.detail), AppStatusCode.OPERATION_FAILED)
        return JSONResponse(content=content, status_code=exc.status_code or 400,
                            headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            content=_failure("Validation failed", AppStatusCode.INVALID_INPUT,
                             data=jsonable_encoder(exc.errors())),
            status_code=422,
        )

    # Catch all unhandled exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s",
                         request.method, request.url.path)
        return JSONResponse(
            content=_failure(str(exc), AppStatusCode.OPERATION_FAILED),
            status_code=500,
        )
