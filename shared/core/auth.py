from datetime import datetime, timedelta
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError, jwt
from shared.utils.app_status_code import AppStatusCode
from shared.core.config import settings
from shared.core.schemas import JsonOutResult, UserToken

security = HTTPBearer()


def create_access_token(data: dict) -> str:
    payload = data.copy()
    payload["exp"] = datetime.utcnow() + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _unauthorized(message: str, app_status: str):
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=JsonOutResult(
            data=None,
            status="Failure",
            status_code=app_status,
            message=message,
        ).model_dump(),
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_token(token: str) -> UserToken:
    """Verify and decode a JWT token into the caller's authorization context."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET,
                             algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise _unauthorized("Token expired",
                            AppStatusCode.AUTHENTICATION_TOKEN_EXPIRED)
    except JWTError:
        raise _unauthorized("Invalid or expired token",
                            AppStatusCode.AUTHENTICATION_TOKEN_INVALID)
    if "user_id" not in payload and "sub" in payload:
        payload["user_id"] = payload["sub"]
    return UserToken(**payload)


def validate_current_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> UserToken:
    # authorization already happened upstream, only the context is needed here
    return verify_token(credentials.credentials)
