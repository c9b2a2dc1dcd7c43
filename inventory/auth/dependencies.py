import jwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from inventory.auth import jwt_handler
from inventory.auth.jwt_handler import SessionClaims
from inventory.core import config

security = HTTPBearer(auto_error=False)


def _session_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str:
    token = request.cookies.get(config.SESSION_COOKIE_NAME, "")
    if not token and credentials is not None:
        token = credentials.credentials
    return token


def get_current_session(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> SessionClaims:
    token = _session_token(request, credentials)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        return jwt_handler.decode_session_token(token)
    except jwt.InvalidTokenError as exc:
        raise HTTPException(status_code=401, detail="Invalid session") from exc


def get_optional_session(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> SessionClaims | None:
    token = _session_token(request, credentials)
    if not token:
        return None

    try:
        return jwt_handler.decode_session_token(token)
    except jwt.InvalidTokenError:
        return None


def cookie_settings() -> dict:
    return {"httponly": True, "samesite": "lax", "secure": config.SESSION_COOKIE_SECURE}
