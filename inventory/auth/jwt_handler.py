from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from inventory.core import config


@dataclass(frozen=True)
class SessionClaims:
    user_id: int
    email: str
    name: str
    is_administrator: bool


def create_session_token(
    claims: SessionClaims,
    expires_minutes: int | None = None,
    secret_key: str | None = None,
) -> str:
    expire_minutes = expires_minutes or config.JWT_EXPIRES_MINUTES
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(claims.user_id),
        "email": claims.email,
        "name": claims.name,
        "admin": claims.is_administrator,
        "iat": now,
        "exp": now + timedelta(minutes=expire_minutes),
    }
    return jwt.encode(payload, secret_key or config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_session_token(token: str, secret_key: str | None = None) -> SessionClaims:
    """Raises ``jwt.InvalidTokenError`` when the token is tampered with, expired or incomplete."""
    payload = jwt.decode(
        token,
        secret_key or config.JWT_SECRET_KEY,
        algorithms=[config.JWT_ALGORITHM],
        options={"require": ["sub", "exp"]},
    )
    try:
        user_id = int(payload["sub"])
    except ValueError as exc:
        raise jwt.InvalidTokenError("Invalid token subject") from exc

    return SessionClaims(
        user_id=user_id,
        email=str(payload.get("email", "")),
        name=str(payload.get("name", "")),
        is_administrator=bool(payload.get("admin", False)),
    )
