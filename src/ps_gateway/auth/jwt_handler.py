"""JWT identity resolution for REST and WebSocket callers.

Tokens are issued by the account service; this module only verifies them.
create_access_token exists for local tooling and tests.
Claims: "sub" (user id, required), "username" (optional display name).
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.ps_common.errors import InvalidTokenError
from src.ps_fanout.engine.hub import Identity

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)


def create_access_token(user_id: str, username: str | None = None) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "type": "access",
        "iat": now,
        "exp": now + _ACCESS_EXPIRE,
    }
    if username:
        payload["username"] = username
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> dict[str, str]:
    """Decode and validate a JWT access token. Raises InvalidTokenError."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidTokenError() from None

    if payload.get("type", "access") != "access":
        raise InvalidTokenError()
    return payload


def verify_token(token: str) -> Identity:
    payload = decode_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise InvalidTokenError()
    return Identity(user_id=user_id, username=payload.get("username") or user_id)
