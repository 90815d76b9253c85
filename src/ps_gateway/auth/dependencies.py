"""FastAPI dependency: get_current_identity.

Usage in any protected router:
    @router.get("/protected")
    async def protected(identity: Identity = Depends(get_current_identity)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.ps_common.errors import InvalidTokenError
from src.ps_fanout.engine.hub import Identity
from src.ps_gateway.auth.jwt_handler import verify_token

_bearer = HTTPBearer(auto_error=False)

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Identity:
    if credentials is None:
        raise _CREDENTIALS_EXCEPTION
    try:
        return verify_token(credentials.credentials)
    except InvalidTokenError:
        raise _CREDENTIALS_EXCEPTION from None
