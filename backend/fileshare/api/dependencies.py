from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from fileshare.core.config import Settings
from fileshare.core.errors import ForbiddenError, InvalidTokenError, UnauthenticatedError
from fileshare.core.security import TokenIdentity, decode_access_token
from fileshare.storage.local_storage import LocalStorage

# Extracts the token from "Authorization: Bearer <token>"
# auto_error=False so a missing token gets our own error instead of FastAPI's
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/login", auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> LocalStorage:
    return request.app.state.storage


async def get_current_identity(
    token: str | None = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
) -> TokenIdentity:
    """
    Require a valid, unexpired bearer token.

    Missing token and bad token are different errors (401 vs 403). The
    identity comes from the token claims alone; the user row is not re-read,
    so a deleted or demoted user keeps their access until the token expires.
    """
    if not token:
        raise UnauthenticatedError()

    identity = decode_access_token(token, settings)
    if identity is None:
        raise InvalidTokenError()
    return identity


async def require_admin(
    identity: TokenIdentity = Depends(get_current_identity),
) -> TokenIdentity:
    if not identity.is_admin:
        raise ForbiddenError("Admin access required")
    return identity

