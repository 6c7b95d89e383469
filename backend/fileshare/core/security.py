from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError
from fileshare.core.config import Settings
from fileshare.core.errors import ForbiddenError
from fileshare.models.user import ROLE_VALUES, UserRole

# bcrypt generates a salt per hash and embeds it in the result
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenIdentity(BaseModel):
    """Identity carried inside a bearer token."""
    id: int
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    return pwd_context.hash(password)


def create_access_token(
    user,
    settings: Settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed JWT for a user.

    The token is self-contained: id, username and role travel in the payload
    and nothing is persisted, so it stays valid until 'exp' even if the user
    is demoted or deleted in the meantime.
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    # Identity travels in the token so requests need no user lookup
    # "sub" follows the JWT convention; "id" is the same value as an int
    to_encode = {
        "sub": str(user.id),
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Optional[TokenIdentity]:
    """Decode and verify a JWT token, returning None if it cannot be trusted"""
    try:
        # Verifies signature and expiration
        payload = jwt.decode(token, settings.SECRET_KEY,
                             algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    try:
        identity = TokenIdentity.model_validate(payload)
    except ValidationError:
        # Signed by us but not shaped like one of our tokens
        return None

    # sub and id must agree, and the role must be one we issue
    if identity.role not in ROLE_VALUES or payload.get("sub") != str(identity.id):
        return None
    return identity


def ensure_owner_or_admin(
    identity: TokenIdentity,
    owner_id: Optional[int],
    detail: str = "Not authorized",
) -> None:
    """
    Pass iff the requester is an admin or owns the resource.

    A resource whose owner was deleted (owner_id is None) is admin-only.
    """
    if identity.is_admin:
        return
    if owner_id is not None and owner_id == identity.id:
        return
    raise ForbiddenError(detail)
