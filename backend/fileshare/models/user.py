import enum
from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from sqlalchemy.sql import func
from fileshare.core.database import Base


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


ROLE_VALUES = tuple(role.value for role in UserRole)


class User(Base):
    """
    User model representing application users.

    Passwords are stored as bcrypt hashes (never plaintext) and never
    leave the service layer.
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # Username and email are both unique and indexed - login matches either one
    username = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    # bcrypt hash with the salt embedded, compared with passlib on login
    password = Column(String(255), nullable=False)
    # Only "user" or "admin", enforced by ck_users_role
    role = Column(String(50), nullable=False, default=UserRole.USER.value)
    # Set by the database; used for newest-first ordering
    created_at = Column(DateTime(timezone=True), server_default=func.now())
