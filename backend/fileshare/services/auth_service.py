import logging
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from fileshare.core.config import Settings
from fileshare.core.errors import ConflictError, InternalError, InvalidCredentialsError
from fileshare.core.security import create_access_token, get_password_hash, verify_password
from fileshare.models.user import User, UserRole

logger = logging.getLogger(__name__)


class AuthService:
    @staticmethod
    def register(
        db: Session,
        settings: Settings,
        username: str,
        email: str,
        password: str,
    ) -> tuple[str, User]:
        """Create a regular user and return (token, user)"""
        # Explicit check gives a clean error before touching the constraint
        existing_user = db.query(User).filter(
            or_(User.username == username, User.email == email)
        ).first()
        if existing_user:
            raise ConflictError()

        db_user = User(
            username=username,
            email=email,
            password=get_password_hash(password),
            role=UserRole.USER.value,
        )
        try:
            db.add(db_user)
            db.commit()
            db.refresh(db_user)
        except IntegrityError:
            # Two registrations raced past the check above
            db.rollback()
            raise ConflictError()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Failed to register user {username}")
            raise InternalError("Database error occurred")

        logger.info(f"Registered user {db_user.username} (ID: {db_user.id})")
        return create_access_token(db_user, settings), db_user

    @staticmethod
    def login(
        db: Session,
        settings: Settings,
        identifier: str,
        password: str,
    ) -> tuple[str, User]:
        """
        Authenticate by username or email and return (token, user).

        The identifier is matched against both columns as-is. Unknown user
        and wrong password raise the same error so accounts can't be probed.
        """
        user = db.query(User).filter(
            or_(User.username == identifier, User.email == identifier)
        ).first()

        if not user or not verify_password(password, user.password):
            raise InvalidCredentialsError()

        return create_access_token(user, settings), user


auth_service = AuthService()
