import logging
from typing import List
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from fileshare.core.errors import BadRequestError, InternalError, NotFoundError
from fileshare.core.security import TokenIdentity
from fileshare.models.comment import Comment
from fileshare.models.file import File
from fileshare.models.user import ROLE_VALUES, User

logger = logging.getLogger(__name__)

USER_NOT_FOUND_MESSAGE = "User not found"


class UserService:
    """Admin-side user management. Callers must already be checked as admin."""

    @staticmethod
    def list_users(db: Session) -> List[User]:
        return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()

    @staticmethod
    def update_role(db: Session, identity: TokenIdentity, user_id: int, role: str | None) -> User:
        if role not in ROLE_VALUES:
            raise BadRequestError("Invalid role")

        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)

        previous_role = user.role
        user.role = role
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Failed to update role for user {user_id}")
            raise InternalError("Failed to update user role")

        logger.info(
            f"Admin {identity.username} changed role of {user.username} "
            f"from {previous_role} to {role}"
        )
        return user

    @staticmethod
    def delete_user(db: Session, identity: TokenIdentity, user_id: int) -> None:
        """
        Delete another user's account.

        Their files and comments stay, with the owner set to NULL by the
        database. Tokens already issued to them keep working until expiry.
        """
        if user_id == identity.id:
            raise BadRequestError("Cannot delete your own account")

        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)

        username = user.username
        try:
            db.delete(user)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Failed to delete user {user_id}")
            raise InternalError("Failed to delete user")

        logger.info(f"Admin {identity.username} deleted user {username} (ID: {user_id})")

    @staticmethod
    def get_stats(db: Session) -> dict:
        return {
            "total_users": db.query(func.count(User.id)).scalar(),
            "total_files": db.query(func.count(File.id)).scalar(),
            "total_comments": db.query(func.count(Comment.id)).scalar(),
        }


user_service = UserService()
