import logging
from typing import List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from fileshare.core.errors import InternalError, NotFoundError
from fileshare.core.security import TokenIdentity, ensure_owner_or_admin
from fileshare.models.comment import Comment
from fileshare.models.file import File

logger = logging.getLogger(__name__)


class CommentService:
    @staticmethod
    def add_comment(
        db: Session,
        identity: TokenIdentity,
        file_id: int,
        content: str,
    ) -> Comment:
        if not db.query(File.id).filter(File.id == file_id).first():
            raise NotFoundError("File not found")

        comment = Comment(file_id=file_id, user_id=identity.id, content=content)
        try:
            db.add(comment)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Failed to add comment to file {file_id}")
            raise InternalError("Failed to add comment")

        # Re-read with the author joined in for the response
        return (
            db.query(Comment)
            .options(joinedload(Comment.author))
            .filter(Comment.id == comment.id)
            .one()
        )

    @staticmethod
    def list_comments(db: Session, file_id: int) -> List[Comment]:
        """Comments on a file, newest first. Unknown files simply have none."""
        return (
            db.query(Comment)
            .options(joinedload(Comment.author))
            .filter(Comment.file_id == file_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .all()
        )

    @staticmethod
    def delete_comment(db: Session, identity: TokenIdentity, comment_id: int) -> None:
        comment = db.query(Comment).filter(Comment.id == comment_id).first()
        if not comment:
            raise NotFoundError("Comment not found")

        ensure_owner_or_admin(
            identity, comment.user_id, "Not authorized to delete this comment"
        )

        try:
            db.delete(comment)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Failed to delete comment {comment_id}")
            raise InternalError("Failed to delete comment")


comment_service = CommentService()
