from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from fileshare.core.database import Base


class Comment(Base):
    """
    Comment model - immutable once posted, only deleted by its author or an admin.
    """
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    # Strong reference: the database removes comments with their file
    file_id = Column(
        Integer, ForeignKey("files.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Weak reference: NULL once the author is deleted
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # Never empty, checked at the API boundary
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    file = relationship("File", back_populates="comments")
    author = relationship("User")

    @property
    def username(self):
        # Author may have been deleted since posting
        return self.author.username if self.author is not None else None
