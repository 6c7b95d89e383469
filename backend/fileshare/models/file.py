from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, BigInteger
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from fileshare.core.database import Base
from fileshare.storage.local_storage import public_url


class File(Base):
    """
    File model representing an uploaded binary.

    Content lives in the upload directory, the row only keeps metadata.
    uploaded_by is set to NULL by the database when the uploader is deleted.
    """
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    # Generated unique name on disk
    filename = Column(String(255), unique=True, nullable=False)
    # Name the client uploaded (for display)
    originalname = Column(String(255), nullable=False)
    # Content type reported by the client, served back with the file
    mimetype = Column(String(255), nullable=True)
    # Bytes actually written to disk, always > 0
    size = Column(BigInteger, nullable=False)
    # Storage path on disk, never sent to clients
    path = Column(String(500), nullable=False)
    # Weak reference: NULL once the uploader is deleted, then only admins may delete
    uploaded_by = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # file.uploader, loaded through a LEFT OUTER JOIN by the list queries
    uploader = relationship("User")
    # Comments go away through ON DELETE CASCADE, not through the ORM
    comments = relationship("Comment", back_populates="file", passive_deletes=True)

    # Resolved at read time, never stored on the row
    @property
    def uploader_name(self):
        return self.uploader.username if self.uploader is not None else None

    # Public location under the static uploads mount
    @property
    def url(self) -> str:
        return public_url(self.filename)
