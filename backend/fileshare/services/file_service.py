import logging
from typing import List
from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from fileshare.core.config import Settings
from fileshare.core.errors import BadRequestError, InternalError, NotFoundError
from fileshare.core.security import TokenIdentity, ensure_owner_or_admin
from fileshare.models.file import File
from fileshare.storage.local_storage import EmptyFileError, FileTooLargeError, LocalStorage

logger = logging.getLogger(__name__)

FILE_NOT_FOUND_MESSAGE = "File not found"


class FileService:
    @staticmethod
    async def upload_file(
        db: Session,
        storage: LocalStorage,
        settings: Settings,
        identity: TokenIdentity,
        file: UploadFile | None,
    ) -> File:
        """Store an upload on disk, then record it"""
        if file is None or not file.filename:
            raise BadRequestError("No file uploaded")

        try:
            stored = await storage.save_file(file, settings.MAX_FILE_SIZE)
        except FileTooLargeError as e:
            raise BadRequestError(str(e))
        except EmptyFileError:
            raise BadRequestError("Uploaded file is empty")
        except OSError:
            logger.exception(f"Failed to store upload {file.filename}")
            raise InternalError("Failed to store file")

        db_file = File(
            filename=stored.filename,
            originalname=file.filename,
            mimetype=file.content_type or "application/octet-stream",
            size=stored.size,
            path=stored.path,
            uploaded_by=identity.id,
        )
        try:
            db.add(db_file)
            db.commit()
            db.refresh(db_file)
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Failed to save file information for {stored.filename}")
            # Don't leave the binary behind without a row
            try:
                storage.delete_file(stored.filename)
            except OSError as e:
                logger.error(f"Could not remove orphaned upload {stored.filename}: {str(e)}")
            raise InternalError("Failed to save file information")

        logger.info(
            f"User {identity.username} uploaded {db_file.originalname} "
            f"(ID: {db_file.id}, {db_file.size} bytes)"
        )
        return db_file

    @staticmethod
    def list_files(db: Session) -> List[File]:
        """All files, newest first, with the uploader loaded through an outer join"""
        return (
            db.query(File)
            .options(joinedload(File.uploader))
            .order_by(File.created_at.desc(), File.id.desc())
            .all()
        )

    @staticmethod
    def get_file(db: Session, file_id: int) -> File:
        db_file = (
            db.query(File)
            .options(joinedload(File.uploader))
            .filter(File.id == file_id)
            .first()
        )
        if not db_file:
            raise NotFoundError(FILE_NOT_FOUND_MESSAGE)
        return db_file

    @staticmethod
    def delete_file(
        db: Session,
        storage: LocalStorage,
        identity: TokenIdentity,
        file_id: int,
    ) -> None:
        """
        Delete a file's row and, best-effort, its stored binary.

        Failing to remove the binary is logged and otherwise ignored; the row
        is deleted either way. Comments go with it through ON DELETE CASCADE.
        """
        db_file = db.query(File).filter(File.id == file_id).first()
        if not db_file:
            raise NotFoundError(FILE_NOT_FOUND_MESSAGE)

        ensure_owner_or_admin(
            identity, db_file.uploaded_by, "Not authorized to delete this file"
        )

        try:
            if not storage.delete_file(db_file.filename):
                logger.warning(
                    f"Stored object {db_file.filename} for file {db_file.id} was already missing"
                )
        except OSError as e:
            logger.error(f"File deletion error for {db_file.filename}: {str(e)}")

        try:
            db.delete(db_file)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Failed to delete file {file_id}")
            raise InternalError("Failed to delete file")

        logger.info(f"User {identity.username} deleted file {file_id}")


file_service = FileService()
