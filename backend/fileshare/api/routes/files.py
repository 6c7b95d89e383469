from fastapi import APIRouter, Depends, UploadFile, File as FastAPIFile
from sqlalchemy.orm import Session
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from datetime import datetime
from fileshare.core.config import Settings
from fileshare.core.database import get_db
from fileshare.core.security import TokenIdentity
from fileshare.api.dependencies import get_current_identity, get_settings, get_storage
from fileshare.services.file_service import file_service
from fileshare.storage.local_storage import LocalStorage

router = APIRouter(tags=["files"])


class FileResponse(BaseModel):
    id: int
    filename: str
    originalname: str
    mimetype: Optional[str]
    size: int
    # Public URL under /uploads, never the path on disk
    path: str = Field(validation_alias="url")
    uploaded_by: Optional[int]
    uploader_name: Optional[str]
    created_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at')
    def serialize_created_at(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None


class MessageResponse(BaseModel):
    message: str


@router.post("/upload", response_model=FileResponse)
async def upload_file(
    file: Optional[UploadFile] = FastAPIFile(None),
    identity: TokenIdentity = Depends(get_current_identity),
    settings: Settings = Depends(get_settings),
    storage: LocalStorage = Depends(get_storage),
    db: Session = Depends(get_db)
):
    """Upload a single file (multipart field 'file')"""
    return await file_service.upload_file(db, storage, settings, identity, file)


@router.get("/files", response_model=List[FileResponse])
async def list_files(db: Session = Depends(get_db)):
    """List all files, newest first"""
    return file_service.list_files(db)


@router.get("/files/{file_id}", response_model=FileResponse)
async def get_file(file_id: int, db: Session = Depends(get_db)):
    """Get a single file by ID"""
    return file_service.get_file(db, file_id)


@router.delete("/files/{file_id}", response_model=MessageResponse)
async def delete_file(
    file_id: int,
    identity: TokenIdentity = Depends(get_current_identity),
    storage: LocalStorage = Depends(get_storage),
    db: Session = Depends(get_db)
):
    """
    Delete a file (owner or admin).
    The stored binary is removed best-effort and its comments go with it.
    """
    file_service.delete_file(db, storage, identity, file_id)
    return {"message": "File deleted successfully"}
