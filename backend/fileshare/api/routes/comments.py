from typing import Annotated, List, Optional
from datetime import datetime
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, StringConstraints, field_serializer
from fileshare.core.database import get_db
from fileshare.core.security import TokenIdentity
from fileshare.api.dependencies import get_current_identity
from fileshare.services.comment_service import comment_service

router = APIRouter(tags=["comments"])


class CommentCreate(BaseModel):
    content: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CommentResponse(BaseModel):
    id: int
    file_id: int
    user_id: Optional[int]
    content: str
    # Author's username, null once the author is deleted
    username: Optional[str]
    created_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at')
    def serialize_created_at(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None


@router.post("/files/{file_id}/comments", response_model=CommentResponse)
async def add_comment(
    file_id: int,
    comment: CommentCreate,
    identity: TokenIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    return comment_service.add_comment(db, identity, file_id, comment.content)


@router.get("/files/{file_id}/comments", response_model=List[CommentResponse])
async def list_comments(file_id: int, db: Session = Depends(get_db)):
    """List comments on a file, newest first"""
    return comment_service.list_comments(db, file_id)


@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: int,
    identity: TokenIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Delete a comment (author or admin)"""
    comment_service.delete_comment(db, identity, comment_id)
    return {"message": "Comment deleted successfully"}
