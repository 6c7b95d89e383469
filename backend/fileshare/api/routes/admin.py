from typing import List, Optional
from datetime import datetime
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, field_serializer
from fileshare.core.database import get_db
from fileshare.core.security import TokenIdentity
from fileshare.api.dependencies import require_admin
from fileshare.services.user_service import user_service

# Every route here is admin-only
router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


class AdminUserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: str
    created_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at')
    def serialize_created_at(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None


class RoleUpdate(BaseModel):
    # Checked against the known roles in the service so bad values get "Invalid role"
    role: Optional[str] = None


class StatsResponse(BaseModel):
    total_users: int
    total_files: int
    total_comments: int


@router.get("/users", response_model=List[AdminUserResponse])
async def list_users(db: Session = Depends(get_db)):
    return user_service.list_users(db)


@router.put("/users/{user_id}/role")
async def update_user_role(
    user_id: int,
    update: RoleUpdate,
    identity: TokenIdentity = Depends(require_admin),
    db: Session = Depends(get_db)
):
    user_service.update_role(db, identity, user_id, update.role)
    return {"message": "User role updated successfully"}


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    identity: TokenIdentity = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a user. Admins cannot delete themselves."""
    user_service.delete_user(db, identity, user_id)
    return {"message": "User deleted successfully"}


@router.get("/stats", response_model=StatsResponse)
async def get_stats(db: Session = Depends(get_db)):
    """Counts of users, files and comments"""
    return user_service.get_stats(db)
