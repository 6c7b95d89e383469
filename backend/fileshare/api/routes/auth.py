from typing import Annotated
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, StringConstraints, field_validator
from pydantic.networks import validate_email
from fileshare.core.config import Settings
from fileshare.core.database import get_db
from fileshare.api.dependencies import get_settings
from fileshare.services.auth_service import auth_service

router = APIRouter(tags=["auth"])

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def reject_blank_password(value: str) -> str:
    # Whitespace-only counts as empty, but the password is hashed exactly as typed
    if not value.strip():
        raise ValueError("Password must not be empty")
    return value


class UserCreate(BaseModel):
    username: NonEmptyStr
    # Plain str so the address is stored as typed - login compares it verbatim
    email: NonEmptyStr
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        # Same email-validator check EmailStr runs, without keeping its normalized form
        validate_email(value)
        return value

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        return reject_blank_password(value)


class UserLogin(BaseModel):
    # Username or email, matched against both
    username: NonEmptyStr
    password: str

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        return reject_blank_password(value)


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: str

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


@router.post("/register", response_model=AuthResponse)
async def register(
    user_data: UserCreate,
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db)
):
    """Register a new user and log them in"""
    token, user = auth_service.register(
        db, settings, user_data.username, user_data.email, user_data.password
    )
    return {"token": token, "user": user}


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db)
):
    """Login with username or email and get a bearer token"""
    token, user = auth_service.login(
        db, settings, credentials.username, credentials.password
    )
    return {"token": token, "user": user}
