# backend/docrepo/schemas/auth.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from .base import BaseSchema
from ..models.profile import Role


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class User(BaseSchema):
    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Role
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None


class Session(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: User


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: Optional[str] = None
    role: Role = Role.VIEWER


class UserMetadataUpdate(BaseModel):
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Optional[Role] = None


class RoleUpdate(BaseModel):
    role: Role
