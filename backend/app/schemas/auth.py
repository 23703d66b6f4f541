"""Auth and user request/response schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(min_length=8)
    name: str


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class PreferredRolesUpdate(BaseModel):
    preferred_roles: Literal["student", "tutor", "both"]


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    role: str
    preferred_roles: Optional[str] = None
    created_at: str

    class Config:
        from_attributes = True
