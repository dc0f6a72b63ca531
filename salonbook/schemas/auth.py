"""Pydantic schemas for authentication endpoints."""

from uuid import UUID

from pydantic import BaseModel, EmailStr


class UserLogin(BaseModel):
    """Request schema for user login."""
    email: EmailStr
    password: str


class Token(BaseModel):
    """Response schema for login: the JWT bearer token."""
    access_token: str
    token_type: str = "bearer"
    user_id: UUID | None = None
    full_name: str | None = None
    email: str | None = None


class MessageResponse(BaseModel):
    message: str
