"""Pydantic schemas for registration, login and password reset.

Learn: Field constraints here are the first line of validation —
FastAPI rejects a bad body before any service code runs, and
api/errors.py turns that into a {field: message} map.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr = Field(..., max_length=100)
    password: str = Field(..., min_length=8, max_length=120)
    recaptcha_token: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    recaptcha_token: Optional[str] = None


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=120)


class MessageResponse(BaseModel):
    message: str


class UserRead(BaseModel):
    id: int
    username: str
    email: str
    email_verified: bool
    created_at: datetime

    model_config = {"from_attributes": True}
