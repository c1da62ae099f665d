from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class InvitationAccept(BaseModel):
    email: EmailStr
    token: str
    password: str = Field(min_length=8, max_length=72)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    preferred_name: Optional[str] = None
    model_config = ConfigDict(extra="forbid")


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    email: EmailStr
    token: str
    password: str = Field(min_length=8, max_length=72)
    model_config = ConfigDict(extra="forbid")


class MessageResponse(BaseModel):
    message: str
