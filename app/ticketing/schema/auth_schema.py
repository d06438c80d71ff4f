from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class RegisterIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    phone_number: Optional[str] = None


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshTokenIn(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class UpdateDetailsIn(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None


class UpdatePasswordIn(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=72)


class EmailIn(BaseModel):
    email: EmailStr


class ResetPasswordIn(BaseModel):
    password: str = Field(..., min_length=6, max_length=72)
