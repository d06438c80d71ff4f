from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

Role = Literal["admin", "staff", "customer"]
AccountStatus = Literal["active", "inactive", "suspended"]


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone_number: Optional[str] = None
    role: str
    status: str
    email_verified: bool
    qr_code: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: datetime


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    phone_number: Optional[str] = None
    role: Role = "customer"
    status: AccountStatus = "active"


class UserUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
    role: Optional[Role] = None
    status: Optional[AccountStatus] = None
    email_verified: Optional[bool] = None


class RoleUpdate(BaseModel):
    role: Role


class StatusUpdate(BaseModel):
    status: AccountStatus
