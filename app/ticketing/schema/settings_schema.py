from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class SettingsUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    site_name: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    description: Optional[str] = None
    enable_qr_scanning: Optional[bool] = None
    require_email_verification: Optional[bool] = None
    allow_ticket_transfers: Optional[bool] = None
    enable_email_notifications: Optional[bool] = None
    enable_sms_notifications: Optional[bool] = None
    sms_provider: Optional[Literal["twilio", "nexmo", "none"]] = None
    sms_api_key: Optional[str] = None
    sms_api_secret: Optional[str] = None
    email_provider: Optional[Literal["smtp", "sendgrid", "mailgun"]] = None
    email_api_key: Optional[str] = None
    email_from: Optional[str] = None
    email_host: Optional[str] = None
    email_port: Optional[int] = Field(None, ge=1, le=65535)
    email_username: Optional[str] = None
    email_password: Optional[str] = None
    maintenance_mode: Optional[bool] = None
    maintenance_message: Optional[str] = None
    entry_pass_expiration_days: Optional[int] = Field(None, ge=1)


class SettingsOut(BaseModel):
    """Provider credentials are write-only and never listed here."""
    model_config = ConfigDict(from_attributes=True)

    site_name: str
    contact_email: str
    description: Optional[str] = None
    enable_qr_scanning: bool
    require_email_verification: bool
    allow_ticket_transfers: bool
    enable_email_notifications: bool
    enable_sms_notifications: bool
    sms_provider: str
    email_provider: str
    email_from: Optional[str] = None
    email_host: Optional[str] = None
    email_port: Optional[int] = None
    maintenance_mode: bool
    maintenance_message: str
    entry_pass_expiration_days: int
