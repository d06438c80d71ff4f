from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from ticketing.controller.helpers import utcnow
from ticketing.database import Base

SMS_PROVIDERS = ("twilio", "nexmo", "none")
EMAIL_PROVIDERS = ("smtp", "sendgrid", "mailgun")

# Provider credentials are accepted on update but never returned
SECRET_FIELDS = ("sms_api_key", "sms_api_secret", "email_api_key", "email_username", "email_password")


class Settings(Base):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, index=True)
    site_name = Column(String, nullable=False, default="Event Ticketing System")
    contact_email = Column(String, nullable=False, default="contact@example.com")
    description = Column(Text, nullable=True)

    enable_qr_scanning = Column(Boolean, nullable=False, default=True)
    require_email_verification = Column(Boolean, nullable=False, default=True)
    allow_ticket_transfers = Column(Boolean, nullable=False, default=False)

    enable_email_notifications = Column(Boolean, nullable=False, default=True)
    enable_sms_notifications = Column(Boolean, nullable=False, default=False)
    sms_provider = Column(String, nullable=False, default="none")
    sms_api_key = Column(String, nullable=True)
    sms_api_secret = Column(String, nullable=True)

    email_provider = Column(String, nullable=False, default="smtp")
    email_api_key = Column(String, nullable=True)
    email_from = Column(String, nullable=True)
    email_host = Column(String, nullable=True)
    email_port = Column(Integer, nullable=True)
    email_username = Column(String, nullable=True)
    email_password = Column(String, nullable=True)

    maintenance_mode = Column(Boolean, nullable=False, default=False)
    maintenance_message = Column(Text, nullable=False,
                                 default="We are currently performing maintenance. Please check back later.")
    entry_pass_expiration_days = Column(Integer, nullable=False, default=30)

    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
