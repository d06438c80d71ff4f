from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from ticketing.controller.helpers import utcnow
from ticketing.database import Base

USER_ROLES = ("admin", "staff", "customer")
USER_STATUSES = ("active", "inactive", "suspended")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    password = Column(String, nullable=False)
    phone_number = Column(String, nullable=True)
    role = Column(String, nullable=False, default="customer")
    status = Column(String, nullable=False, default="active")
    qr_code = Column(String, unique=True, nullable=True)

    email_verified = Column(Boolean, nullable=False, default=False)
    verification_token = Column(String, nullable=True, index=True)
    verification_token_expire = Column(DateTime, nullable=True)
    reset_password_token = Column(String, nullable=True, index=True)
    reset_password_expire = Column(DateTime, nullable=True)

    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    tickets = relationship("Ticket", back_populates="purchaser", foreign_keys="Ticket.purchased_by_id")
    payments = relationship("Payment", back_populates="user")
    entry_passes = relationship("EntryPass", back_populates="user", cascade="all, delete-orphan")
    ratings = relationship("Rating", back_populates="user", cascade="all, delete-orphan")
