from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from ticketing.controller.helpers import utcnow
from ticketing.database import Base

TICKET_STATUSES = ("active", "used", "expired", "cancelled", "refunded")
PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded")

# Every ticket status change goes through this table
TICKET_TRANSITIONS = {
    "active": {"used", "expired", "cancelled", "refunded"},
    "cancelled": {"refunded"},
    "used": set(),
    "expired": set(),
    "refunded": set(),
}

UNUSABLE_STATUSES = ("cancelled", "used", "expired", "refunded")


def can_transition(current: str, target: str) -> bool:
    return target in TICKET_TRANSITIONS.get(current, set())


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    ticket_number = Column(String, nullable=False, unique=True, index=True)
    purchased_by_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    issued_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    show_id = Column(Integer, ForeignKey("shows.id", ondelete="SET NULL"), nullable=True)
    entry_pass_id = Column(Integer, ForeignKey("entry_passes.id", ondelete="SET NULL"), nullable=True)

    head_count = Column(Integer, nullable=False, default=1)
    attendees = Column(JSON, nullable=False, default=list)
    total_amount = Column(Float, nullable=False, default=0)
    payment_status = Column(String, nullable=False, default="pending")
    payment_method = Column(String, nullable=True)
    payment_id = Column(String, nullable=True)
    status = Column(String, nullable=False, default="active")
    qr_code = Column(String, nullable=False, unique=True)
    purchase_date = Column(DateTime, default=utcnow, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    purchaser = relationship("User", back_populates="tickets", foreign_keys=[purchased_by_id])
    issuer = relationship("User", foreign_keys=[issued_by_id])
    show = relationship("Show", back_populates="tickets")
    entry_pass = relationship("EntryPass")
    lines = relationship("TicketEvent", back_populates="ticket", cascade="all, delete-orphan",
                         order_by="TicketEvent.id")
    payments = relationship("Payment", back_populates="ticket")


class TicketEvent(Base):
    """One event covered by a ticket, with its own gate verification state."""
    __tablename__ = "ticket_events"

    id = Column(Integer, primary_key=True, index=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    verified = Column(Boolean, nullable=False, default=False)
    verified_at = Column(DateTime, nullable=True)
    verified_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    ticket = relationship("Ticket", back_populates="lines")
    event = relationship("Event", back_populates="ticket_lines")
    verified_by = relationship("User")
