from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from ticketing.constant_file import currency
from ticketing.controller.helpers import utcnow
from ticketing.database import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    ticket_id = Column(Integer, ForeignKey("tickets.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Float, nullable=False)
    currency = Column(String, nullable=False, default=currency)
    order_id = Column(String, nullable=False, unique=True, index=True)
    gateway_payment_id = Column(String, nullable=True, index=True)
    signature = Column(String, nullable=True)
    status = Column(String, nullable=False, default="initiated")  # initiated, completed, failed, refunded
    payment_method = Column(String, nullable=False, default="mock")
    refund_amount = Column(Float, nullable=True)
    refund_id = Column(String, nullable=True)
    refunded_at = Column(DateTime, nullable=True)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="payments")
    ticket = relationship("Ticket", back_populates="payments")
