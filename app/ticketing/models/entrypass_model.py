from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from ticketing.controller.helpers import utcnow
from ticketing.database import Base


class EntryPass(Base):
    __tablename__ = "entry_passes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    head_count = Column(Integer, nullable=False)
    amount = Column(Float, nullable=False)
    payment_id = Column(String, nullable=False)
    transaction_info = Column(JSON, nullable=False, default=dict)
    status = Column(String, nullable=False, default="active")  # active, expired, used
    purchase_date = Column(DateTime, default=utcnow, nullable=False)
    expiry_date = Column(DateTime, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="entry_passes")
