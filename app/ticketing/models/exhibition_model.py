from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ticketing.controller.helpers import utcnow
from ticketing.database import Base

EXHIBITION_STATUSES = ("upcoming", "ongoing", "completed")


class Exhibition(Base):
    __tablename__ = "exhibitions"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False)
    venue = Column(JSON, nullable=False, default=dict)  # name, address, city, state, country
    status = Column(String, nullable=False, default="upcoming")
    image = Column(String, nullable=True)
    organizer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    organizer = relationship("User")
    events = relationship("Event", back_populates="exhibition")
