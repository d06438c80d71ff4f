from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ticketing.controller.helpers import utcnow
from ticketing.database import Base

EVENT_STATUSES = ("draft", "published", "cancelled", "completed")


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    events = relationship("Event", back_populates="category")


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False)
    venue = Column(String, nullable=False)
    price = Column(Float, nullable=False, default=0)
    capacity = Column(Integer, nullable=False)
    tickets_sold = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default="draft")
    image = Column(String, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    features = Column(JSON, nullable=False, default=list)
    terms_and_conditions = Column(Text, nullable=True)
    average_rating = Column(Float, nullable=False, default=0)

    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    organizer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    exhibition_id = Column(Integer, ForeignKey("exhibitions.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="events")
    organizer = relationship("User")
    exhibition = relationship("Exhibition", back_populates="events")
    shows = relationship("Show", back_populates="event", cascade="all, delete-orphan",
                         order_by="Show.starts_at")
    ratings = relationship("Rating", back_populates="event", cascade="all, delete-orphan")
    ticket_lines = relationship("TicketEvent", back_populates="event")


class Show(Base):
    __tablename__ = "shows"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    starts_at = Column(DateTime, nullable=False)
    ends_at = Column(DateTime, nullable=True)
    total_seats = Column(Integer, nullable=False)
    booked_seats = Column(Integer, nullable=False, default=0)

    event = relationship("Event", back_populates="shows")
    tickets = relationship("Ticket", back_populates="show")

    @property
    def available_seats(self):
        return self.total_seats - (self.booked_seats or 0)
