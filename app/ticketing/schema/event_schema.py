from datetime import datetime
from typing import Annotated, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

from ticketing.controller.helpers import to_naive_utc

EventStatus = Literal["draft", "published", "cancelled", "completed"]

# Incoming timestamps are stored as naive UTC
UTCDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]


# ------------------ Categories ------------------
class CategoryIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=60)
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=60)
    description: Optional[str] = None


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None


# ------------------ Shows ------------------
class ShowIn(BaseModel):
    starts_at: UTCDateTime
    ends_at: Optional[UTCDateTime] = None
    total_seats: int = Field(..., ge=1)


class ShowUpdate(BaseModel):
    starts_at: Optional[UTCDateTime] = None
    ends_at: Optional[UTCDateTime] = None
    total_seats: Optional[int] = Field(None, ge=1)


class ShowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    starts_at: datetime
    ends_at: Optional[datetime] = None
    total_seats: int
    booked_seats: int
    available_seats: int


# ------------------ Events ------------------
class EventIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    start_date: UTCDateTime
    end_date: UTCDateTime
    venue: str = Field(..., min_length=1)
    category_id: Optional[int] = None
    price: float = Field(0, ge=0)
    capacity: int = Field(..., ge=1)
    status: EventStatus = "draft"
    image: Optional[str] = None
    tags: List[str] = []
    features: List[str] = []
    terms_and_conditions: Optional[str] = None
    exhibition_id: Optional[int] = None
    shows: List[ShowIn] = []

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("End date must be after start date")
        return self


class EventUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    venue: Optional[str] = None
    category_id: Optional[int] = None
    price: Optional[float] = Field(None, ge=0)
    capacity: Optional[int] = Field(None, ge=1)
    status: Optional[EventStatus] = None
    image: Optional[str] = None
    tags: Optional[List[str]] = None
    features: Optional[List[str]] = None
    terms_and_conditions: Optional[str] = None
    exhibition_id: Optional[int] = None


class EventStatusUpdate(BaseModel):
    status: EventStatus


class EventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    start_date: datetime
    end_date: datetime
    venue: str
    price: float
    capacity: int
    tickets_sold: int
    status: str
    image: Optional[str] = None
    tags: List[str] = []
    features: List[str] = []
    terms_and_conditions: Optional[str] = None
    average_rating: float
    category_id: Optional[int] = None
    organizer_id: Optional[int] = None
    exhibition_id: Optional[int] = None
    created_at: datetime


class EventDetailOut(EventOut):
    category: Optional[CategoryOut] = None
    shows: List[ShowOut] = []
