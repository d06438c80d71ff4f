from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ticketing.schema.event_schema import EventOut, UTCDateTime

ExhibitionStatus = Literal["upcoming", "ongoing", "completed"]


class VenueIn(BaseModel):
    name: str = Field(..., min_length=1)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


class ExhibitionIn(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    start_date: UTCDateTime
    end_date: UTCDateTime
    venue: VenueIn
    status: ExhibitionStatus = "upcoming"
    image: Optional[str] = None
    event_ids: List[int] = []

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("End date must be after start date")
        return self


class ExhibitionUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    venue: Optional[VenueIn] = None
    status: Optional[ExhibitionStatus] = None
    image: Optional[str] = None
    event_ids: Optional[List[int]] = None


class ExhibitionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    start_date: datetime
    end_date: datetime
    venue: dict
    status: str
    image: Optional[str] = None
    organizer_id: Optional[int] = None
    events: List[EventOut] = []
