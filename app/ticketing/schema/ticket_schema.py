from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

TicketStatus = Literal["active", "used", "expired", "cancelled", "refunded"]


class AttendeeIn(BaseModel):
    name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None


class BookTicketIn(BaseModel):
    event_id: int
    show_id: int
    head_count: int = Field(1, ge=1)
    attendees: List[AttendeeIn] = []
    use_entry_pass: bool = False


class TicketLineIn(BaseModel):
    event_id: int
    quantity: int = Field(1, ge=1)


class BoxOfficeTicketIn(BaseModel):
    purchased_by: Optional[int] = None
    events: List[TicketLineIn] = Field(..., min_length=1)
    attendees: List[AttendeeIn] = []
    payment_method: str = "cash"


class VerifyTicketIn(BaseModel):
    qr_data: str = Field(..., min_length=1)


class VerifyQrIn(BaseModel):
    qr_code: str = Field(..., min_length=1)


class VerifyEventIn(BaseModel):
    ticket_id: int
    event_id: int


class MarkAttendedIn(BaseModel):
    ticket_id: int
    event_id: Optional[int] = None


class TicketStatusUpdate(BaseModel):
    status: TicketStatus


class TicketLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: int
    quantity: int
    verified: bool
    verified_at: Optional[datetime] = None
    verified_by_id: Optional[int] = None


class TicketOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_number: str
    purchased_by_id: int
    issued_by_id: Optional[int] = None
    show_id: Optional[int] = None
    entry_pass_id: Optional[int] = None
    head_count: int
    attendees: list = []
    total_amount: float
    payment_status: str
    payment_method: Optional[str] = None
    payment_id: Optional[str] = None
    status: str
    qr_code: str
    purchase_date: datetime
    lines: List[TicketLineOut] = []
