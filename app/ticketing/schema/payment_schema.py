from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class OrderEventIn(BaseModel):
    event_id: int
    quantity: int = Field(1, ge=1)


class OrderAttendeeIn(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone_number: str = Field(..., min_length=1)


class CreateOrderIn(BaseModel):
    events: List[OrderEventIn] = Field(..., min_length=1)
    attendees: List[OrderAttendeeIn] = Field(..., min_length=1)


class VerifyPaymentIn(BaseModel):
    payment_id: str
    order_id: str
    signature: str
    ticket_id: int


class RefundIn(BaseModel):
    ticket_id: int
    amount: Optional[float] = Field(None, gt=0)
    reason: Optional[str] = None


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    ticket_id: Optional[int] = None
    amount: float
    currency: str
    order_id: str
    gateway_payment_id: Optional[str] = None
    status: str
    payment_method: str
    refund_amount: Optional[float] = None
    refund_id: Optional[str] = None
    refunded_at: Optional[datetime] = None
    created_at: datetime
