from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EntryPassPurchaseIn(BaseModel):
    head_count: int = Field(..., ge=1)
    amount: float = Field(..., gt=0)
    payment_id: str = Field(..., min_length=1)
    transaction_info: Optional[dict] = None


class EntryPassOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    head_count: int
    amount: float
    payment_id: str
    transaction_info: dict = {}
    status: str
    purchase_date: datetime
    expiry_date: datetime
