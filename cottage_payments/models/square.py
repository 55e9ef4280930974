"""Square Payments API models"""

from pydantic import BaseModel
from typing import Optional


class Money(BaseModel):
    """Square amount_money object"""
    amount: int
    currency: str = "USD"


class CreatePaymentRequest(BaseModel):
    """Body of Square POST /v2/payments"""
    source_id: str
    idempotency_key: str
    amount_money: Money
    location_id: str
    note: Optional[str] = None


class SquareError(BaseModel):
    """One entry of Square's errors array"""
    category: Optional[str] = None
    code: Optional[str] = None
    detail: Optional[str] = None
    field: Optional[str] = None

    class Config:
        extra = "allow"
