"""Wire models shared by the storefront and the payment functions"""

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field


class PaymentStatus(str, Enum):
    """Processor verdict relayed by the payment backend"""
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class EmailStatus(str, Enum):
    """Outcome of a send-email call"""
    SENT = "SENT"
    FAILED = "FAILED"
    # Only produced client-side when local development mode is enabled
    LOCAL_DEV_SKIP = "LOCAL_DEV_SKIP"


class PaymentRequest(BaseModel):
    """
    Body of POST /process-payment.

    sourceId is the single-use token produced by the hosted card widget.
    amountCents is always minor units; amount is the legacy field whose
    unit is guessed by the backend.
    """
    source_id: Optional[str] = Field(default=None, alias="sourceId")
    amount: Optional[Union[int, float]] = None
    amount_cents: Optional[int] = Field(default=None, alias="amountCents")
    currency: str = "USD"
    idempotency_key: Optional[str] = Field(default=None, alias="idempotencyKey")

    class Config:
        populate_by_name = True

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class PaymentResponse(BaseModel):
    """Body returned by POST /process-payment"""
    status: PaymentStatus
    payment: Optional[dict[str, Any]] = None
    message: Optional[str] = None
    error: Optional[str] = None
    square_errors: Optional[list[dict[str, Any]]] = Field(default=None, alias="squareErrors")
    detail: Optional[str] = None

    class Config:
        populate_by_name = True

    @property
    def payment_id(self) -> Optional[str]:
        return (self.payment or {}).get("id")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class EmailMessage(BaseModel):
    """Body of POST /send-email"""
    to: Optional[str] = None
    subject: Optional[str] = None
    text: Optional[str] = None
    html: Optional[str] = None
    from_address: Optional[str] = Field(default=None, alias="from")

    class Config:
        populate_by_name = True

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class EmailResponse(BaseModel):
    """Body returned by POST /send-email"""
    status: EmailStatus
    message: Optional[str] = None
    error: Optional[str] = None
    detail: Optional[Any] = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True, mode="json")
