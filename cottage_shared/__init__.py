# Shared wire contracts

from .models import (
    PaymentRequest,
    PaymentResponse,
    PaymentStatus,
    EmailMessage,
    EmailResponse,
    EmailStatus,
)
from .money import to_minor_units, format_major

__all__ = [
    "PaymentRequest",
    "PaymentResponse",
    "PaymentStatus",
    "EmailMessage",
    "EmailResponse",
    "EmailStatus",
    "to_minor_units",
    "format_major",
]
