# Payment function services

from .amounts import PaymentValidationError, normalize_amount, normalize_payment, check_bounds
from .square_client import SquareClient, SquareClientError, SquarePaymentError, ProviderError
from .sendgrid_client import SendGridClient, EmailDeliveryError

__all__ = [
    "PaymentValidationError",
    "normalize_amount",
    "normalize_payment",
    "check_bounds",
    "SquareClient",
    "SquareClientError",
    "SquarePaymentError",
    "ProviderError",
    "SendGridClient",
    "EmailDeliveryError",
]
