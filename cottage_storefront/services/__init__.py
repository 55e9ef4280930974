# Storefront services

from .api_client import StorefrontApiClient
from .checkout import CheckoutOrchestrator, CheckoutStep
from .notifications import NotificationError, NotificationOutcome, OrderNotifier, OrderSummary
from .payment_widget import (
    MountPoint,
    PaymentWidgetAdapter,
    TokenizeResult,
    TokenStatus,
    WidgetFieldError,
    WidgetState,
)

__all__ = [
    "StorefrontApiClient",
    "CheckoutOrchestrator",
    "CheckoutStep",
    "NotificationError",
    "NotificationOutcome",
    "OrderNotifier",
    "OrderSummary",
    "MountPoint",
    "PaymentWidgetAdapter",
    "TokenizeResult",
    "TokenStatus",
    "WidgetFieldError",
    "WidgetState",
]
