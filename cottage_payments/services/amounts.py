"""
Payment request normalization.

Turns a PaymentRequest from the storefront into a Charge the processor
client can send, or raises PaymentValidationError with a message that is
safe to return to the caller.
"""

import math
import uuid
import logging
from typing import Optional, Union

from cottage_shared.models import PaymentRequest
from cottage_shared.money import to_minor_units, MINOR_UNITS_PER_MAJOR

from ..core.config import Settings
from ..models.payment import Charge

logger = logging.getLogger(__name__)


class PaymentValidationError(ValueError):
    """Client-correctable problem with a payment request"""
    pass


def normalize_amount(
    amount: Optional[Union[int, float]],
    amount_cents: Optional[int],
    minor_unit_threshold: int = 1000,
) -> int:
    """
    Resolve the charge amount in minor units.

    amount_cents is authoritative when present. Otherwise amount is
    interpreted by shape: fractional values are major units, integers
    above minor_unit_threshold are taken as minor units and smaller
    integers as major units. The integer rule is a guess kept for older
    clients; 1500 could mean either $15.00 or $1500.00.
    """
    if amount_cents is not None:
        cents = amount_cents
    elif amount is None or isinstance(amount, bool) or not math.isfinite(amount):
        raise PaymentValidationError("Invalid payment amount")
    elif isinstance(amount, float) and not amount.is_integer():
        cents = to_minor_units(amount)
    elif int(amount) > minor_unit_threshold:
        cents = int(amount)
    else:
        cents = int(amount) * MINOR_UNITS_PER_MAJOR

    if cents <= 0:
        raise PaymentValidationError("Invalid payment amount")
    return cents


def check_bounds(amount_cents: int, settings: Settings) -> None:
    """Reject amounts outside the configured window"""
    if amount_cents < settings.min_amount_cents:
        raise PaymentValidationError(
            f"Amount {amount_cents} is below the minimum of {settings.min_amount_cents}"
        )
    if amount_cents > settings.max_amount_cents:
        raise PaymentValidationError(
            f"Amount {amount_cents} exceeds the maximum of {settings.max_amount_cents}"
        )


def normalize_payment(request: PaymentRequest, settings: Settings) -> Charge:
    """Validate a payment request and build the Charge to submit"""
    source_id = (request.source_id or "").strip()
    if not source_id:
        raise PaymentValidationError("Missing sourceId (payment token)")

    amount_cents = normalize_amount(
        request.amount,
        request.amount_cents,
        minor_unit_threshold=settings.minor_unit_threshold,
    )

    currency = (request.currency or "").strip().upper()
    if currency not in settings.allowed_currency_list:
        raise PaymentValidationError(f"Unsupported currency: {request.currency}")

    check_bounds(amount_cents, settings)

    idempotency_key = request.idempotency_key
    if not idempotency_key:
        idempotency_key = str(uuid.uuid4())
        logger.debug("Generated idempotency key for request without one")

    return Charge(
        source_id=source_id,
        amount_cents=amount_cents,
        currency=currency,
        idempotency_key=idempotency_key,
    )
