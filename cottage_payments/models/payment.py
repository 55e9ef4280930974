"""Normalized charge handed to the processor client"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Charge:
    """A validated payment request, amounts in minor units"""
    source_id: str
    amount_cents: int
    currency: str
    idempotency_key: str
