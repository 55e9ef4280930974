# Payment function models

from .payment import Charge
from .square import Money, CreatePaymentRequest, SquareError

__all__ = [
    "Charge",
    "Money",
    "CreatePaymentRequest",
    "SquareError",
]
