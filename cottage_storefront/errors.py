"""Storefront exceptions"""

from typing import Optional


class StorefrontError(Exception):
    """Base exception for checkout-side errors"""
    pass


class WidgetError(StorefrontError):
    """The hosted card widget could not be initialized or used"""
    pass


class WidgetBusyError(WidgetError):
    """A tokenization is already in flight"""
    pass


class PaymentError(StorefrontError):
    """A payment attempt did not complete"""
    pass


class PaymentDeclinedError(PaymentError):
    """The backend answered, but not with COMPLETED"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class PaymentTransportError(PaymentError):
    """The payment backend could not be reached or answered garbage"""
    pass


class EmailSendError(StorefrontError):
    """The email backend did not send the message"""
    pass
