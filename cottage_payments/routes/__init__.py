# Function routes

from .payments import router as payments_router
from .email import router as email_router

__all__ = ["payments_router", "email_router"]
