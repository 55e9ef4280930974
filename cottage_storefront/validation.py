"""Delivery details form and its client-side validation"""

import re
from typing import Optional

from pydantic import BaseModel

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

REQUIRED_FIELDS = [
    ("name", "Name is required"),
    ("email", "Email is required"),
    ("phone", "Phone is required"),
    ("address", "Address is required"),
    ("city", "City is required"),
    ("zip_code", "ZIP code is required"),
    ("delivery_date", "Delivery date is required"),
    ("delivery_time", "Delivery time is required"),
]


class DeliveryDetails(BaseModel):
    """Customer and delivery form; starts empty and is filled interactively"""
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    zip_code: str = ""
    delivery_date: str = ""
    delivery_time: str = ""
    special_instructions: Optional[str] = None


def validate_delivery_details(details: DeliveryDetails) -> dict[str, str]:
    """
    Return {field: message} for every problem; empty when the form is valid.

    The payment backend does not repeat these checks.
    """
    errors: dict[str, str] = {}
    for field, message in REQUIRED_FIELDS:
        if not getattr(details, field).strip():
            errors[field] = message

    if "email" not in errors and not EMAIL_PATTERN.search(details.email):
        errors["email"] = "Email is invalid"

    return errors
