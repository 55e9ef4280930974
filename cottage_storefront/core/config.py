"""Storefront configuration"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class StorefrontSettings(BaseSettings):
    """Storefront settings loaded from environment"""

    business_name: str = "Little Loaf Cottage"

    # Backend functions
    backend_base_url: str = "http://localhost:8888"
    payment_path: str = "/process-payment"
    email_path: str = "/send-email"
    http_timeout: float = 30.0

    # Hosted card widget
    square_application_id: Optional[str] = None
    square_location_id: Optional[str] = None
    square_environment: str = "sandbox"
    currency: str = "USD"

    # Notifications
    admin_email: Optional[str] = None

    # Cart persistence and UI timings (seconds)
    storage_key: str = "little-loaf-cottage-order"
    toast_seconds: float = 2.0
    welcome_toast_seconds: float = 4.0
    success_redirect_seconds: float = 5.0

    # Treat a missing email backend as "skipped"; never enable in production
    local_dev: bool = False

    class Config:
        env_prefix = "STOREFRONT_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def payment_url(self) -> str:
        return f"{self.backend_base_url.rstrip('/')}{self.payment_path}"

    @property
    def email_url(self) -> str:
        return f"{self.backend_base_url.rstrip('/')}{self.email_path}"

    @property
    def square_configured(self) -> bool:
        """Check if the card widget can be initialized"""
        return bool(
            (self.square_application_id or "").strip()
            and (self.square_location_id or "").strip()
        )


@lru_cache()
def get_settings() -> StorefrontSettings:
    """Get cached settings instance"""
    return StorefrontSettings()
