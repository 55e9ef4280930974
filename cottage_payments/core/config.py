"""Payment functions configuration"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache

SQUARE_PRODUCTION_URL = "https://connect.squareup.com"
SQUARE_SANDBOX_URL = "https://connect.squareupsandbox.com"


def _split_csv(value: Optional[str]) -> list[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Little Loaf Cottage Functions"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8888

    # Square
    square_access_token: Optional[str] = None
    square_location_id: Optional[str] = None
    square_environment: str = "sandbox"
    square_api_version: str = "2023-10-18"
    payment_note: str = "Little Loaf Cottage - Online Order"

    # Payment guard rails
    allowed_origins: str = "*"
    allowed_currencies: str = "USD"
    min_amount_cents: int = 50
    max_amount_cents: int = 1_000_000
    # Bare integer amounts above this are taken as minor units already
    minor_unit_threshold: int = 1000
    debug_payments: bool = False

    # SendGrid
    sendgrid_api_key: Optional[str] = None
    from_email: str = "no-reply@example.com"
    debug_send_email: bool = False

    http_timeout: float = 30.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def allowed_origin_list(self) -> list[str]:
        """Origins for CORS; permissive when unset"""
        return _split_csv(self.allowed_origins) or ["*"]

    @property
    def allowed_currency_list(self) -> list[str]:
        return [c.upper() for c in _split_csv(self.allowed_currencies)] or ["USD"]

    @property
    def square_base_url(self) -> str:
        if self.square_environment.strip().lower() == "production":
            return SQUARE_PRODUCTION_URL
        return SQUARE_SANDBOX_URL

    @property
    def square_configured(self) -> bool:
        """Check if Square credentials are configured"""
        return all([
            (self.square_access_token or "").strip(),
            (self.square_location_id or "").strip(),
        ])

    @property
    def email_configured(self) -> bool:
        return bool((self.sendgrid_api_key or "").strip())


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
