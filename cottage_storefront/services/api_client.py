"""
Storefront API Client

HTTP client for the two backend functions: process-payment and send-email.
"""

import logging
from typing import Any, Optional

import httpx

from cottage_shared.models import (
    EmailMessage,
    EmailResponse,
    EmailStatus,
    PaymentRequest,
    PaymentResponse,
    PaymentStatus,
)

from ..core.config import StorefrontSettings
from ..errors import EmailSendError, PaymentDeclinedError, PaymentTransportError

logger = logging.getLogger(__name__)

# Markers of a missing email backend, honoured only in local development
LOCAL_DEV_SKIP_MARKERS = ("404", "Failed to fetch", "Email service not configured")


class StorefrontApiClient:
    """
    Client for the storefront's backend functions.

    Usage:
        async with StorefrontApiClient(settings) as api:
            response = await api.process_payment(request)
    """

    def __init__(
        self,
        settings: StorefrontSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._http_client = httpx.AsyncClient(
            timeout=settings.http_timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def __aenter__(self) -> "StorefrontApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ==================== Payments ====================

    async def process_payment(self, request: PaymentRequest) -> PaymentResponse:
        """
        Submit a tokenized payment.

        Raises:
            PaymentDeclinedError: the backend answered without COMPLETED
            PaymentTransportError: the backend could not be reached or
                answered with something other than a JSON object
        """
        url = self.settings.payment_url
        try:
            response = await self._http_client.post(url, json=request.to_wire())
        except httpx.HTTPError as e:
            logger.error(f"Payment request to {url} failed: {e}")
            raise PaymentTransportError(f"Payment request failed: {e}") from e

        data = self._json_object(response)
        if data is None:
            raise PaymentTransportError(
                f"Invalid response from payment service (status {response.status_code})"
            )

        error = data.get("error") or data.get("message")
        if not response.is_success:
            raise PaymentDeclinedError(
                error or f"Payment failed with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            result = PaymentResponse.model_validate(data)
        except ValueError as e:
            raise PaymentDeclinedError(error or "Payment failed", response.status_code) from e

        if result.status != PaymentStatus.COMPLETED:
            raise PaymentDeclinedError(error or "Payment failed", response.status_code)

        logger.info(f"Payment completed: {result.payment_id}")
        return result

    # ==================== Email ====================

    async def send_email(self, message: EmailMessage) -> EmailResponse:
        """
        Ask the backend to deliver one email.

        In local development a missing email backend yields LOCAL_DEV_SKIP
        instead of an error.

        Raises:
            EmailSendError: the email was not sent
        """
        try:
            return await self._send_email(message)
        except EmailSendError as e:
            if self.settings.local_dev and any(m in str(e) for m in LOCAL_DEV_SKIP_MARKERS):
                logger.info(f"Skipping email to {message.to} in local development: {e}")
                return EmailResponse(
                    status=EmailStatus.LOCAL_DEV_SKIP,
                    message="Email sending skipped in local development",
                )
            raise

    async def _send_email(self, message: EmailMessage) -> EmailResponse:
        url = self.settings.email_url
        try:
            response = await self._http_client.post(url, json=message.to_wire())
        except httpx.HTTPError as e:
            raise EmailSendError(f"Failed to fetch {url}: {e}") from e

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise EmailSendError(
                f"Invalid response from email service ({response.status_code}): {response.text}"
            )

        data = self._json_object(response)
        if data is None:
            raise EmailSendError(f"Failed to parse JSON response: {response.text}")

        if not response.is_success:
            raise EmailSendError(
                data.get("error") or f"Email sending failed with status {response.status_code}"
            )

        if data.get("status") != EmailStatus.SENT.value:
            raise EmailSendError(data.get("error") or "Email sending failed")

        return EmailResponse.model_validate(data)

    @staticmethod
    def _json_object(response: httpx.Response) -> Optional[dict[str, Any]]:
        try:
            data = response.json()
        except ValueError:
            return None
        return data if isinstance(data, dict) else None
