"""SendGrid mail-send client"""

import logging
from typing import Optional, Any

import httpx

from .square_client import ProviderError

logger = logging.getLogger(__name__)

SENDGRID_API_URL = "https://api.sendgrid.com"


class EmailDeliveryError(ProviderError):
    """SendGrid refused the message or could not be reached"""

    def __init__(self, message: str, detail: Optional[Any] = None, status_code: Optional[int] = None):
        self.message = message
        self.detail = detail
        self.status_code = status_code
        super().__init__(message)


class SendGridClient:
    """Client for SendGrid's v3 mail send API"""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = SENDGRID_API_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def __aenter__(self) -> "SendGridClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def send(
        self,
        to: str,
        sender: str,
        subject: str,
        text: str,
        html: Optional[str] = None,
    ) -> int:
        """
        Send one message.

        Returns:
            SendGrid's HTTP status code (202 on acceptance)

        Raises:
            EmailDeliveryError: transport failure or non-2xx answer
        """
        body = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": sender},
            "subject": subject,
            "content": [
                {"type": "text/plain", "value": text},
                {"type": "text/html", "value": html or text},
            ],
        }

        try:
            response = await self._http_client.post(
                f"{self.base_url}/v3/mail/send",
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                json=body,
            )
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Email sending failed: {e}")

        logger.info(f"SendGrid response: statusCode={response.status_code}")

        if response.is_error:
            detail = None
            message = "Email sending failed"
            try:
                detail = response.json()
            except ValueError:
                detail = response.text or None
            if isinstance(detail, dict) and detail.get("errors"):
                messages = [
                    err.get("message") for err in detail["errors"]
                    if isinstance(err, dict) and err.get("message")
                ]
                if messages:
                    message = ", ".join(messages)
            raise EmailDeliveryError(message, detail=detail, status_code=response.status_code)

        return response.status_code
