"""
Square Payments Client

Thin wrapper over Square's REST payments endpoint. Only create-payment is
needed: the card is tokenized in the browser and the token is charged here.
"""

import logging
from typing import Optional, Any

import httpx

from ..models.payment import Charge
from ..models.square import CreatePaymentRequest, Money, SquareError

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Base exception for third-party provider errors"""
    pass


class SquareClientError(ProviderError):
    """Square could not be reached or answered with something unusable"""
    pass


class SquarePaymentError(ProviderError):
    """Square rejected the payment"""

    def __init__(self, errors: list[dict[str, Any]], status_code: int):
        self.errors = errors
        self.status_code = status_code
        super().__init__(self.describe(errors))

    @staticmethod
    def describe(errors: list[dict[str, Any]]) -> str:
        """Join the human-readable detail of each Square error"""
        details = [
            SquareError.model_validate(err).detail or ""
            for err in errors
            if isinstance(err, dict)
        ]
        details = [d for d in details if d]
        return ", ".join(details) if details else "Payment processing failed"


class SquareClient:
    """
    Client for the Square Payments API.

    Usage:
        async with SquareClient(access_token, location_id, base_url) as square:
            payment = await square.create_payment(charge)
    """

    def __init__(
        self,
        access_token: Optional[str],
        location_id: Optional[str],
        base_url: str,
        api_version: str = "2023-10-18",
        note: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Square client.

        Args:
            access_token: Square access token (sent as a bearer token)
            location_id: Square location that receives the payment
            base_url: Sandbox or production API root
            api_version: Value for the Square-Version header
            note: Note attached to every payment
            timeout: HTTP timeout in seconds
            transport: Optional httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.location_id = location_id
        self.api_version = api_version
        self.note = note
        self._access_token = access_token
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def __aenter__(self) -> "SquareClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
            "Square-Version": self.api_version,
        }

    async def create_payment(self, charge: Charge) -> dict[str, Any]:
        """
        Charge a card token.

        Args:
            charge: Validated charge; its idempotency key is sent as-is

        Returns:
            Square's payment object

        Raises:
            SquarePaymentError: Square answered with a non-2xx status
            SquareClientError: Square was unreachable or the response was unusable
        """
        body = CreatePaymentRequest(
            source_id=charge.source_id,
            idempotency_key=charge.idempotency_key,
            amount_money=Money(amount=charge.amount_cents, currency=charge.currency),
            location_id=self.location_id or "",
            note=self.note,
        )

        try:
            response = await self._http_client.post(
                f"{self.base_url}/v2/payments",
                headers=self._headers(),
                json=body.model_dump(exclude_none=True),
            )
        except httpx.HTTPError as e:
            raise SquareClientError(f"Square request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            raise SquareClientError(
                f"Square returned a non-JSON response: {response.status_code}"
            )

        if response.is_error:
            errors = (data.get("errors") if isinstance(data, dict) else None) or []
            logger.warning(
                f"Square rejected payment: status={response.status_code} "
                f"codes={[e.get('code') for e in errors if isinstance(e, dict)]}"
            )
            raise SquarePaymentError(errors, response.status_code)

        payment = data.get("payment") if isinstance(data, dict) else None
        if not isinstance(payment, dict):
            raise SquareClientError("Square response did not include a payment")

        logger.info(f"Square payment {payment.get('id')} status={payment.get('status')}")
        return payment
