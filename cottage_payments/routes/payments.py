"""Payment processing route"""

import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from cottage_shared.models import PaymentRequest, PaymentResponse, PaymentStatus

from ..core.config import Settings
from .deps import app_settings
from ..services.amounts import PaymentValidationError, normalize_payment
from ..services.square_client import SquareClient, SquarePaymentError
from .responses import failed, json_response, method_not_allowed, preflight

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Payments"])


async def get_square_client(
    settings: Settings = Depends(app_settings),
) -> AsyncIterator[SquareClient]:
    """Per-request Square client, closed when the request ends"""
    client = SquareClient(
        access_token=settings.square_access_token,
        location_id=settings.square_location_id,
        base_url=settings.square_base_url,
        api_version=settings.square_api_version,
        note=settings.payment_note,
        timeout=settings.http_timeout,
    )
    try:
        yield client
    finally:
        await client.close()


def _describe_validation_error(error: ValidationError) -> str:
    first = error.errors()[0] if error.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()))
    if field:
        return f"Invalid request body: {field}: {first.get('msg')}"
    return "Invalid request body"


@router.options("/process-payment", include_in_schema=False)
async def process_payment_preflight():
    return preflight()


@router.api_route(
    "/process-payment",
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def process_payment_wrong_method():
    return method_not_allowed()


@router.post("/process-payment")
async def process_payment(
    request: Request,
    settings: Settings = Depends(app_settings),
    square: SquareClient = Depends(get_square_client),
):
    """
    Charge a tokenized card.

    Validation failures and processor rejections answer 400, missing
    server configuration and unexpected failures answer 500. Raw
    processor errors and exception detail are only included when
    DEBUG_PAYMENTS is on.
    """
    try:
        try:
            body = await request.json()
        except ValueError:
            return failed(400, "Invalid JSON body")

        if not isinstance(body, dict):
            return failed(400, "Invalid request body")

        try:
            charge = normalize_payment(PaymentRequest.model_validate(body), settings)
        except ValidationError as e:
            logger.info(f"Rejected payment request: {_describe_validation_error(e)}")
            return failed(400, _describe_validation_error(e))
        except PaymentValidationError as e:
            logger.info(f"Rejected payment request: {e}")
            return failed(400, str(e))

        if not settings.square_configured:
            logger.error("Square access token or location id is not configured")
            return failed(500, "Server configuration error")

        try:
            payment = await square.create_payment(charge)
        except SquarePaymentError as e:
            return failed(
                400,
                str(e),
                squareErrors=e.errors if settings.debug_payments else None,
            )

        logger.info(
            f"Payment {payment.get('id')} completed: {charge.amount_cents} {charge.currency}"
        )
        result = PaymentResponse(
            status=PaymentStatus.COMPLETED,
            payment=payment,
            message="Payment processed successfully",
        )
        return json_response(200, result.to_wire())

    except Exception as e:
        logger.error(f"Payment processing failed: {e}", exc_info=True)
        return failed(
            500,
            "Internal server error",
            message="Payment processing failed. Please try again.",
            detail=repr(e) if settings.debug_payments else None,
        )
