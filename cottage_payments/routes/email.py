"""Transactional email route"""

import re
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from cottage_shared.models import EmailMessage, EmailResponse, EmailStatus

from ..core.config import Settings
from .deps import app_settings
from ..services.sendgrid_client import SendGridClient, EmailDeliveryError
from .responses import failed, json_response, method_not_allowed, preflight

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Email"])

# Basic shape check, not RFC 5322
EMAIL_PATTERN = re.compile(r".+@.+\..+")


def is_valid_email(address: object) -> bool:
    return isinstance(address, str) and bool(EMAIL_PATTERN.search(address))


async def get_sendgrid_client(
    settings: Settings = Depends(app_settings),
) -> AsyncIterator[SendGridClient]:
    """Per-request SendGrid client, closed when the request ends"""
    client = SendGridClient(api_key=settings.sendgrid_api_key, timeout=settings.http_timeout)
    try:
        yield client
    finally:
        await client.close()


@router.options("/send-email", include_in_schema=False)
async def send_email_preflight():
    return preflight()


@router.api_route(
    "/send-email",
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def send_email_wrong_method():
    return method_not_allowed()


@router.post("/send-email")
async def send_email(
    request: Request,
    settings: Settings = Depends(app_settings),
    sendgrid: SendGridClient = Depends(get_sendgrid_client),
):
    """
    Send one transactional email through SendGrid.

    Always answers with a status envelope: SENT on success, FAILED with a
    best-effort message otherwise.
    """
    try:
        try:
            body = await request.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            return failed(400, "Invalid request body")

        try:
            message = EmailMessage.model_validate(body)
        except ValidationError:
            return failed(400, "Invalid request body")

        logger.info(
            f"send-email request: to={message.to} subject={message.subject!r} "
            f"from={message.from_address or settings.from_email}"
        )

        if not (message.to and message.subject and message.text):
            return failed(400, "Missing required fields: to, subject, text")

        if not is_valid_email(message.to):
            return failed(400, "Invalid recipient email address")

        if not settings.email_configured:
            logger.error("SENDGRID_API_KEY is not configured")
            return failed(500, "Email service not configured")

        try:
            status_code = await sendgrid.send(
                to=message.to,
                sender=message.from_address or settings.from_email,
                subject=message.subject,
                text=message.text,
                html=message.html,
            )
        except EmailDeliveryError as e:
            logger.error(f"SendGrid send error: {e.message} (status={e.status_code})")
            return failed(
                500,
                e.message,
                detail=e.detail if settings.debug_send_email else None,
            )

        result = EmailResponse(
            status=EmailStatus.SENT,
            message="Email sent successfully",
            detail={"statusCode": status_code} if settings.debug_send_email else None,
        )
        return json_response(200, result.to_wire())

    except Exception as e:
        logger.error(f"Unexpected send-email error: {e}", exc_info=True)
        return failed(500, "Unexpected server error")
