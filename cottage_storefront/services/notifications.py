"""
Order notifications

Customer confirmation and admin alert emails sent after a completed
payment. Delivery is best effort: failures are reported, never raised
into the checkout flow.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from cottage_shared.models import EmailMessage, EmailResponse
from cottage_shared.money import format_major

from ..core.config import StorefrontSettings
from ..errors import StorefrontError
from .api_client import StorefrontApiClient

logger = logging.getLogger(__name__)


class NotificationError(StorefrontError):
    """One or more order emails were not sent"""
    pass


@dataclass
class OrderSummary:
    """What the order emails talk about"""
    customer_email: str
    amount_minor_units: int
    order_id: Optional[str] = None

    @property
    def amount_display(self) -> str:
        return f"${format_major(self.amount_minor_units)}"


@dataclass
class NotificationOutcome:
    success: bool
    customer: Optional[EmailResponse] = None
    admin: Optional[EmailResponse] = None
    error: Optional[str] = None


def customer_confirmation(order: OrderSummary, business_name: str) -> EmailMessage:
    order_line = f"- Order ID: {order.order_id}\n" if order.order_id else ""
    order_html = f"<p><strong>Order ID:</strong> {order.order_id}</p>" if order.order_id else ""
    text = (
        "Hi there!\n\n"
        f"Thank you for your order at {business_name}!\n\n"
        "Order Details:\n"
        f"- Amount: {order.amount_display}\n"
        f"{order_line}\n"
        "We're preparing your delicious baked goods and will have them ready soon. "
        "You'll receive another email when your order is ready for pickup.\n\n"
        f"Thank you for choosing {business_name}!\n\n"
        "Best regards,\n"
        f"The {business_name} Team"
    )
    html = (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        '<h2 style="color: #e91e63;">Thank You for Your Order!</h2>'
        "<p>Hi there!</p>"
        f"<p>Thank you for your order at <strong>{business_name}</strong>!</p>"
        '<div style="background: #f8f9fa; padding: 20px; border-radius: 8px; margin: 20px 0;">'
        '<h3 style="color: #333; margin-top: 0;">Order Details:</h3>'
        f"<p><strong>Amount:</strong> {order.amount_display}</p>"
        f"{order_html}"
        "</div>"
        "<p>We're preparing your delicious baked goods and will have them ready soon. "
        "You'll receive another email when your order is ready for pickup.</p>"
        f"<p>Thank you for choosing {business_name}!</p>"
        f"<p>Best regards,<br>The {business_name} Team</p>"
        "</div>"
    )
    return EmailMessage(
        to=order.customer_email,
        subject=f"Thank You for Your Order - {business_name}",
        text=text,
        html=html,
    )


def admin_notification(order: OrderSummary, business_name: str, admin_email: str) -> EmailMessage:
    order_line = f"- Order ID: {order.order_id}\n" if order.order_id else ""
    order_html = f"<p><strong>Order ID:</strong> {order.order_id}</p>" if order.order_id else ""
    text = (
        "New Order Alert!\n\n"
        f"A new order has been placed on {business_name}:\n\n"
        "Order Details:\n"
        f"- Customer Email: {order.customer_email}\n"
        f"- Amount: {order.amount_display}\n"
        f"{order_line}"
        "- Payment Status: Completed\n\n"
        "Please prepare the order and notify the customer when ready.\n\n"
        "Order Management System"
    )
    html = (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        '<h2 style="color: #e91e63;">New Order Alert!</h2>'
        f"<p>A new order has been placed on <strong>{business_name}</strong>:</p>"
        '<div style="background: #fff3cd; border: 1px solid #ffeaa7; padding: 20px; '
        'border-radius: 8px; margin: 20px 0;">'
        '<h3 style="color: #856404; margin-top: 0;">Order Details:</h3>'
        f"<p><strong>Customer Email:</strong> {order.customer_email}</p>"
        f"<p><strong>Amount:</strong> {order.amount_display}</p>"
        f"{order_html}"
        '<p><strong>Payment Status:</strong> <span style="color: green;">Completed</span></p>'
        "</div>"
        "<p>Please prepare the order and notify the customer when ready.</p>"
        "<p><strong>Order Management System</strong></p>"
        "</div>"
    )
    return EmailMessage(
        to=admin_email,
        subject=f"New Order Received - {business_name}",
        text=text,
        html=html,
    )


class OrderNotifier:
    """
    Sends the post-payment emails.

    dispatch() is fire-and-forget: the task is tracked here until it
    finishes so it is not garbage collected mid-flight.
    """

    def __init__(self, api: StorefrontApiClient, settings: StorefrontSettings):
        self.api = api
        self.settings = settings
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def send_order_emails(self, order: OrderSummary) -> NotificationOutcome:
        """Send both emails concurrently; any failure fails the outcome"""
        business_name = self.settings.business_name
        admin_email = (self.settings.admin_email or "").strip()

        sends = [self.api.send_email(customer_confirmation(order, business_name))]
        if admin_email:
            sends.append(self.api.send_email(admin_notification(order, business_name, admin_email)))
        else:
            logger.warning("No admin email configured - skipping admin order notification")

        results = await asyncio.gather(*sends, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, StorefrontError):
                raise result
        errors = [result for result in results if isinstance(result, StorefrontError)]
        if errors:
            logger.warning(f"Order emails failed for order {order.order_id}: {errors[0]}")
            return NotificationOutcome(success=False, error=str(errors[0]))

        logger.info(f"Order emails sent for order {order.order_id}")
        return NotificationOutcome(
            success=True,
            customer=results[0],
            admin=results[1] if len(results) > 1 else None,
        )

    def dispatch(
        self,
        order: OrderSummary,
        on_failure: Optional[Callable[[str], None]] = None,
    ) -> asyncio.Task:
        """Start send_order_emails in the background; on_failure gets the error text"""
        task = asyncio.create_task(self.send_order_emails(order))
        self._tasks.add(task)

        def _done(finished: asyncio.Task) -> None:
            self._tasks.discard(finished)
            if finished.cancelled():
                return
            error = finished.exception()
            if error is not None:
                logger.error(f"Order email task crashed: {error}", exc_info=error)
                message = str(error)
            elif not finished.result().success:
                message = finished.result().error or "Email sending failed"
            else:
                return
            if on_failure is not None:
                on_failure(message)

        task.add_done_callback(_done)
        return task

    async def drain(self) -> None:
        """Wait for every dispatched send to finish"""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
