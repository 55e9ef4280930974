"""
Checkout Orchestrator

Drives one order from the delivery form through payment to the success
screen. A new order starts a new orchestrator.
"""

import asyncio
import logging
import uuid
from enum import Enum
from typing import Callable, Optional

from cottage_shared.models import PaymentRequest, PaymentResponse
from cottage_shared.money import format_major

from ..core.cart import CartStore
from ..core.config import StorefrontSettings
from ..errors import PaymentError, WidgetError
from ..validation import DeliveryDetails, validate_delivery_details
from .api_client import StorefrontApiClient
from .notifications import OrderNotifier, OrderSummary
from .payment_widget import DEFAULT_BLOCKING_MESSAGE, PaymentWidgetAdapter

logger = logging.getLogger(__name__)

EMAIL_WARNING = (
    "Payment successful, but failed to send confirmation emails. "
    "Your order has been processed."
)


class CheckoutStep(str, Enum):
    EMPTY_CART = "empty_cart"
    FORM = "form"
    PAYMENT = "payment"
    SUCCESS = "success"


def new_idempotency_key() -> str:
    return str(uuid.uuid4())


class CheckoutOrchestrator:
    """
    Checkout state machine: FORM -> PAYMENT -> SUCCESS, with PAYMENT -> FORM
    for back navigation. An empty cart shows EMPTY_CART instead of FORM or
    PAYMENT.

    Usage:
        async with CheckoutOrchestrator(cart, widget, api, notifier, settings) as checkout:
            await checkout.submit_details(details)
            await checkout.pay()
    """

    def __init__(
        self,
        cart: CartStore,
        widget: PaymentWidgetAdapter,
        api: StorefrontApiClient,
        notifier: OrderNotifier,
        settings: StorefrontSettings,
        idempotency_key_factory: Callable[[], str] = new_idempotency_key,
        on_navigate: Optional[Callable[[], None]] = None,
    ):
        self.cart = cart
        self.widget = widget
        self.api = api
        self.notifier = notifier
        self.settings = settings
        self._new_key = idempotency_key_factory
        self._on_navigate = on_navigate

        self.details = DeliveryDetails()
        self.form_errors: dict[str, str] = {}
        self.error: Optional[str] = None
        self.warning: Optional[str] = None
        self.payment_result: Optional[PaymentResponse] = None

        self._step = CheckoutStep.FORM
        self._paying = False
        self._alive = True
        self._redirect: Optional[asyncio.TimerHandle] = None

    async def __aenter__(self) -> "CheckoutOrchestrator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ==================== State ====================

    @property
    def step(self) -> CheckoutStep:
        if self._step in (CheckoutStep.FORM, CheckoutStep.PAYMENT) and self.cart.is_empty:
            return CheckoutStep.EMPTY_CART
        return self._step

    @property
    def is_processing(self) -> bool:
        return self._paying

    @property
    def can_pay(self) -> bool:
        return (
            self._alive
            and self.step == CheckoutStep.PAYMENT
            and self.widget.is_ready
            and not self._paying
            and not self.widget.is_tokenizing
        )

    @property
    def pay_label(self) -> str:
        return f"Pay ${format_major(self.cart.total())}"

    # ==================== Transitions ====================

    async def submit_details(self, details: DeliveryDetails) -> bool:
        """Validate the form and, if clean, move to PAYMENT and mount the widget"""
        if self.step != CheckoutStep.FORM:
            return False

        self.details = details
        self.form_errors = validate_delivery_details(details)
        if self.form_errors:
            logger.debug(f"Delivery details rejected: {sorted(self.form_errors)}")
            return False

        self._step = CheckoutStep.PAYMENT
        self.error = None
        try:
            await self.widget.open()
        except WidgetError as e:
            if self._alive and self._step == CheckoutStep.PAYMENT:
                self.error = str(e)
        return True

    async def back_to_form(self) -> None:
        """Leave PAYMENT for FORM, tearing the widget down; ignored mid-payment"""
        if self._step != CheckoutStep.PAYMENT or self._paying:
            return
        self._step = CheckoutStep.FORM
        self.error = None
        await self.widget.close()

    async def pay(self) -> Optional[PaymentResponse]:
        """
        Run one payment attempt.

        Returns the COMPLETED response, or None when the attempt was ignored
        or failed (the reason is left in .error).
        """
        if not self.can_pay:
            return None

        self._paying = True
        self.error = None
        try:
            return await self._attempt()
        finally:
            self._paying = False

    async def _attempt(self) -> Optional[PaymentResponse]:
        try:
            token = await self.widget.tokenize()
        except WidgetError as e:
            if self._alive:
                self.error = str(e)
            return None

        if not self._alive:
            return None

        if not token.ok:
            messages = self.widget.blocking_messages(token)
            if messages:
                self.error = " ".join(messages)
            elif not token.errors:
                self.error = DEFAULT_BLOCKING_MESSAGE
            return None

        request = PaymentRequest(
            source_id=token.token,
            amount_cents=self.cart.total(),
            currency=self.settings.currency,
            idempotency_key=self._new_key(),
        )

        try:
            response = await self.api.process_payment(request)
        except PaymentError as e:
            logger.warning(f"Payment attempt {request.idempotency_key} failed: {e}")
            if self._alive:
                self.error = str(e)
            return None

        if not self._alive:
            logger.info(f"Payment {response.payment_id} completed after checkout was closed")
            return response

        await self._complete(request, response)
        return response

    async def _complete(self, request: PaymentRequest, response: PaymentResponse) -> None:
        self.payment_result = response
        order = OrderSummary(
            customer_email=self.details.email.strip(),
            amount_minor_units=request.amount_cents,
            order_id=response.payment_id,
        )
        self.notifier.dispatch(order, on_failure=self._on_notification_failure)
        self.cart.clear()
        self._step = CheckoutStep.SUCCESS
        logger.info(f"Order {response.payment_id} paid")
        await self.widget.close()
        self._schedule_redirect()

    def _on_notification_failure(self, message: str) -> None:
        logger.warning(f"Order confirmation emails not sent: {message}")
        if self._alive:
            self.warning = EMAIL_WARNING

    def _schedule_redirect(self) -> None:
        if self._on_navigate is None:
            return
        loop = asyncio.get_running_loop()
        self._redirect = loop.call_later(self.settings.success_redirect_seconds, self._navigate)

    def _navigate(self) -> None:
        self._redirect = None
        if self._alive and self._on_navigate is not None:
            self._on_navigate()

    # ==================== Teardown ====================

    async def close(self) -> None:
        """Unmount: results that arrive later no longer touch this instance"""
        self._alive = False
        if self._redirect is not None:
            self._redirect.cancel()
            self._redirect = None
        await self.widget.close()
