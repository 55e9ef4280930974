"""
Payment Widget Adapter

Drives the hosted card-entry widget: acquires it, binds it to a mount
point, tokenizes on demand and releases it. The widget itself (card
fields, inline validation) is an injected capability.
"""

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Protocol

from ..errors import WidgetError, WidgetBusyError

logger = logging.getLogger(__name__)

# Only these tokenization error codes block the user; card field errors
# are shown inline by the widget itself.
BLOCKING_ERROR_CODES = {"TOKENIZATION_ERROR", "NETWORK_ERROR", "SERVER_ERROR"}

DEFAULT_BLOCKING_MESSAGE = "Payment processing failed. Please try again."

SDK_ERROR_MESSAGES = {
    "InvalidApplicationIdError": "Invalid Square Application ID. Please verify your Application ID.",
    "InvalidLocationIdError": "Invalid Square Location ID. Please verify your Location ID.",
    "ApplicationIdEnvironmentMismatchError": (
        "Application ID environment mismatch. "
        "Ensure your Application ID matches the environment setting."
    ),
}


class WidgetState(str, Enum):
    """Lifecycle of the card widget"""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class TokenStatus(str, Enum):
    OK = "OK"
    ERROR = "ERROR"


@dataclass
class WidgetFieldError:
    """One error reported by the widget's tokenize()"""
    code: str
    detail: Optional[str] = None
    field: Optional[str] = None


@dataclass
class TokenizeResult:
    """Normalized tokenize() outcome"""
    status: TokenStatus
    token: Optional[str] = None
    errors: list[WidgetFieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == TokenStatus.OK and bool(self.token)

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> "TokenizeResult":
        raw = raw or {}
        errors = [
            WidgetFieldError(
                code=str(err.get("code") or ""),
                detail=err.get("detail") or err.get("message"),
                field=err.get("field"),
            )
            for err in raw.get("errors") or []
            if isinstance(err, dict)
        ]
        status = TokenStatus.OK if raw.get("status") == TokenStatus.OK.value else TokenStatus.ERROR
        return cls(status=status, token=raw.get("token"), errors=errors)


@dataclass
class MountPoint:
    """UI container the widget renders its fields into"""
    element_id: str = "card-container"
    children: list[Any] = field(default_factory=list)

    def clear(self) -> None:
        self.children.clear()


class CardWidget(Protocol):
    """Hosted card input, as handed out by the payments provider"""

    async def attach(self, mount: MountPoint) -> None: ...

    async def tokenize(self) -> dict[str, Any]: ...

    def destroy(self) -> Any: ...


class PaymentsProvider(Protocol):
    async def card(self) -> CardWidget: ...


PaymentsFactory = Callable[[str, str, str], Awaitable[PaymentsProvider]]


class PaymentWidgetAdapter:
    """
    Owns one card widget for the duration of a payment step.

    Usage:
        async with PaymentWidgetAdapter(factory, app_id, location_id) as widget:
            result = await widget.tokenize()
    """

    def __init__(
        self,
        payments_factory: PaymentsFactory,
        application_id: Optional[str],
        location_id: Optional[str],
        environment: str = "sandbox",
        mount: Optional[MountPoint] = None,
    ):
        self._payments_factory = payments_factory
        self.application_id = (application_id or "").strip()
        self.location_id = (location_id or "").strip()
        self.environment = environment
        self.mount = mount or MountPoint()
        self.state = WidgetState.UNINITIALIZED
        self.error: Optional[str] = None
        self._payments: Optional[PaymentsProvider] = None
        self._card: Optional[CardWidget] = None
        self._tokenizing = False
        # Bumped by close(); an open() that sees a different value was abandoned
        self._generation = 0

    @property
    def is_ready(self) -> bool:
        return self.state == WidgetState.READY

    @property
    def is_tokenizing(self) -> bool:
        return self._tokenizing

    async def __aenter__(self) -> "PaymentWidgetAdapter":
        try:
            await self.open()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ==================== Lifecycle ====================

    async def open(self) -> None:
        """
        Acquire and bind the widget.

        Raises:
            WidgetError: configuration, acquisition or binding failed; the
                adapter is left FAILED with the message in .error
        """
        if self.state in (WidgetState.INITIALIZING, WidgetState.READY):
            return

        generation = self._generation
        self.state = WidgetState.INITIALIZING
        self.error = None
        card: Optional[CardWidget] = None

        try:
            if not (self.application_id and self.location_id):
                raise WidgetError(
                    "Square configuration not complete. "
                    "Please set your Application ID and Location ID."
                )

            try:
                payments = await self._payments_factory(
                    self.application_id, self.location_id, self.environment
                )
            except Exception as e:
                raise WidgetError(self._describe_init_error(e)) from e

            try:
                card = await payments.card()
            except Exception as e:
                raise WidgetError(f"Failed to create payment card: {e or 'Unknown error'}") from e

            if generation != self._generation:
                await self._destroy(card)
                return

            try:
                await card.attach(self.mount)
            except Exception as e:
                if "already been attached" not in str(e):
                    raise WidgetError(f"Failed to attach payment form: {e or 'Unknown error'}") from e
                logger.debug("Card widget was already attached")

            if not self.mount.children:
                raise WidgetError("Card form failed to attach - no elements found in container")

        except WidgetError as e:
            if generation != self._generation:
                logger.debug(f"Ignoring widget error after teardown: {e}")
                return
            if card is not None:
                await self._destroy(card)
            self.state = WidgetState.FAILED
            self.error = str(e)
            logger.warning(f"Payment widget failed to initialize: {e}")
            raise

        if generation != self._generation:
            await self._destroy(card)
            return

        self._payments = payments
        self._card = card
        self.state = WidgetState.READY
        logger.info("Payment widget ready")

    async def close(self) -> None:
        """Release the widget and clear the mount; safe in any state"""
        self._generation += 1
        card = self._card
        self._card = None
        self._payments = None
        self._tokenizing = False
        self.mount.clear()
        if card is not None:
            await self._destroy(card)
        self.state = WidgetState.UNINITIALIZED
        self.error = None

    async def _destroy(self, card: CardWidget) -> None:
        try:
            result = card.destroy()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.debug(f"Card widget destroy failed during teardown: {e}")

    @staticmethod
    def _describe_init_error(error: Exception) -> str:
        name = getattr(error, "name", None) or type(error).__name__
        if name in SDK_ERROR_MESSAGES:
            return SDK_ERROR_MESSAGES[name]
        return f"Square Payments initialization failed: {error or name or 'Unknown error'}"

    # ==================== Tokenization ====================

    async def tokenize(self) -> TokenizeResult:
        """
        Exchange the entered card for a single-use token.

        Raises:
            WidgetBusyError: another tokenize() is still running
            WidgetError: the widget is not READY or the call itself failed
        """
        if self.state != WidgetState.READY or self._card is None:
            raise WidgetError("Payment form not ready. Please try again.")
        if self._tokenizing:
            raise WidgetBusyError("A payment is already being processed.")
        if not self.mount.children:
            raise WidgetError(
                "Payment form not properly initialized. Please refresh the page and try again."
            )

        self._tokenizing = True
        try:
            raw = await self._card.tokenize()
        except Exception as e:
            raise WidgetError(f"Payment processing failed: {e or 'Unknown error'}") from e
        finally:
            self._tokenizing = False

        return TokenizeResult.from_raw(raw)

    @staticmethod
    def blocking_messages(result: TokenizeResult) -> list[str]:
        """Messages worth a banner, de-duplicated in order"""
        messages: list[str] = []
        for err in result.errors:
            if err.code not in BLOCKING_ERROR_CODES:
                continue
            message = err.detail or DEFAULT_BLOCKING_MESSAGE
            if message not in messages:
                messages.append(message)
        return messages
