"""
Cart store.

Holds the in-progress order for one browser session and mirrors it into a
key-value store after every change. Entries are kept flat, one per unit
added; the grouped view is derived on read, so the total can never drift
from the entries.
"""

import json
import time
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union
from decimal import Decimal

from cottage_shared.money import to_minor_units

from .storage import KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "little-loaf-cottage-order"


@dataclass(frozen=True)
class MenuItem:
    """Something that can be added to the cart"""
    name: str
    unit_price_minor_units: int

    def __post_init__(self):
        if self.unit_price_minor_units < 0:
            raise ValueError("unit_price_minor_units must be >= 0")

    @classmethod
    def from_major(cls, name: str, price: Union[int, float, str, Decimal]) -> "MenuItem":
        """Build from a menu price in dollars, rounding to the nearest cent"""
        return cls(name=name, unit_price_minor_units=to_minor_units(price))


@dataclass(frozen=True)
class LineItem:
    """Grouped cart row"""
    name: str
    unit_price_minor_units: int
    quantity: int

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        if self.unit_price_minor_units < 0:
            raise ValueError("unit_price_minor_units must be >= 0")

    @property
    def total_minor_units(self) -> int:
        return self.unit_price_minor_units * self.quantity


@dataclass(frozen=True)
class Toast:
    """Transient user-facing message"""
    message: str
    expires_at: float


class CartStore:
    """
    Session cart with durable mirroring.

    Usage:
        cart = CartStore(JsonFileStore("order.json"))
        cart.add(MenuItem.from_major("Artisan Sourdough", 12))
        cart.total()  # 1200
    """

    def __init__(
        self,
        storage: Optional[KeyValueStore] = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
        toast_seconds: float = 2.0,
        welcome_toast_seconds: float = 4.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.storage = storage if storage is not None else MemoryStore()
        self.storage_key = storage_key
        self.toast_seconds = toast_seconds
        self.welcome_toast_seconds = welcome_toast_seconds
        self._clock = clock
        self._entries: list[MenuItem] = []
        self._toast: Optional[Toast] = None
        self._restore()

    # ==================== Persistence ====================

    def _restore(self) -> None:
        """Load the persisted order, announcing it once if non-empty"""
        self._entries = self._load()
        if self._entries:
            count = len(self._entries)
            self._notify(
                f"Welcome back! You have {count} item{'s' if count > 1 else ''} in your order.",
                self.welcome_toast_seconds,
            )

    def _load(self) -> list[MenuItem]:
        try:
            stored = self.storage.get(self.storage_key)
            if not stored:
                return []
            raw = json.loads(stored)
            return [
                MenuItem(name=str(entry["name"]), unit_price_minor_units=int(entry["unitPriceMinorUnits"]))
                for entry in raw
            ]
        except Exception as e:
            logger.warning(f"Failed to load order from storage: {e}")
            return []

    def _save(self) -> None:
        payload = json.dumps([
            {"name": entry.name, "unitPriceMinorUnits": entry.unit_price_minor_units}
            for entry in self._entries
        ])
        try:
            self.storage.set(self.storage_key, payload)
        except Exception as e:
            logger.warning(f"Failed to save order to storage: {e}")

    # ==================== Notifications ====================

    def _notify(self, message: str, seconds: float) -> None:
        self._toast = Toast(message=message, expires_at=self._clock() + seconds)

    @property
    def notification(self) -> Optional[str]:
        """Current transient message, or None once it has expired"""
        if self._toast and self._clock() < self._toast.expires_at:
            return self._toast.message
        return None

    def dismiss_notification(self) -> None:
        self._toast = None

    # ==================== Mutations ====================

    def add(self, item: MenuItem) -> None:
        """Add one unit of item; grouping by name happens in items()"""
        self._entries.append(item)
        self._save()
        self._notify(f"{item.name} added to order!", self.toast_seconds)

    def remove(self, index: int) -> None:
        """Remove the flat entry at index; out-of-range is a no-op"""
        if not 0 <= index < len(self._entries):
            return
        del self._entries[index]
        self._save()

    def remove_one(self, name: str) -> None:
        """Remove the most recently added unit of name, if any"""
        for index in range(len(self._entries) - 1, -1, -1):
            if self._entries[index].name == name:
                self.remove(index)
                return

    def clear(self) -> None:
        """Empty the cart and its persisted copy"""
        self._entries = []
        self._save()

    # ==================== Views ====================

    def entries(self) -> list[MenuItem]:
        """Flat, ungrouped entries (the indices remove() works on)"""
        return list(self._entries)

    def items(self) -> list[LineItem]:
        """Entries grouped by name in first-added order; name is the identity, first price wins"""
        grouped: dict[str, LineItem] = {}
        for entry in self._entries:
            existing = grouped.get(entry.name)
            if existing:
                grouped[entry.name] = LineItem(
                    name=existing.name,
                    unit_price_minor_units=existing.unit_price_minor_units,
                    quantity=existing.quantity + 1,
                )
            else:
                grouped[entry.name] = LineItem(
                    name=entry.name,
                    unit_price_minor_units=entry.unit_price_minor_units,
                    quantity=1,
                )
        return list(grouped.values())

    def total(self) -> int:
        """Order total in minor units, priced per grouped row"""
        return sum(item.total_minor_units for item in self.items())

    @property
    def count(self) -> int:
        return len(self._entries)

    @property
    def is_empty(self) -> bool:
        return not self._entries
