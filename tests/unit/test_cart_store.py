import json
import random

import pytest

from cottage_storefront.core.cart import CartStore, LineItem, MenuItem
from cottage_storefront.core.storage import JsonFileStore, MemoryStore

SOURDOUGH = MenuItem.from_major("Artisan Sourdough", 12)
CROISSANT = MenuItem.from_major("Butter Croissant", "4.50")
SCONE = MenuItem.from_major("Blueberry Scone", 3.75)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class BrokenStore(MemoryStore):
    def set(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cart(clock):
    return CartStore(MemoryStore(), clock=clock)


def test_menu_item_prices_in_minor_units():
    assert SOURDOUGH.unit_price_minor_units == 1200
    assert CROISSANT.unit_price_minor_units == 450
    assert MenuItem.from_major("Penny Bun", 0.015).unit_price_minor_units == 2


def test_negative_prices_rejected():
    with pytest.raises(ValueError):
        MenuItem("Refund", -1)


def test_line_item_quantity_must_be_positive():
    with pytest.raises(ValueError):
        LineItem("Artisan Sourdough", 1200, 0)


def test_items_group_by_name_in_first_added_order(cart):
    cart.add(SOURDOUGH)
    cart.add(CROISSANT)
    cart.add(SOURDOUGH)

    assert cart.items() == [
        LineItem("Artisan Sourdough", 1200, 2),
        LineItem("Butter Croissant", 450, 1),
    ]
    assert cart.total() == 2850
    assert cart.count == 3


def test_add_shows_toast_that_expires(cart, clock):
    cart.add(SCONE)
    assert cart.notification == "Blueberry Scone added to order!"

    clock.now += 1.9
    assert cart.notification == "Blueberry Scone added to order!"
    clock.now += 0.2
    assert cart.notification is None


def test_dismiss_notification(cart):
    cart.add(SCONE)
    cart.dismiss_notification()
    assert cart.notification is None


def test_remove_by_index_and_out_of_range_is_noop(cart):
    cart.add(SOURDOUGH)
    cart.add(CROISSANT)

    cart.remove(5)
    cart.remove(-1)
    assert cart.count == 2

    cart.remove(0)
    assert [e.name for e in cart.entries()] == ["Butter Croissant"]


def test_remove_one_takes_latest_unit(cart):
    cart.add(SOURDOUGH)
    cart.add(CROISSANT)
    cart.add(SOURDOUGH)

    cart.remove_one("Artisan Sourdough")

    assert [e.name for e in cart.entries()] == ["Artisan Sourdough", "Butter Croissant"]
    cart.remove_one("Rye")
    assert cart.count == 2


def test_clear_empties_cart_and_storage(cart):
    cart.add(SOURDOUGH)
    cart.clear()

    assert cart.is_empty
    assert cart.total() == 0
    assert json.loads(cart.storage.get(cart.storage_key)) == []


def test_every_mutation_is_persisted():
    storage = MemoryStore()
    cart = CartStore(storage)

    cart.add(SOURDOUGH)
    cart.add(CROISSANT)
    assert json.loads(storage.get("little-loaf-cottage-order")) == [
        {"name": "Artisan Sourdough", "unitPriceMinorUnits": 1200},
        {"name": "Butter Croissant", "unitPriceMinorUnits": 450},
    ]

    cart.remove(0)
    assert len(json.loads(storage.get("little-loaf-cottage-order"))) == 1


def test_restore_welcomes_returning_customer(clock):
    storage = MemoryStore()
    first = CartStore(storage, clock=clock)
    first.add(SOURDOUGH)
    first.add(SOURDOUGH)

    restored = CartStore(storage, clock=clock)

    assert restored.items() == [LineItem("Artisan Sourdough", 1200, 2)]
    assert restored.notification == "Welcome back! You have 2 items in your order."
    clock.now += 4.1
    assert restored.notification is None


def test_welcome_message_singular(clock):
    storage = MemoryStore()
    CartStore(storage).add(SCONE)

    assert CartStore(storage, clock=clock).notification == "Welcome back! You have 1 item in your order."


def test_empty_restore_is_silent():
    assert CartStore(MemoryStore()).notification is None


def test_corrupt_storage_loads_empty():
    storage = MemoryStore()
    storage.set("little-loaf-cottage-order", "{not json")

    cart = CartStore(storage)

    assert cart.is_empty
    assert cart.notification is None


def test_storage_failure_keeps_in_memory_cart():
    cart = CartStore(BrokenStore())

    cart.add(SOURDOUGH)

    assert cart.total() == 1200


def test_json_file_store_round_trip(tmp_path):
    path = tmp_path / "order.json"
    CartStore(JsonFileStore(path)).add(CROISSANT)

    assert CartStore(JsonFileStore(path)).items() == [LineItem("Butter Croissant", 450, 1)]


def test_corrupt_json_file_is_overwritten_on_next_save(tmp_path):
    path = tmp_path / "order.json"
    path.write_text("{corrupt", encoding="utf-8")

    cart = CartStore(JsonFileStore(path))
    assert cart.is_empty
    cart.add(CROISSANT)

    assert CartStore(JsonFileStore(path)).items() == [LineItem("Butter Croissant", 450, 1)]


def test_total_matches_line_items_for_random_sequences():
    rng = random.Random(7)
    menu = [SOURDOUGH, CROISSANT, SCONE]
    cart = CartStore(MemoryStore())

    for _ in range(200):
        if cart.count and rng.random() < 0.3:
            cart.remove(rng.randrange(cart.count))
        else:
            cart.add(rng.choice(menu))

        items = cart.items()
        assert cart.total() == sum(i.unit_price_minor_units * i.quantity for i in items)
        assert sum(i.quantity for i in items) == cart.count
        assert len({i.name for i in items}) == len(items)
