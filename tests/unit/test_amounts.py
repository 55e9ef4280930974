from decimal import Decimal

import pytest

from cottage_shared.models import PaymentRequest
from cottage_shared.money import format_major, to_minor_units
from cottage_payments.services.amounts import (
    PaymentValidationError,
    check_bounds,
    normalize_amount,
    normalize_payment,
)

from tests.conftest import make_settings


@pytest.mark.parametrize(
    "amount, expected",
    [(12, 1200), (12.34, 1234), ("0.10", 10), (Decimal("0.005"), 1), (0.285, 29), (19.99, 1999)],
)
def test_to_minor_units_rounds_half_up(amount, expected):
    assert to_minor_units(amount) == expected


def test_to_minor_units_rejects_bool():
    with pytest.raises(TypeError):
        to_minor_units(True)


def test_format_major():
    assert format_major(1200) == "12.00"
    assert format_major(5) == "0.05"


def test_amount_cents_wins_over_amount():
    assert normalize_amount(amount=99, amount_cents=1234) == 1234


@pytest.mark.parametrize(
    "amount, expected",
    [(12.5, 1250), (12.345, 1235), (1000, 100000), (1001, 1001), (1, 100), (15.0, 1500)],
)
def test_amount_heuristic(amount, expected):
    assert normalize_amount(amount=amount, amount_cents=None) == expected


def test_threshold_is_configurable():
    assert normalize_amount(amount=500, amount_cents=None, minor_unit_threshold=100) == 500


@pytest.mark.parametrize(
    "amount, amount_cents",
    [(None, None), (0, None), (-3, None), (None, -1), (True, None),
     (float("inf"), None), (float("-inf"), None), (float("nan"), None)],
)
def test_invalid_amount(amount, amount_cents):
    with pytest.raises(PaymentValidationError) as exc:
        normalize_amount(amount=amount, amount_cents=amount_cents)
    assert str(exc.value) == "Invalid payment amount"


def test_check_bounds_messages():
    settings = make_settings(min_amount_cents=100, max_amount_cents=500)

    check_bounds(100, settings)
    check_bounds(500, settings)
    with pytest.raises(PaymentValidationError, match="below the minimum of 100"):
        check_bounds(99, settings)
    with pytest.raises(PaymentValidationError, match="exceeds the maximum of 500"):
        check_bounds(501, settings)


def test_normalize_payment_builds_charge():
    request = PaymentRequest(source_id=" cnon:ok ", amount_cents=1200, currency="usd", idempotency_key="k-1")

    charge = normalize_payment(request, make_settings())

    assert charge.source_id == "cnon:ok"
    assert charge.amount_cents == 1200
    assert charge.currency == "USD"
    assert charge.idempotency_key == "k-1"


def test_normalize_payment_generates_missing_key():
    request = PaymentRequest(source_id="cnon:ok", amount_cents=1200)

    first = normalize_payment(request, make_settings())
    second = normalize_payment(request, make_settings())

    assert first.idempotency_key
    assert first.idempotency_key != second.idempotency_key


def test_multiple_allowed_currencies():
    settings = make_settings(allowed_currencies="usd, cad")
    request = PaymentRequest(source_id="cnon:ok", amount_cents=1200, currency="CAD")

    assert normalize_payment(request, settings).currency == "CAD"


def test_payment_request_wire_format():
    request = PaymentRequest(source_id="cnon:ok", amount_cents=1200, idempotency_key="k")
    assert request.to_wire() == {
        "sourceId": "cnon:ok",
        "amountCents": 1200,
        "currency": "USD",
        "idempotencyKey": "k",
    }
