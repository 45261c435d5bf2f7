# Overview: Pytest coverage for dollar/cent conversion and total normalization.

from decimal import Decimal

import pytest

from invoicing.currency import (
    DOLLAR_THRESHOLD,
    format_dollars,
    normalize_invoice_total,
    to_cents,
    to_dollars,
)


class TestToCents:

    @pytest.mark.parametrize("dollars, cents", [
        (200.00, 20000),
        (100, 10000),
        (100.50, 10050),
        (75.50, 7550),
        (0.01, 1),
        (0.005, 1),
        ("19.99", 1999),
        (Decimal("1.015"), 102),
    ])
    def test_converts_dollars_to_cents(self, dollars, cents):
        assert to_cents(dollars) == cents

    def test_returns_int(self):
        assert isinstance(to_cents(12.34), int)

    def test_rejects_non_numbers(self):
        with pytest.raises(ValueError):
            to_cents("abc")
        with pytest.raises(ValueError):
            to_cents(True)
        with pytest.raises(ValueError):
            to_cents(float("nan"))


class TestToDollars:

    def test_converts_cents_to_dollars(self):
        assert to_dollars(20000) == 200.00
        assert to_dollars(12450) == 124.50
        assert to_dollars(0) == 0.0

    def test_negative_balance(self):
        assert to_dollars(-5000) == -50.0

    @pytest.mark.parametrize("value", [0.01, 0.1, 1.99, 75.5, 124.5, 9999.99, 123456.78])
    def test_round_trip(self, value):
        assert to_dollars(to_cents(value)) == value


class TestNormalizeInvoiceTotal:

    def test_values_below_threshold_are_dollars(self):
        assert normalize_invoice_total(100) == 10000
        assert normalize_invoice_total(200.00) == 20000
        assert normalize_invoice_total(9999.99) == 999999

    def test_values_at_or_above_threshold_are_cents(self):
        assert normalize_invoice_total(DOLLAR_THRESHOLD) == 10000
        assert normalize_invoice_total(25000) == 25000

    def test_fractional_cents_above_threshold_round_half_up(self):
        assert normalize_invoice_total(10000.5) == 10001
        assert normalize_invoice_total(10000.4) == 10000


def test_format_dollars():
    assert format_dollars(123450) == "$1,234.50"
    assert format_dollars(-5000) == "$-50.00"
