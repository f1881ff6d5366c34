"""Tests for money utilities"""
import pytest
from decimal import Decimal

from vettrack.services.money import format_money, multiply, round_money, to_decimal, to_float


@pytest.mark.parametrize("value,expected", [
    ("10.00", Decimal("10.00")),
    (" 4.50 ", Decimal("4.50")),
    (3, Decimal("3")),
    (0.1, Decimal("0.1")),
    (None, Decimal("0")),
    ("abc", Decimal("0")),
    ("NaN", Decimal("0")),
    ("Infinity", Decimal("0")),
])
def test_to_decimal(value, expected):
    """Test parsing prices"""
    assert to_decimal(value) == expected


def test_multiply_has_no_float_drift():
    """Test 3 x 0.1 is exactly 0.3"""
    assert multiply("0.1", 3) == Decimal("0.3")


def test_round_money_half_up():
    """Test rounding to cents"""
    assert round_money("2.675") == Decimal("2.68")
    assert round_money(30) == Decimal("30.00")


def test_format_money():
    """Test currency formatting"""
    assert format_money(Decimal("1250"), "TRY") == "₺1,250.00"
    assert format_money("9.5", "USD") == "$9.50"
    assert format_money(1, "CHF") == "1.00 CHF"


def test_to_float():
    """Test boundary conversion"""
    assert to_float(Decimal("38.00")) == 38.0
