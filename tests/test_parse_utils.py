"""Tests for shared money/date helpers in parse_utils."""

from datetime import date

from backoffice.parse_utils import (
    format_money,
    money,
    normalize_state,
    parse_date,
    parse_money,
)


# ---------------------------------------------------------------------------
# parse_money
# ---------------------------------------------------------------------------

def test_parse_money_basic():
    assert parse_money("1,466.93") == 1466.93


def test_parse_money_with_rupee():
    assert parse_money("₹118.09") == 118.09


def test_parse_money_indian_grouping():
    assert parse_money("₹1,23,456.50") == 123456.5


def test_parse_money_plain_integer():
    assert parse_money("500") == 500.0


def test_parse_money_ungrouped_thousands():
    assert parse_money("15000") == 15000.0
    assert parse_money("1466.93") == 1466.93


def test_parse_money_none():
    assert parse_money(None) is None


def test_parse_money_empty():
    assert parse_money("") is None


def test_parse_money_garbage():
    assert parse_money("n/a") is None


# ---------------------------------------------------------------------------
# parse_date
# ---------------------------------------------------------------------------

def test_parse_date_dd_mm_yyyy():
    d = parse_date("03/02/2026")
    assert d == date(2026, 2, 3)


def test_parse_date_iso_not_swapped():
    assert parse_date("2025-07-03") == date(2025, 7, 3)


def test_parse_date_none():
    assert parse_date(None) is None


def test_parse_date_invalid():
    assert parse_date("not a date") is None


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------

def test_money_rounds_to_two_places():
    assert money(1349.999999) == 1350.0


def test_format_money_small():
    assert format_money(999) == "₹999.00"


def test_format_money_thousands():
    assert format_money(59000) == "₹59,000.00"


def test_format_money_lakhs():
    assert format_money(1234567.891) == "₹12,34,567.89"


def test_format_money_crores():
    assert format_money(123456789) == "₹12,34,56,789.00"


def test_format_money_negative():
    assert format_money(-1500.5) == "-₹1,500.50"


def test_normalize_state():
    assert normalize_state("  Tamil   Nadu ") == normalize_state("tamil nadu")
