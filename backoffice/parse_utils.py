from __future__ import annotations

import re
from datetime import date
from typing import Optional

from dateutil import parser as date_parser


_MONEY_RE = re.compile(r"-?\d{1,3}(?:,\d{2,3})+(?:\.\d+)?|-?\d+(?:\.\d+)?")


def parse_money(value: str | None) -> Optional[float]:
    if not value:
        return None

    cleaned = value.strip()
    cleaned = cleaned.replace("₹", "").replace("Rs.", "").replace("INR", "")
    cleaned = cleaned.replace(" ", "")

    match = _MONEY_RE.search(cleaned)
    if not match:
        return None

    number = match.group(0).replace(",", "")
    try:
        return float(number)
    except ValueError:
        return None


def parse_date(value: str | None, dayfirst: bool = True) -> Optional[date]:
    if not value:
        return None

    cleaned = value.strip()
    if not cleaned:
        return None

    # ISO dates are unambiguous; dayfirst would swap month and day.
    if re.match(r"^\d{4}-\d{2}-\d{2}", cleaned):
        dayfirst = False

    try:
        parsed = date_parser.parse(cleaned, dayfirst=dayfirst)
    except (ValueError, TypeError, OverflowError):
        return None

    return parsed.date()


def money(value: float) -> float:
    """Round to 2 decimals for presentation only."""
    return round(float(value), 2)


def _group_indian(digits: str) -> str:
    # 1234567 -> 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs) + "," + tail


def format_money(value: float, symbol: str = "₹") -> str:
    """Format an amount with two decimals and Indian digit grouping."""
    amount = money(value)
    sign = "-" if amount < 0 else ""
    whole, _, fraction = f"{abs(amount):.2f}".partition(".")
    return f"{sign}{symbol}{_group_indian(whole)}.{fraction}"


def normalize_state(value: str) -> str:
    return re.sub(r"\s+", " ", (value or "").strip()).casefold()
