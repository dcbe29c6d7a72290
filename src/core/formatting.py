"""Display helpers in Indian conventions (lakh grouping, DD-Mon-YYYY dates)."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_inr(amount: Any) -> str:
    """`123456` -> `₹1,23,456`. Fractions are truncated; empty/invalid -> `₹0`."""

    if amount is None or amount == "":
        return "₹0"
    try:
        value = int(float(amount))
    except (TypeError, ValueError, OverflowError):
        return "₹0"
    if value == 0:
        return "₹0"
    sign = "-" if value < 0 else ""
    return f"{sign}₹{_group_indian(str(abs(value)))}"


def _to_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def format_indian_date(value: Any, *, with_time: bool = False) -> str:
    """`2024-03-05T14:07:00Z` -> `05-Mar-2024` (or `05-Mar-2024 14:07`)."""

    moment = _to_datetime(value)
    if moment is None:
        return "N/A"
    out = f"{moment.day:02d}-{_MONTHS[moment.month - 1]}-{moment.year}"
    if with_time:
        out += f" {moment.hour:02d}:{moment.minute:02d}"
    return out
