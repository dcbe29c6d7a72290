from datetime import date, datetime

import pytest

from core.formatting import format_indian_date, format_inr


@pytest.mark.unit
@pytest.mark.parametrize(
    "amount, expected",
    [
        (0, "₹0"),
        (None, "₹0"),
        ("", "₹0"),
        ("abc", "₹0"),
        (999, "₹999"),
        (1000, "₹1,000"),
        (123456, "₹1,23,456"),
        ("12345678.90", "₹1,23,45,678"),
        (-250000, "-₹2,50,000"),
    ],
)
def test_format_inr(amount, expected):
    assert format_inr(amount) == expected


@pytest.mark.unit
def test_format_indian_date_variants():
    assert format_indian_date("2024-03-05T14:07:00Z") == "05-Mar-2024"
    assert format_indian_date("2024-03-05T14:07:00Z", with_time=True) == "05-Mar-2024 14:07"
    assert format_indian_date(date(2023, 12, 1)) == "01-Dec-2023"
    assert format_indian_date(datetime(2023, 1, 9, 8, 5), with_time=True) == "09-Jan-2023 08:05"


@pytest.mark.unit
@pytest.mark.parametrize("value", [None, "", "not a date", 42])
def test_format_indian_date_placeholder(value):
    assert format_indian_date(value) == "N/A"
