from decimal import Decimal

import pytest

from assembly_tool.ui.formatting import format_adjustment, format_percentage, format_price


@pytest.mark.parametrize("value,expected", [
    (Decimal("1570"), "$1,570.00"),
    (Decimal("8790.70"), "$8,790.70"),
    (Decimal("0.005"), "$0.01"),
    (Decimal("-12"), "-$12.00"),
    (Decimal("0"), "$0.00"),
])
def test_format_price(value, expected):
    assert format_price(value) == expected


@pytest.mark.parametrize("value,expected", [
    (Decimal("-10"), "-10%"),
    (Decimal("2.5"), "2.5%"),
    (Decimal("0"), "0%"),
    (Decimal("15.00"), "15%"),
])
def test_format_percentage(value, expected):
    assert format_percentage(value) == expected


def test_format_adjustment_by_type():
    assert format_adjustment("percentage", Decimal("-15")) == "-15%"
    assert format_adjustment("fixedAmount", Decimal("500")) == "$500.00"
