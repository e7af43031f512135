"""Display formatting for money and percentages (presentation only)."""
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
TENTH = Decimal("0.1")


def format_price(value: Decimal) -> str:
    """$1,234.50 style; negatives as -$12.00."""
    amount = Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_percentage(value: Decimal) -> str:
    """Percentage points to text, e.g. -10 -> '-10%', 2.5 -> '2.5%'."""
    amount = Decimal(value).quantize(TENTH, rounding=ROUND_HALF_UP).normalize()
    if amount == 0:
        return "0%"
    return f"{amount:f}%"


def format_adjustment(adjustment_type: str, value: Decimal) -> str:
    if adjustment_type == "percentage":
        return format_percentage(value)
    return format_price(value)
