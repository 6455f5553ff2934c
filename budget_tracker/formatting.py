"""
Money Display Formatting

Every monetary value shown to a user (ledger rows, totals, spreadsheet
export) goes through this module so the rendering is identical everywhere:

    3500      -> "R3500.00"
    -42.5     -> "-R42.50"
    0         -> "R0.00"

The sign always precedes the currency marker and is a plain ASCII
hyphen-minus. No thousands separators.
"""

from decimal import ROUND_HALF_UP, Decimal

TWO_PLACES = Decimal("0.01")
DEFAULT_CURRENCY_SYMBOL = "R"


def to_display_precision(value: Decimal) -> Decimal:
    """Round to two fraction digits, half away from zero."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _fixed(value: Decimal) -> str:
    # format() with "f" never produces exponent notation, unlike str()
    return format(to_display_precision(abs(value)), "f")


def format_amount(value: Decimal, currency_symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """
    Format a signed amount for display.

    The sign is decided on the unrounded value, so -0.001 renders as
    "-R0.00" just like the browser widget did.
    """
    value = Decimal(value)
    if value >= 0:
        return f"{currency_symbol}{_fixed(value)}"
    return f"-{currency_symbol}{_fixed(value)}"


def format_expense_total(value: Decimal, currency_symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """
    Format the expense aggregate.

    Expenses are always shown with the negative marker, including an
    empty total ("-R0.00").
    """
    return f"-{currency_symbol}{_fixed(Decimal(value))}"
