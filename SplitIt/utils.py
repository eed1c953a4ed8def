"""
Utilities Module

Display helpers for the SplitIt API. The settlement engine works on
unrounded floats; rounding happens here, at presentation time only.

Functions:
    round_amount: Round to 2 decimal places (ROUND_HALF_UP).
    format_currency: Format amount with currency symbol.
    describe_settlement: One-line sentence for a transfer.
    rounded_balances: Round every value of a balance mapping.
"""

from decimal import Decimal, ROUND_HALF_UP


def round_amount(value: float) -> float:
    """
    Round a monetary value to 2 decimal places.

    Goes through str() so that 2.675 rounds to 2.68 rather than the 2.67
    its binary float value would give.
    """
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_currency(amount: float, symbol: str = "$") -> str:
    """
    Format a monetary amount with the appropriate currency symbol.

    Returns:
        str: Formatted string like "$1,234.56" or "-$5.00".
    """
    amount = round_amount(amount)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def describe_settlement(transfer, symbol: str = "$") -> str:
    """Return e.g. "Bob owes Alice $50.00"."""
    return f"{transfer.from_participant} owes {transfer.to_participant} {format_currency(transfer.amount, symbol)}"


def rounded_balances(balances: dict) -> dict:
    return {name: round_amount(value) for name, value in balances.items()}
