"""
Splitter Module

This module folds the recorded expenses of a group into one signed balance
per participant.

Features:
    - Equal splitting among the participants sharing an expense
    - Balances for every participant, including those at zero
    - Rejection of expenses with an empty share list
    - Optional strict validation of amounts and participant ids

Data Model:
    Input - participants (list of participant names, roster order)

    Input - expenses (list of dicts):
        - expense_id: string
        - description: string
        - amount: float
        - paid_by: participant name
        - shared_by: list of participant names

    Output - balances (dict keyed by participant name):
        - float: positive = is owed money, negative = owes money

Functions:
    compute_balances: Calculate the net balance of every participant.
"""

import logging
import math

logger = logging.getLogger(__name__)


class InvalidExpense(ValueError):
    """Raised when an expense cannot be split."""

    def __init__(self, expense_id, reason: str):
        self.expense_id = expense_id
        self.reason = reason
        super().__init__(f"Expense {expense_id}: {reason}")


def _check_strict(expense: dict, known: set) -> None:
    """
    Apply the hardening checks enabled by ``strict=True``.

    The permissive default accepts negative amounts, unknown participants
    and repeated share entries; strict mode rejects all three.

    Raises:
        InvalidExpense: If the expense fails any check.
    """
    expense_id = expense.get("expense_id")
    amount = expense.get("amount")

    # bool is an int subclass
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) \
            or not math.isfinite(amount) or amount < 0:
        raise InvalidExpense(expense_id, f"amount must be a finite non-negative number, got: {amount}")

    if expense["paid_by"] not in known:
        raise InvalidExpense(expense_id, f"payer '{expense['paid_by']}' is not a participant")

    seen = set()
    for name in expense["shared_by"]:
        if name not in known:
            raise InvalidExpense(expense_id, f"'{name}' is not a participant")
        if name in seen:
            raise InvalidExpense(expense_id, f"'{name}' appears more than once in shared_by")
        seen.add(name)


def compute_balances(participants: list[str], expenses: list[dict], strict: bool = False) -> dict:
    """
    Calculate per-participant net balances from expenses.

    For each expense:
        1. The payer is credited with the full amount
        2. Each entry of shared_by is debited amount / len(shared_by)

    Args:
        participants: Participant names in roster order.
        expenses: List of expense dicts with amount, paid_by and shared_by.
        strict: Also reject negative/non-finite amounts, unknown
            participants and repeated share entries.

    Returns:
        dict: Balance keyed by participant name. Roster participants come
        first in roster order; ids that only appear in expenses follow in
        the order they are first seen.

    Raises:
        InvalidExpense: If an expense has an empty shared_by list, or fails
            a strict check.

    Notes:
        - A name repeated in shared_by takes one share per occurrence
        - Plain float arithmetic, no rounding
        - Does NOT modify the expenses
    """
    balances = {name: 0.0 for name in participants}
    known = set(balances)

    for expense in expenses:
        shared_by = expense["shared_by"]
        if len(shared_by) == 0:
            raise InvalidExpense(expense.get("expense_id"), "shared_by must not be empty")
        if strict:
            _check_strict(expense, known)

        amount = expense["amount"]
        paid_by = expense["paid_by"]
        balances[paid_by] = balances.get(paid_by, 0.0) + amount

        per_share = amount / len(shared_by)
        for name in shared_by:
            balances[name] = balances.get(name, 0.0) - per_share

    logger.debug("Computed balances for %d participants from %d expenses", len(balances), len(expenses))
    return balances
