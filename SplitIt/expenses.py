"""
Expenses Module

This module handles all expense-related operations for the SplitIt
application.

Features:
    - Add/edit/remove expenses
    - Track who paid and who shares the cost
    - Input validation before anything reaches the store

Data Model:
    Expense stored at: groups/{group_id}/expenses/{expense_id}
    Fields:
        - expense_id: string (E001, E002, ... format)
        - description: string
        - amount: float (must be > 0)
        - paid_by: participant name
        - shared_by: list of participant names

Functions:
    add_expense: Add a new expense.
    edit_expense: Replace an existing expense.
    remove_expense: Delete an expense.
    get_expenses: Get all expenses.
"""

import logging
import math

from models import Expense
from store import ExpenseStore, NotFound

logger = logging.getLogger(__name__)


def _validate_non_empty_string(value: str, field_name: str) -> bool:
    """
    Validate that a string is non-empty.

    Raises:
        ValueError: If string is empty or not a string.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} must be a non-empty string")
    return True


def _validate_expense_fields(
    store: ExpenseStore,
    description: str,
    amount: float,
    paid_by: str,
    shared_by: list[str]
) -> None:
    """
    Validate expense input against the current roster.

    Raises:
        ValueError: If any field is invalid.
    """
    _validate_non_empty_string(description, "description")
    _validate_non_empty_string(paid_by, "paid_by")

    # bool is an int subclass
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) \
            or not math.isfinite(amount) or amount <= 0:
        raise ValueError(f"amount must be a positive number, got: {amount}")

    if not isinstance(shared_by, (list, tuple)) or len(shared_by) == 0:
        raise ValueError("shared_by must be a non-empty list of participant names")

    existing_participants = set(store.list_participants())

    if paid_by not in existing_participants:
        raise ValueError(f"paid_by '{paid_by}' is not a participant")

    for name in shared_by:
        if name not in existing_participants:
            raise ValueError(f"'{name}' in shared_by is not a participant")

    if len(set(shared_by)) != len(shared_by):
        raise ValueError("shared_by must not list a participant twice")


def add_expense(
    store: ExpenseStore,
    description: str,
    amount: float,
    paid_by: str,
    shared_by: list[str]
) -> Expense:
    """
    Add a new expense.

    Args:
        store: Backing store.
        description: What the money was spent on.
        amount: Amount of the expense (must be > 0).
        paid_by: Name of the participant who paid.
        shared_by: Names of the participants sharing the cost.

    Returns:
        Expense: The created expense object.

    Raises:
        ValueError: If input validation fails.
        RuntimeError: If the store backend is not available.

    Notes:
        - Payer does NOT have to be in shared_by
        - shared_by can be a subset of the participants
    """
    _validate_expense_fields(store, description, amount, paid_by, shared_by)

    expense = Expense(
        expense_id=store.next_expense_id(),
        description=description.strip(),
        amount=float(amount),
        paid_by=paid_by,
        shared_by=shared_by
    )
    store.add_expense(expense)

    logger.info("Added expense %s (%.2f paid by %s)", expense.expense_id, expense.amount, expense.paid_by)
    return expense


def edit_expense(
    store: ExpenseStore,
    expense_id: str,
    description: str,
    amount: float,
    paid_by: str,
    shared_by: list[str]
) -> Expense:
    """
    Replace the fields of an existing expense, keeping its id.

    Raises:
        NotFound: If no expense has this id.
        ValueError: If input validation fails.
    """
    if store.get_expense(expense_id) is None:
        raise NotFound(f"Expense {expense_id} not found")

    _validate_expense_fields(store, description, amount, paid_by, shared_by)

    expense = Expense(
        expense_id=expense_id,
        description=description.strip(),
        amount=float(amount),
        paid_by=paid_by,
        shared_by=shared_by
    )
    store.update_expense(expense)

    logger.info("Updated expense %s", expense_id)
    return expense


def remove_expense(store: ExpenseStore, expense_id: str) -> None:
    """
    Delete an expense.

    Raises:
        NotFound: If no expense has this id.
    """
    if store.get_expense(expense_id) is None:
        raise NotFound(f"Expense {expense_id} not found")
    store.remove_expense(expense_id)
    logger.info("Removed expense %s", expense_id)


def get_expenses(store: ExpenseStore) -> list[Expense]:
    """Get all expenses in insertion order."""
    return store.list_expenses()
