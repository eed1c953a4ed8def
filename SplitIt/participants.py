"""
Participants Module

This module handles all participant-related operations for the SplitIt
application.

Features:
    - Add/remove participants
    - Retrieve the roster in the order participants were added
    - Cascade removal to the expenses a participant is involved in

Data Model:
    Participant stored at: groups/{group_id}/participants/{name}
    A participant is identified by its name; names are unique.

Functions:
    add_participant: Add a new participant.
    remove_participant: Remove a participant and their expenses.
    get_participants: Get the roster.
"""

import logging

from store import ExpenseStore, NotFound

logger = logging.getLogger(__name__)


def _validate_name(name: str) -> str:
    """
    Validate and normalise a participant name.

    Returns:
        str: The name without surrounding whitespace.

    Raises:
        ValueError: If the name is empty or contains '/'.
    """
    if not isinstance(name, str) or not name.strip():
        raise ValueError("name must be a non-empty string")
    # Names double as Firestore document ids
    if "/" in name:
        raise ValueError(f"name must not contain '/', got: {name}")
    return name.strip()


def add_participant(store: ExpenseStore, name: str) -> str:
    """
    Add a new participant.

    Args:
        store: Backing store.
        name: Participant name.

    Returns:
        str: The stored (stripped) name.

    Raises:
        ValueError: If the name is invalid or already taken.
    """
    name = _validate_name(name)
    if name in store.list_participants():
        raise ValueError(f"Participant '{name}' already exists")

    store.add_participant(name)
    logger.info("Added participant %s", name)
    return name


def remove_participant(store: ExpenseStore, name: str) -> list[str]:
    """
    Remove a participant together with every expense they paid for or
    share in, so no remaining expense refers to an unknown participant.

    Returns:
        list[str]: IDs of the expenses that were removed.

    Raises:
        NotFound: If the participant does not exist.
    """
    name = _validate_name(name)
    if name not in store.list_participants():
        raise NotFound(f"Participant '{name}' not found")

    removed = []
    for expense in store.list_expenses():
        if expense.paid_by == name or name in expense.shared_by:
            store.remove_expense(expense.expense_id)
            removed.append(expense.expense_id)

    store.remove_participant(name)
    logger.info("Removed participant %s and %d expenses", name, len(removed))
    return removed


def get_participants(store: ExpenseStore) -> list[str]:
    """Get all participant names in roster order."""
    return store.list_participants()
