"""
Store Module

This module persists the participant roster and the expense list for the
SplitIt application.

Features:
    - ExpenseStore contract shared by every backend
    - In-memory backend for development, tests and hosts without Firebase
    - Firebase Firestore backend
    - Sequential expense IDs (E001, E002, ...)

Firestore Structure:
    groups/{group_id}/participants/{name}
        - name: string
        - position: int (roster order)
        - updated_at: timestamp

    groups/{group_id}/expenses/{expense_id}
        - expense_id: string
        - description: string
        - amount: float
        - paid_by: string
        - shared_by: list of strings
        - position: int (insertion order)
        - updated_at: timestamp

Functions:
    create_store: Build the backend selected by configuration.
"""

import logging
import re
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from config.firebase_config import get_db
from config.settings import Settings
from models import Expense

logger = logging.getLogger(__name__)

_EXPENSE_ID_PATTERN = re.compile(r'^E(\d+)$')


class NotFound(ValueError):
    """Raised when a participant or expense does not exist."""


def _get_timestamp() -> str:
    """Get current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def _next_sequential_id(existing_ids) -> str:
    """
    Generate the next sequential expense ID.

    Logic:
        1. Extract numeric suffix from IDs matching E### format (e.g., E001 -> 1)
        2. Find the highest existing number
        3. Generate next ID with zero-padded 3-digit suffix
        4. If no valid E### IDs exist, start from E001

    IDs that do not follow the E### format are ignored.
    """
    max_num = 0
    for expense_id in existing_ids:
        match = _EXPENSE_ID_PATTERN.match(expense_id)
        if match:
            max_num = max(max_num, int(match.group(1)))
    return f"E{max_num + 1:03d}"


class ExpenseStore(ABC):
    """
    Storage contract for participants and expenses.

    Implementations keep participants in the order they were added, which
    is also the scan order used when matching debtors with creditors.
    """

    @abstractmethod
    def list_participants(self) -> list[str]:
        ...

    @abstractmethod
    def add_participant(self, name: str) -> None:
        """Store a participant. Duplicate names raise ValueError."""
        ...

    @abstractmethod
    def remove_participant(self, name: str) -> None:
        """Delete a participant. Unknown names raise NotFound."""
        ...

    @abstractmethod
    def list_expenses(self) -> list[Expense]:
        ...

    @abstractmethod
    def get_expense(self, expense_id: str) -> Optional[Expense]:
        ...

    @abstractmethod
    def add_expense(self, expense: Expense) -> None:
        ...

    @abstractmethod
    def update_expense(self, expense: Expense) -> None:
        ...

    @abstractmethod
    def remove_expense(self, expense_id: str) -> None:
        ...

    @abstractmethod
    def next_expense_id(self) -> str:
        ...


class InMemoryStore(ExpenseStore):
    """
    Process-local store.

    Each instance owns its own data; nothing is shared between instances.
    All access is serialized with a lock so readers always see a
    consistent snapshot.
    """

    def __init__(self, participants=None, expenses=None):
        self._lock = threading.RLock()
        self._participants: list[str] = []
        self._expenses: dict[str, Expense] = {}
        for name in participants or []:
            self.add_participant(name)
        for expense in expenses or []:
            self.add_expense(expense)

    def list_participants(self) -> list[str]:
        with self._lock:
            return list(self._participants)

    def add_participant(self, name: str) -> None:
        with self._lock:
            if name in self._participants:
                raise ValueError(f"Participant '{name}' already exists")
            self._participants.append(name)

    def remove_participant(self, name: str) -> None:
        with self._lock:
            if name not in self._participants:
                raise NotFound(f"Participant '{name}' not found")
            self._participants.remove(name)

    def list_expenses(self) -> list[Expense]:
        with self._lock:
            return list(self._expenses.values())

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        with self._lock:
            return self._expenses.get(expense_id)

    def add_expense(self, expense: Expense) -> None:
        with self._lock:
            if expense.expense_id in self._expenses:
                raise ValueError(f"Expense {expense.expense_id} already exists")
            self._expenses[expense.expense_id] = expense

    def update_expense(self, expense: Expense) -> None:
        with self._lock:
            if expense.expense_id not in self._expenses:
                raise NotFound(f"Expense {expense.expense_id} not found")
            self._expenses[expense.expense_id] = expense

    def remove_expense(self, expense_id: str) -> None:
        with self._lock:
            if self._expenses.pop(expense_id, None) is None:
                raise NotFound(f"Expense {expense_id} not found")

    def next_expense_id(self) -> str:
        with self._lock:
            return _next_sequential_id(self._expenses)


class FirestoreStore(ExpenseStore):
    """
    Firebase Firestore backed store.

    Documents live under groups/{group_id}; ``position`` fields keep the
    roster and the expense list in insertion order.
    """

    def __init__(self, db, group_id: str):
        if db is None:
            raise RuntimeError("Firestore is not available")
        if not isinstance(group_id, str) or not group_id.strip():
            raise ValueError("group_id must be a non-empty string")
        self._db = db
        self._group_id = group_id

    def _collection(self, name: str):
        return self._db.collection("groups").document(self._group_id).collection(name)

    def _next_position(self, name: str) -> int:
        positions = [doc.to_dict().get("position", 0) for doc in self._collection(name).stream()]
        return max(positions, default=-1) + 1

    def list_participants(self) -> list[str]:
        docs = self._collection("participants").order_by("position").stream()
        return [doc.to_dict()["name"] for doc in docs]

    def add_participant(self, name: str) -> None:
        doc_ref = self._collection("participants").document(name)
        if doc_ref.get().exists:
            raise ValueError(f"Participant '{name}' already exists")
        doc_ref.set({
            "name": name,
            "position": self._next_position("participants"),
            "updated_at": _get_timestamp()
        })

    def remove_participant(self, name: str) -> None:
        doc_ref = self._collection("participants").document(name)
        if not doc_ref.get().exists:
            raise NotFound(f"Participant '{name}' not found")
        doc_ref.delete()

    def list_expenses(self) -> list[Expense]:
        docs = self._collection("expenses").order_by("position").stream()
        return [Expense.from_dict(doc.to_dict()) for doc in docs]

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        doc = self._collection("expenses").document(expense_id).get()
        if not doc.exists:
            return None
        return Expense.from_dict(doc.to_dict())

    def add_expense(self, expense: Expense) -> None:
        doc_ref = self._collection("expenses").document(expense.expense_id)
        if doc_ref.get().exists:
            raise ValueError(f"Expense {expense.expense_id} already exists")
        doc_data = expense.to_dict()
        doc_data["position"] = self._next_position("expenses")
        doc_data["updated_at"] = _get_timestamp()
        doc_ref.set(doc_data)

    def update_expense(self, expense: Expense) -> None:
        doc_ref = self._collection("expenses").document(expense.expense_id)
        doc = doc_ref.get()
        if not doc.exists:
            raise NotFound(f"Expense {expense.expense_id} not found")
        doc_data = expense.to_dict()
        doc_data["position"] = doc.to_dict().get("position", 0)
        doc_data["updated_at"] = _get_timestamp()
        doc_ref.set(doc_data)

    def remove_expense(self, expense_id: str) -> None:
        doc_ref = self._collection("expenses").document(expense_id)
        if not doc_ref.get().exists:
            raise NotFound(f"Expense {expense_id} not found")
        doc_ref.delete()

    def next_expense_id(self) -> str:
        return _next_sequential_id(doc.id for doc in self._collection("expenses").stream())


def create_store(settings: Settings) -> ExpenseStore:
    """
    Build the store selected by ``settings.store_backend``.

    A Firestore backend that cannot be reached falls back to memory so the
    API still starts; the fallback is logged because its data is lost on
    restart.

    Raises:
        ValueError: If the backend name is unknown.
    """
    if settings.store_backend == "memory":
        return InMemoryStore()

    if settings.store_backend == "firestore":
        db = get_db(settings.firebase_credentials)
        if db is None:
            logger.warning("Firestore is not available, falling back to the in-memory store")
            return InMemoryStore()
        logger.info("Using Firestore store for group %s", settings.group_id)
        return FirestoreStore(db, settings.group_id)

    raise ValueError(f"Unknown store backend: {settings.store_backend}")
