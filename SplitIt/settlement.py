"""
Settlement Module

This module turns net balances into the transfers that settle them.

Features:
    - Greedy debtor/creditor matching in a fixed, documented scan order
    - At most len(balances) - 1 transfers
    - Residual dust below EPSILON is left unsettled
    - One-call composition from participants and expenses

Data Model:
    Input - balances (dict keyed by participant name):
        - float: positive = owed money, negative = owes money

    Output - list of Transfer:
        - from_participant: string (debtor who pays)
        - to_participant: string (creditor who receives)
        - amount: float (> 0, unrounded)

Functions:
    compute_settlements: Convert balances into settlement transfers.
    apply_transfers: Replay transfers against a balance mapping.
    settle: compute_settlements(compute_balances(participants, expenses)).
"""

import logging
from dataclasses import dataclass
from typing import Optional

from splitter import compute_balances

logger = logging.getLogger(__name__)

# Balances with a smaller magnitude count as settled
EPSILON = 0.01


@dataclass(frozen=True)
class Transfer:
    """A single payment of ``amount`` from one participant to another."""

    from_participant: str
    to_participant: str
    amount: float

    def to_dict(self) -> dict:
        """Convert transfer to its wire shape."""
        return {
            "from": self.from_participant,
            "to": self.to_participant,
            "amount": self.amount
        }


def compute_settlements(balances: dict, order: Optional[list[str]] = None) -> list[Transfer]:
    """
    Convert net balances into settlement transfers.

    Each round picks the first debtor (balance < -EPSILON) and the first
    creditor (balance > EPSILON) in scan order, moves the smaller of the two
    magnitudes between them and drops whoever is now within EPSILON of zero.
    Matching stops when no debtor or no creditor is left.

    Args:
        balances: Balance keyed by participant name.
        order: Optional scan order. Defaults to the iteration order of
            ``balances``, which compute_balances() makes the roster order.
            Names missing from ``order`` are scanned after it.

    Returns:
        list[Transfer]: Transfers in the order they were generated.

    Notes:
        - Does NOT modify the input balances
        - Never rounds; display rounding is the caller's concern
    """
    working = dict(balances)

    if order is None:
        candidates = list(working)
    else:
        candidates = [name for name in dict.fromkeys(order) if name in working]
        listed = set(candidates)
        candidates += [name for name in working if name not in listed]

    transfers = []

    while len(candidates) > 1:
        debtor = next((p for p in candidates if working[p] < -EPSILON), None)
        creditor = next((p for p in candidates if working[p] > EPSILON), None)
        if debtor is None or creditor is None:
            break

        amount = min(abs(working[debtor]), working[creditor])
        if amount > 0:
            transfers.append(Transfer(debtor, creditor, amount))
            working[debtor] += amount
            working[creditor] -= amount

        if abs(working[debtor]) < EPSILON:
            candidates.remove(debtor)
        if abs(working[creditor]) < EPSILON:
            candidates.remove(creditor)

    logger.debug("Settled %d balances with %d transfers", len(balances), len(transfers))
    return transfers


def apply_transfers(balances: dict, transfers: list[Transfer]) -> dict:
    """
    Return a copy of ``balances`` with every transfer paid out.

    The payer's balance rises by the amount and the receiver's falls by it,
    so a complete settlement leaves every value within EPSILON of zero.
    """
    result = dict(balances)
    for transfer in transfers:
        result[transfer.from_participant] = result.get(transfer.from_participant, 0.0) + transfer.amount
        result[transfer.to_participant] = result.get(transfer.to_participant, 0.0) - transfer.amount
    return result


def settle(participants: list[str], expenses: list[dict], strict: bool = False) -> list[Transfer]:
    """Compute the transfers that settle ``expenses`` among ``participants``."""
    return compute_settlements(compute_balances(participants, expenses, strict=strict))
