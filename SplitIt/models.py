"""
Models Module

Record types shared by the store and the host operations.

Classes:
    Expense: A recorded payment with a payer and the people sharing it.
"""


class Expense:
    """
    Represents a single shared expense.

    Attributes:
        expense_id (str): Unique identifier in E### format.
        description (str): What the money was spent on.
        amount (float): Amount of the expense.
        paid_by (str): Name of the participant who paid.
        shared_by (tuple[str, ...]): Names of the participants sharing the cost.
    """

    def __init__(
        self,
        expense_id: str,
        description: str,
        amount: float,
        paid_by: str,
        shared_by
    ):
        self.expense_id = expense_id
        self.description = description
        self.amount = amount
        self.paid_by = paid_by
        self.shared_by = tuple(shared_by)

    def to_dict(self) -> dict:
        """Convert expense to dictionary for storage and balance calculation."""
        return {
            "expense_id": self.expense_id,
            "description": self.description,
            "amount": self.amount,
            "paid_by": self.paid_by,
            "shared_by": list(self.shared_by)
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Expense":
        """Create an Expense instance from a dictionary."""
        return cls(
            expense_id=data.get("expense_id"),
            description=data.get("description", ""),
            amount=data.get("amount"),
            paid_by=data.get("paid_by"),
            shared_by=data.get("shared_by", [])
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Expense):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        """Return string representation of expense."""
        return f"Expense(id='{self.expense_id}', paid_by='{self.paid_by}', amount={self.amount})"


