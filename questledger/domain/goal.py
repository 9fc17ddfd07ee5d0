"""
Goal domain entity - savings goal with monotonic completion
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from questledger.utils.money import to_decimal


@dataclass
class Goal:
    """
    Savings goal.

    Completion (saved >= target_amount) is a one-way transition: it is
    counted in the lifetime counter once, at the contribution that crosses
    the target, and never again for that goal.
    """
    id: str
    name: str
    target_amount: Decimal
    saved: Decimal = Decimal("0")
    target_date: Optional[str] = None
    linked_envelope_id: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.saved >= self.target_amount

    def contribute(self, amount: Decimal) -> bool:
        """
        Add a contribution.

        Returns:
            True if this contribution moved the goal from below target to
            at/above target.
        """
        was_open = not self.is_completed
        self.saved += amount
        return was_open and self.is_completed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "target_amount": str(self.target_amount),
            "saved": str(self.saved),
            "target_date": self.target_date,
            "linked_envelope_id": self.linked_envelope_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Goal":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            target_amount=to_decimal(data.get("target_amount")),
            saved=to_decimal(data.get("saved")),
            target_date=data.get("target_date"),
            linked_envelope_id=data.get("linked_envelope_id"),
        )
