"""
Envelope and Account domain entities
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict

from questledger.utils.money import to_decimal

SAVINGS_ENVELOPE_ID = "savings"
DEFAULT_ACCOUNT_ID = "cash"


@dataclass
class Envelope:
    """
    Named budget bucket with its own balance and monthly allocation.

    Invariant: balance >= 0. Every mutation goes through ``apply_delta`` or
    ``reset_to_budget`` so the floor is enforced in one place.
    """
    id: str
    name: str
    color: str
    monthly_budget: Decimal
    carry_over: bool
    balance: Decimal

    def apply_delta(self, delta: Decimal) -> None:
        self.balance = max(Decimal("0"), self.balance + delta)

    def reset_to_budget(self) -> None:
        self.balance = max(Decimal("0"), self.monthly_budget)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "monthly_budget": str(self.monthly_budget),
            "carry_over": self.carry_over,
            "balance": str(self.balance),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Envelope":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            color=data.get("color", "#64748b"),
            monthly_budget=to_decimal(data.get("monthly_budget")),
            carry_over=bool(data.get("carry_over", True)),
            balance=max(Decimal("0"), to_decimal(data.get("balance"))),
        )


@dataclass
class Account:
    id: str
    name: str
    balance: Decimal = Decimal("0")

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "balance": str(self.balance)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            balance=to_decimal(data.get("balance")),
        )
