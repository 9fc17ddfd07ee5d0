"""
Transaction domain entity

Transactions are append-only: once recorded they are never edited or
removed, so the dataclass is frozen. Import prepends a whole batch.

Types:
- EXPENSE: money out of an envelope
- INCOME: money into an envelope
- TRANSFER: moves money between accounts, envelopes are not touched
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from questledger.utils.money import to_decimal

BILL_PAYMENT_TAG = "bill-payment"
GOAL_CONTRIBUTION_TAG = "goal-contribution"
GOAL_TAG_PREFIX = "goal:"


class TransactionType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"


@dataclass(frozen=True)
class Transaction:
    id: str
    date: str  # ISO-8601
    amount: Decimal
    type: TransactionType
    account_id: str
    envelope_id: Optional[str] = None
    merchant: Optional[str] = None
    note: Optional[str] = None
    tags: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_bill_payment(self) -> bool:
        # Older documents only carried the note marker
        return BILL_PAYMENT_TAG in self.tags or "Bill payment" in (self.note or "")

    @property
    def is_goal_contribution(self) -> bool:
        return GOAL_CONTRIBUTION_TAG in self.tags

    @property
    def goal_id(self) -> Optional[str]:
        for tag in self.tags:
            if tag.startswith(GOAL_TAG_PREFIX):
                return tag[len(GOAL_TAG_PREFIX):]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "amount": str(self.amount),
            "type": self.type.value,
            "account_id": self.account_id,
            "envelope_id": self.envelope_id,
            "merchant": self.merchant,
            "note": self.note,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        return cls(
            id=data["id"],
            date=data["date"],
            amount=to_decimal(data.get("amount")),
            type=TransactionType(data.get("type", TransactionType.EXPENSE.value)),
            account_id=data.get("account_id") or "cash",
            envelope_id=data.get("envelope_id"),
            merchant=data.get("merchant"),
            note=data.get("note"),
            tags=tuple(data.get("tags") or ()),
        )
