"""
Recurring rule (bill) domain entity.

next_run advances deterministically by one interval every time the bill is
marked paid:
- DAILY: +1 day
- WEEKLY: +7 days
- BIWEEKLY: +14 days
- MONTHLY: +1 calendar month, clipped to the last day of the target month
"""
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from questledger.utils.dates import add_months, parse_iso
from questledger.utils.money import to_decimal


class Interval(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class RecurringType(str, Enum):
    BILL = "bill"
    INCOME = "income"


_INTERVAL_DAYS = {
    Interval.DAILY: 1,
    Interval.WEEKLY: 7,
    Interval.BIWEEKLY: 14,
}


def step_next_run(next_run: str, interval: Interval) -> str:
    """
    Pure function: return next_run moved forward by one interval unit.

    >>> step_next_run("2024-01-15T00:00:00", Interval.MONTHLY)
    '2024-02-15T00:00:00'
    >>> step_next_run("2024-01-31T00:00:00", Interval.MONTHLY)
    '2024-02-29T00:00:00'
    """
    current = parse_iso(next_run)
    if interval == Interval.MONTHLY:
        return add_months(current, 1).isoformat()
    return (current + timedelta(days=_INTERVAL_DAYS[interval])).isoformat()


@dataclass
class RecurringRule:
    id: str
    label: str
    amount: Decimal
    interval: Interval
    next_run: str  # ISO-8601
    account_id: str
    type: RecurringType = RecurringType.BILL
    envelope_id: Optional[str] = None
    is_default: bool = False

    def advance(self) -> None:
        self.next_run = step_next_run(self.next_run, self.interval)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "amount": str(self.amount),
            "interval": self.interval.value,
            "next_run": self.next_run,
            "account_id": self.account_id,
            "type": self.type.value,
            "envelope_id": self.envelope_id,
            "is_default": self.is_default,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecurringRule":
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            amount=to_decimal(data.get("amount")),
            interval=Interval(data.get("interval", Interval.MONTHLY.value)),
            next_run=data["next_run"],
            account_id=data.get("account_id") or "cash",
            type=RecurringType(data.get("type", RecurringType.BILL.value)),
            envelope_id=data.get("envelope_id"),
            is_default=bool(data.get("is_default", False)),
        )
