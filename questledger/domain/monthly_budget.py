"""
Monthly budget config - a recurring income source feeding the monthly total
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from questledger.utils.money import to_decimal


class IncomeSource(str, Enum):
    ALLOWANCE = "allowance"
    INCOME = "income"
    PASSIVE_INCOME = "passive-income"
    PENSION = "pension"
    OTHER = "other"


class IncomeFrequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


# Average number of periods per calendar month
FREQUENCY_MULTIPLIERS: dict[IncomeFrequency, Decimal] = {
    IncomeFrequency.WEEKLY: Decimal("4.33"),
    IncomeFrequency.BIWEEKLY: Decimal("2.17"),
    IncomeFrequency.MONTHLY: Decimal("1"),
}


@dataclass
class MonthlyBudgetConfig:
    id: str
    amount: Decimal
    source: IncomeSource
    frequency: IncomeFrequency
    label: Optional[str] = None
    enabled: bool = True

    @property
    def monthly_amount(self) -> Decimal:
        return self.amount * FREQUENCY_MULTIPLIERS[self.frequency]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "amount": str(self.amount),
            "source": self.source.value,
            "frequency": self.frequency.value,
            "label": self.label,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonthlyBudgetConfig":
        return cls(
            id=data["id"],
            amount=to_decimal(data.get("amount")),
            source=IncomeSource(data.get("source", IncomeSource.OTHER.value)),
            frequency=IncomeFrequency(data.get("frequency", IncomeFrequency.MONTHLY.value)),
            label=data.get("label"),
            enabled=bool(data.get("enabled", True)),
        )
