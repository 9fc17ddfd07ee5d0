"""
BudgetState - aggregate root of the whole engine.

``current_month`` always names the month the in-memory ``transactions`` and
envelope balances belong to. Past months live in ``monthly_history``, at
most one snapshot per month key.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from questledger.domain.envelope import Account, Envelope
from questledger.domain.gamification import Gamification
from questledger.domain.goal import Goal
from questledger.domain.monthly_budget import MonthlyBudgetConfig
from questledger.domain.recurring import RecurringRule
from questledger.domain.transaction import Transaction
from questledger.utils.money import to_decimal


def default_sound_settings() -> Dict[str, Any]:
    return {
        "master_volume": 0.7,
        "sfx_enabled": True,
        "music_enabled": False,
        "sfx_volume": 0.8,
        "music_volume": 0.5,
    }


@dataclass
class UserPrefs:
    currency: str = "PHP"
    locale: str = "en-PH"
    theme: str = "system"
    first_run_completed: bool = True
    sound_settings: Dict[str, Any] = field(default_factory=default_sound_settings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currency": self.currency,
            "locale": self.locale,
            "theme": self.theme,
            "first_run_completed": self.first_run_completed,
            "sound_settings": dict(self.sound_settings),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserPrefs":
        sound = default_sound_settings()
        sound.update(data.get("sound_settings") or {})
        return cls(
            currency=data.get("currency", "PHP"),
            locale=data.get("locale", "en-PH"),
            theme=data.get("theme", "system"),
            first_run_completed=bool(data.get("first_run_completed", True)),
            sound_settings=sound,
        )


@dataclass
class MonthlyData:
    """Archived snapshot of one month: its transactions and envelope balances."""
    month_key: str
    transactions: List[Transaction]
    envelope_balances: Dict[str, Decimal]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month_key": self.month_key,
            "transactions": [t.to_dict() for t in self.transactions],
            "envelope_balances": {k: str(v) for k, v in self.envelope_balances.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonthlyData":
        return cls(
            month_key=data["month_key"],
            transactions=[Transaction.from_dict(t) for t in data.get("transactions") or []],
            envelope_balances={
                k: to_decimal(v) for k, v in (data.get("envelope_balances") or {}).items()
            },
        )


@dataclass
class BudgetState:
    prefs: UserPrefs
    game: Gamification
    current_month: str
    accounts: List[Account] = field(default_factory=list)
    envelopes: List[Envelope] = field(default_factory=list)
    goals: List[Goal] = field(default_factory=list)
    transactions: List[Transaction] = field(default_factory=list)
    recurring: List[RecurringRule] = field(default_factory=list)
    monthly_budgets: List[MonthlyBudgetConfig] = field(default_factory=list)
    monthly_history: List[MonthlyData] = field(default_factory=list)

    def find_envelope(self, envelope_id: Optional[str]) -> Optional[Envelope]:
        if envelope_id is None:
            return None
        return next((e for e in self.envelopes if e.id == envelope_id), None)

    def find_goal(self, goal_id: str) -> Optional[Goal]:
        return next((g for g in self.goals if g.id == goal_id), None)

    def find_recurring(self, rule_id: str) -> Optional[RecurringRule]:
        return next((r for r in self.recurring if r.id == rule_id), None)

    def find_monthly_budget(self, config_id: str) -> Optional[MonthlyBudgetConfig]:
        return next((b for b in self.monthly_budgets if b.id == config_id), None)

    def find_snapshot(self, month_key: str) -> Optional[MonthlyData]:
        return next((m for m in self.monthly_history if m.month_key == month_key), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prefs": self.prefs.to_dict(),
            "accounts": [a.to_dict() for a in self.accounts],
            "envelopes": [e.to_dict() for e in self.envelopes],
            "goals": [g.to_dict() for g in self.goals],
            "transactions": [t.to_dict() for t in self.transactions],
            "recurring": [r.to_dict() for r in self.recurring],
            "game": self.game.to_dict(),
            "monthly_budgets": [b.to_dict() for b in self.monthly_budgets],
            "current_month": self.current_month,
            "monthly_history": [m.to_dict() for m in self.monthly_history],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BudgetState":
        return cls(
            prefs=UserPrefs.from_dict(data.get("prefs") or {}),
            accounts=[Account.from_dict(a) for a in data.get("accounts") or []],
            envelopes=[Envelope.from_dict(e) for e in data.get("envelopes") or []],
            goals=[Goal.from_dict(g) for g in data.get("goals") or []],
            transactions=[Transaction.from_dict(t) for t in data.get("transactions") or []],
            recurring=[RecurringRule.from_dict(r) for r in data.get("recurring") or []],
            game=Gamification.from_dict(data["game"]),
            monthly_budgets=[
                MonthlyBudgetConfig.from_dict(b) for b in data.get("monthly_budgets") or []
            ],
            current_month=data["current_month"],
            monthly_history=[MonthlyData.from_dict(m) for m in data.get("monthly_history") or []],
        )
