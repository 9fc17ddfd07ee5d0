"""
Durable counters that drive achievement quests and badges.

Every achievement quest and badge is bound to exactly one Counter; the
dispatch table below is the only place that knows how to read it from the
state.
"""
from enum import Enum
from typing import Callable

from questledger.application.xp import level_for_xp
from questledger.domain.state import BudgetState


class Counter(str, Enum):
    LIFETIME_EXPENSES = "lifetime_expenses"
    LIFETIME_BILL_PAYMENTS = "lifetime_bill_payments"
    LIFETIME_GOALS_COMPLETED = "lifetime_goals_completed"
    STREAK = "streak"
    STREAK_RECORD = "streak_record"
    LEVEL = "level"
    TOTAL_COINS_EARNED = "total_coins_earned"
    TOTAL_SAVED = "total_saved"


def _total_saved(state: BudgetState) -> int:
    return int(sum((g.saved for g in state.goals), 0))


COUNTER_EXTRACTORS: dict[Counter, Callable[[BudgetState], int]] = {
    Counter.LIFETIME_EXPENSES: lambda s: s.game.lifetime_expenses,
    Counter.LIFETIME_BILL_PAYMENTS: lambda s: s.game.lifetime_bill_payments,
    Counter.LIFETIME_GOALS_COMPLETED: lambda s: s.game.lifetime_goals_completed,
    Counter.STREAK: lambda s: s.game.streak,
    Counter.STREAK_RECORD: lambda s: s.game.streak_record,
    Counter.LEVEL: lambda s: level_for_xp(s.game.xp),
    Counter.TOTAL_COINS_EARNED: lambda s: s.game.total_coins_earned,
    Counter.TOTAL_SAVED: _total_saved,
}


def read_counter(state: BudgetState, counter: Counter) -> int:
    return COUNTER_EXTRACTORS[counter](state)
