"""
Seed data for a fresh install and the catalogs of default bills and goals
that can be restored later.
"""
import random
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from questledger.application.badges import initialize_badges
from questledger.application.quests import generate_daily_quests, seed_achievement_quests
from questledger.domain.envelope import DEFAULT_ACCOUNT_ID, SAVINGS_ENVELOPE_ID, Account, Envelope
from questledger.domain.gamification import Gamification
from questledger.domain.goal import Goal
from questledger.domain.monthly_budget import IncomeFrequency, IncomeSource, MonthlyBudgetConfig
from questledger.domain.recurring import Interval, RecurringRule, RecurringType
from questledger.domain.state import BudgetState, UserPrefs
from questledger.utils.dates import month_key

BUFFER_ENVELOPE_ID = "buffer"

# (id, label, day of month, envelope)
_DEFAULT_BILL_SPECS = (
    ("bill-electricity", "⚡ Electricity Bill", 15, BUFFER_ENVELOPE_ID),
    ("bill-water", "💧 Water Bill", 18, BUFFER_ENVELOPE_ID),
    ("bill-internet", "🌐 Internet Bill", 5, BUFFER_ENVELOPE_ID),
    ("bill-rent", "🏠 Rent/Boarding", 1, BUFFER_ENVELOPE_ID),
    ("bill-phone", "📱 Mobile Plan", 10, BUFFER_ENVELOPE_ID),
    ("bill-netflix", "🎬 Netflix", 20, "fun"),
    ("bill-spotify", "🎵 Spotify", 12, "fun"),
)


def default_bills(now: datetime) -> list[RecurringRule]:
    """Default monthly bills, due on fixed days of the current month."""
    return [
        RecurringRule(
            id=bill_id,
            label=label,
            amount=Decimal("0"),
            interval=Interval.MONTHLY,
            next_run=datetime.combine(now.date().replace(day=day), time.min).isoformat(),
            account_id=DEFAULT_ACCOUNT_ID,
            type=RecurringType.BILL,
            envelope_id=envelope_id,
            is_default=True,
        )
        for bill_id, label, day, envelope_id in _DEFAULT_BILL_SPECS
    ]


def default_goals(now: datetime) -> list[Goal]:
    return [
        Goal(
            id="emergency-fund",
            name="Emergency Fund",
            target_amount=Decimal("10000"),
            linked_envelope_id=SAVINGS_ENVELOPE_ID,
        ),
        Goal(
            id="laptop",
            name="New Laptop",
            target_amount=Decimal("30000"),
            target_date=(now + timedelta(days=180)).date().isoformat(),
        ),
        Goal(
            id="vacation",
            name="Dream Vacation",
            target_amount=Decimal("15000"),
            target_date=(now + timedelta(days=365)).date().isoformat(),
        ),
    ]


def default_envelopes() -> list[Envelope]:
    # Unconfigured (budget 0) until the user funds them
    specs = (
        ("food", "Food", "#22c55e", True),
        ("transport", "Transport", "#06b6d4", True),
        ("school", "School", "#a78bfa", True),
        ("fun", "Fun", "#f97316", False),
        (SAVINGS_ENVELOPE_ID, "Savings", "#10b981", True),
        (BUFFER_ENVELOPE_ID, "Buffer", "#64748b", True),
    )
    return [
        Envelope(id=eid, name=name, color=color, monthly_budget=Decimal("0"),
                 carry_over=carry_over, balance=Decimal("0"))
        for eid, name, color, carry_over in specs
    ]


def seed_state(now: datetime, rng: Optional[random.Random] = None) -> BudgetState:
    """Fresh state for a first run."""
    return BudgetState(
        prefs=UserPrefs(),
        accounts=[Account(id=DEFAULT_ACCOUNT_ID, name="Cash")],
        envelopes=default_envelopes(),
        goals=default_goals(now),
        transactions=[],
        recurring=default_bills(now),
        game=Gamification(
            last_active=now.isoformat(),
            quests=generate_daily_quests(now, rng) + seed_achievement_quests(),
            badges=initialize_badges(),
        ),
        monthly_budgets=[
            MonthlyBudgetConfig(
                id="budget-1",
                amount=Decimal("5000"),
                source=IncomeSource.ALLOWANCE,
                frequency=IncomeFrequency.WEEKLY,
                label="Weekly Allowance",
                enabled=True,
            )
        ],
        current_month=month_key(now),
        monthly_history=[],
    )
