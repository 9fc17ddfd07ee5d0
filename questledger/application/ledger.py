"""
Ledger use cases - envelopes, transactions, bills, goals and income sources.

Every function takes the state first, mutates it in place and returns it.
Nothing here raises on bad ids: unknown ids are no-ops, balances clamp at 0.
Achievement reconciliation is not run here; the store enqueues it after
the actions that need it.
"""
import dataclasses
import logging
import random
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Optional, Type, TypeVar

from questledger.application.quests import (
    DailyTrigger,
    apply_daily_trigger,
    ensure_all_achievement_quests,
    generate_daily_quests,
)
from questledger.application.seed import default_bills, default_goals
from questledger.application.xp import XP_RULES, award_xp
from questledger.domain.envelope import DEFAULT_ACCOUNT_ID, SAVINGS_ENVELOPE_ID, Envelope
from questledger.domain.gamification import QuestType
from questledger.domain.goal import Goal
from questledger.domain.monthly_budget import IncomeFrequency, IncomeSource, MonthlyBudgetConfig
from questledger.domain.recurring import Interval, RecurringRule, RecurringType
from questledger.domain.state import BudgetState
from questledger.domain.transaction import (
    BILL_PAYMENT_TAG,
    GOAL_CONTRIBUTION_TAG,
    GOAL_TAG_PREFIX,
    Transaction,
    TransactionType,
)
from questledger.utils.dates import days_until, is_same_day, month_key, parse_iso
from questledger.utils.money import format_money, to_decimal

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

BILL_PAYMENT_NOTE = "Bill payment (auto-logged)"
UPCOMING_BILLS_WINDOW_DAYS = 7


def new_id() -> str:
    return uuid.uuid4().hex


def _coerce(enum_cls: Type[E], value: Any) -> Optional[E]:
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _apply_changes(entity: Any, changes: dict, converters: dict) -> None:
    """Copy known fields from ``changes`` onto ``entity``; the id never changes."""
    fields = {f.name for f in dataclasses.fields(entity)}
    for key, value in changes.items():
        if key == "id" or key not in fields:
            logger.warning("Ignoring unknown field %r for %s", key, type(entity).__name__)
            continue
        converter = converters.get(key)
        if converter is not None:
            converted = converter(value)
            if converted is None and value is not None:
                logger.warning("Ignoring invalid %s=%r for %s", key, value, type(entity).__name__)
                continue
            value = converted
        setattr(entity, key, value)


# ---------------------------------------------------------------------------
# Same-day tallies (drive daily quests)
# ---------------------------------------------------------------------------

def _today(state: BudgetState, now: datetime, predicate) -> list[Transaction]:
    return [t for t in state.transactions if predicate(t) and is_same_day(t.date, now)]


def _is_expense(t: Transaction) -> bool:
    return t.type == TransactionType.EXPENSE


def _is_plain_income(t: Transaction) -> bool:
    return t.type == TransactionType.INCOME and not t.is_goal_contribution


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

def add_transaction(
    state: BudgetState,
    *,
    amount,
    type: str | TransactionType,
    now: datetime,
    account_id: str = DEFAULT_ACCOUNT_ID,
    envelope_id: Optional[str] = None,
    merchant: Optional[str] = None,
    note: Optional[str] = None,
    tags: Iterable[str] = (),
    id: Optional[str] = None,
    date: Optional[str] = None,
) -> BudgetState:
    """
    Record a transaction and apply its side effects.

    - expense: envelope balance ← max(0, balance − |amount|)
    - income: envelope balance += |amount|
    - transfer: envelopes untouched
    An unknown envelope id leaves balances alone; the transaction is still
    recorded. Rewards: XP by type, lifetime counters, same-day daily quests.
    """
    tx_type = _coerce(TransactionType, type)
    if tx_type is None:
        logger.warning("Ignoring transaction with unknown type %r", type)
        return state

    txn = Transaction(
        id=id or new_id(),
        date=date or now.isoformat(),
        amount=to_decimal(amount),
        type=tx_type,
        account_id=account_id,
        envelope_id=envelope_id,
        merchant=merchant,
        note=note,
        tags=tuple(tags or ()),
    )

    # Same-day tallies before this transaction lands; it always counts as +1
    expenses_today = len(_today(state, now, _is_expense))
    categorized_today = len(_today(
        state, now, lambda t: _is_expense(t) and state.find_envelope(t.envelope_id) is not None
    ))
    incomes_today = len(_today(state, now, _is_plain_income))
    bills_today = len(_today(state, now, lambda t: t.is_bill_payment))

    state.transactions.insert(0, txn)

    envelope = state.find_envelope(txn.envelope_id)
    if envelope is not None:
        if tx_type == TransactionType.EXPENSE:
            envelope.apply_delta(-abs(txn.amount))
        elif tx_type == TransactionType.INCOME:
            envelope.apply_delta(abs(txn.amount))

    game = state.game
    if tx_type == TransactionType.EXPENSE:
        award_xp(game, XP_RULES["expense_logged"])
        game.lifetime_expenses += 1
        apply_daily_trigger(state, DailyTrigger.EXPENSE_COUNT, expenses_today + 1)
        if envelope is not None:
            apply_daily_trigger(state, DailyTrigger.CATEGORIZED_EXPENSE_COUNT, categorized_today + 1)
    else:
        award_xp(game, XP_RULES["income_logged"])
        if _is_plain_income(txn):
            apply_daily_trigger(state, DailyTrigger.INCOME_COUNT, incomes_today + 1)

    if txn.is_bill_payment:
        game.lifetime_bill_payments += 1
        apply_daily_trigger(state, DailyTrigger.BILL_PAYMENT_COUNT, bills_today + 1)

    return state


def _import_row(row: Transaction | dict, index: int) -> Optional[Transaction]:
    """Decode one import row; rows that cannot be decoded yield None."""
    try:
        if isinstance(row, Transaction):
            txn = row
        else:
            data = dict(row)
            data["id"] = data.get("id") or new_id()
            txn = Transaction.from_dict(data)
        parse_iso(txn.date)
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Skipping import row %d: %s", index, exc)
        return None
    return txn


def import_transactions(state: BudgetState, transactions: Iterable[Transaction | dict]) -> BudgetState:
    """
    Prepend an already-parsed batch and pay the flat import bonus.

    Rows without an id get a fresh one. Rows missing a date, or whose date
    or type does not parse, are skipped with a warning.
    Imported rows do not touch balances or lifetime counters.
    """
    batch = [
        txn for txn in (_import_row(t, i) for i, t in enumerate(transactions, start=1))
        if txn is not None
    ]
    if not batch:
        return state
    state.transactions[:0] = batch
    award_xp(state.game, XP_RULES["transactions_imported"])
    logger.info("Imported %d transactions", len(batch))
    return state


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------

def allocate_envelope(state: BudgetState, envelope_id: str, delta) -> BudgetState:
    envelope = state.find_envelope(envelope_id)
    if envelope is not None:
        envelope.apply_delta(to_decimal(delta))
    return state


def add_envelope(
    state: BudgetState,
    *,
    name: str,
    monthly_budget,
    color: str = "#64748b",
    carry_over: bool = True,
    id: Optional[str] = None,
) -> BudgetState:
    budget = to_decimal(monthly_budget)
    state.envelopes.append(Envelope(
        id=id or new_id(),
        name=name,
        color=color,
        monthly_budget=budget,
        carry_over=carry_over,
        balance=max(Decimal("0"), budget),
    ))
    return state


def update_envelope(state: BudgetState, envelope_id: str, **changes) -> BudgetState:
    """
    Edit an envelope.

    First-time funding: when the envelope was unconfigured (monthly budget
    0) and the edit sets a positive budget, the balance is reset to it. Any
    other budget edit leaves the balance alone.
    """
    envelope = state.find_envelope(envelope_id)
    if envelope is None:
        return state
    was_unconfigured = envelope.monthly_budget == 0
    _apply_changes(envelope, changes, {
        "monthly_budget": to_decimal,
        "balance": lambda v: max(Decimal("0"), to_decimal(v)),
    })
    if "monthly_budget" in changes and was_unconfigured and envelope.monthly_budget > 0:
        envelope.reset_to_budget()
    return state


def delete_envelope(state: BudgetState, envelope_id: str) -> BudgetState:
    # Transactions keep pointing at the removed id
    state.envelopes = [e for e in state.envelopes if e.id != envelope_id]
    return state


# ---------------------------------------------------------------------------
# Recurring bills
# ---------------------------------------------------------------------------

_RECURRING_CONVERTERS = {
    "amount": to_decimal,
    "interval": lambda v: _coerce(Interval, v),
    "type": lambda v: _coerce(RecurringType, v),
}


def add_recurring(
    state: BudgetState,
    *,
    label: str,
    amount,
    interval: str | Interval,
    next_run: str,
    account_id: str = DEFAULT_ACCOUNT_ID,
    type: str | RecurringType = RecurringType.BILL,
    envelope_id: Optional[str] = None,
    is_default: bool = False,
    id: Optional[str] = None,
) -> BudgetState:
    rule_interval = _coerce(Interval, interval)
    rule_type = _coerce(RecurringType, type)
    if rule_interval is None or rule_type is None:
        logger.warning("Ignoring recurring rule with interval=%r type=%r", interval, type)
        return state
    state.recurring.append(RecurringRule(
        id=id or new_id(),
        label=label,
        amount=to_decimal(amount),
        interval=rule_interval,
        next_run=next_run,
        account_id=account_id,
        type=rule_type,
        envelope_id=envelope_id,
        is_default=is_default,
    ))
    return state


def update_recurring(state: BudgetState, rule_id: str, **changes) -> BudgetState:
    rule = state.find_recurring(rule_id)
    if rule is not None:
        _apply_changes(rule, changes, _RECURRING_CONVERTERS)
    return state


def delete_recurring(state: BudgetState, rule_id: str) -> BudgetState:
    state.recurring = [r for r in state.recurring if r.id != rule_id]
    return state


def mark_bill_paid(state: BudgetState, rule_id: str, now: datetime) -> BudgetState:
    """
    Pay a bill: advance next_run by one interval, log the payment as an
    expense, deduct the bound envelope and reward the user.
    """
    bill = state.find_recurring(rule_id)
    if bill is None:
        return state

    bills_today = len(_today(state, now, lambda t: t.is_bill_payment))

    bill.advance()
    state.transactions.insert(0, Transaction(
        id=new_id(),
        date=now.isoformat(),
        amount=bill.amount,
        type=TransactionType.EXPENSE,
        account_id=bill.account_id,
        envelope_id=bill.envelope_id,
        merchant=bill.label,
        note=BILL_PAYMENT_NOTE,
        tags=(BILL_PAYMENT_TAG,),
    ))

    envelope = state.find_envelope(bill.envelope_id)
    if envelope is not None:
        envelope.apply_delta(-bill.amount)

    game = state.game
    award_xp(game, XP_RULES["bill_paid"])
    apply_daily_trigger(state, DailyTrigger.BILL_PAYMENT_COUNT, bills_today + 1)
    game.lifetime_bill_payments += 1

    logger.info("Bill paid: %s %s, next run %s",
                bill.label, format_money(bill.amount, state.prefs.currency), bill.next_run)
    return state


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------

_GOAL_CONVERTERS = {
    "target_amount": to_decimal,
    "saved": to_decimal,
}


def add_goal(
    state: BudgetState,
    *,
    name: str,
    target_amount,
    target_date: Optional[str] = None,
    linked_envelope_id: Optional[str] = None,
    id: Optional[str] = None,
) -> BudgetState:
    state.goals.append(Goal(
        id=id or new_id(),
        name=name,
        target_amount=to_decimal(target_amount),
        target_date=target_date,
        linked_envelope_id=linked_envelope_id,
    ))
    return state


def update_goal(state: BudgetState, goal_id: str, **changes) -> BudgetState:
    goal = state.find_goal(goal_id)
    if goal is not None:
        _apply_changes(goal, changes, _GOAL_CONVERTERS)
    return state


def delete_goal(state: BudgetState, goal_id: str) -> BudgetState:
    state.goals = [g for g in state.goals if g.id != goal_id]
    return state


def add_to_goal(state: BudgetState, goal_id: str, amount, now: datetime) -> BudgetState:
    """
    Contribute to a goal.

    The amount always leaves the savings envelope, whatever envelope the
    goal is linked to, and is logged as an income transaction for the history.
    The lifetime goals counter moves only on the contribution that crosses
    the target.
    """
    goal = state.find_goal(goal_id)
    if goal is None:
        return state
    amount = to_decimal(amount)

    just_completed = goal.contribute(amount)

    envelope = state.find_envelope(SAVINGS_ENVELOPE_ID)
    if envelope is not None:
        envelope.apply_delta(-amount)

    state.transactions.insert(0, Transaction(
        id=new_id(),
        date=now.isoformat(),
        amount=amount,
        type=TransactionType.INCOME,
        account_id=DEFAULT_ACCOUNT_ID,
        envelope_id=SAVINGS_ENVELOPE_ID,
        merchant=f"💰 {goal.name}",
        note=f"Goal contribution: {goal.name}",
        tags=(GOAL_CONTRIBUTION_TAG, f"{GOAL_TAG_PREFIX}{goal.id}"),
    ))

    game = state.game
    award_xp(game, XP_RULES["goal_contribution"])
    if just_completed:
        game.lifetime_goals_completed += 1
        logger.info("Goal completed: %s", goal.id)

    contributions = _today(state, now, lambda t: t.is_goal_contribution)
    apply_daily_trigger(state, DailyTrigger.GOAL_CONTRIBUTION_COUNT, len(contributions))
    funded = {t.goal_id for t in contributions if t.goal_id is not None}
    apply_daily_trigger(state, DailyTrigger.DISTINCT_GOALS_FUNDED, len(funded))
    return state


def initialize_default_goals(state: BudgetState, now: datetime) -> BudgetState:
    existing = {g.id for g in state.goals}
    state.goals.extend(g for g in default_goals(now) if g.id not in existing)
    return state


def reset_goals_saved_amounts(state: BudgetState) -> BudgetState:
    for goal in state.goals:
        goal.saved = Decimal("0")
    return state


# ---------------------------------------------------------------------------
# Income sources (monthly budget configs)
# ---------------------------------------------------------------------------

_BUDGET_CONVERTERS = {
    "amount": to_decimal,
    "source": lambda v: _coerce(IncomeSource, v),
    "frequency": lambda v: _coerce(IncomeFrequency, v),
}


def add_monthly_budget(
    state: BudgetState,
    *,
    amount,
    source: str | IncomeSource,
    frequency: str | IncomeFrequency,
    label: Optional[str] = None,
    enabled: bool = True,
    id: Optional[str] = None,
) -> BudgetState:
    budget_source = _coerce(IncomeSource, source)
    budget_frequency = _coerce(IncomeFrequency, frequency)
    if budget_source is None or budget_frequency is None:
        logger.warning("Ignoring income source with source=%r frequency=%r", source, frequency)
        return state
    state.monthly_budgets.append(MonthlyBudgetConfig(
        id=id or new_id(),
        amount=to_decimal(amount),
        source=budget_source,
        frequency=budget_frequency,
        label=label,
        enabled=enabled,
    ))
    apply_daily_trigger(state, DailyTrigger.BUDGET_UPDATED, 1)
    return state


def update_monthly_budget(state: BudgetState, config_id: str, **changes) -> BudgetState:
    config = state.find_monthly_budget(config_id)
    if config is not None:
        _apply_changes(config, changes, _BUDGET_CONVERTERS)
        apply_daily_trigger(state, DailyTrigger.BUDGET_UPDATED, 1)
    return state


def delete_monthly_budget(state: BudgetState, config_id: str) -> BudgetState:
    state.monthly_budgets = [b for b in state.monthly_budgets if b.id != config_id]
    return state


# ---------------------------------------------------------------------------
# Derived queries
# ---------------------------------------------------------------------------

def get_safe_to_spend(state: BudgetState, now: datetime) -> Decimal:
    """
    Safe-to-Spend (STS):
        STS = Σ balance(carry-over envelopes) − Σ amount(bills due in 0..7 days)

    Pure function of the state and the current date; never cached.
    """
    carry_over = sum((e.balance for e in state.envelopes if e.carry_over), Decimal("0"))
    upcoming = sum(
        (
            r.amount for r in state.recurring
            if r.type == RecurringType.BILL
            and 0 <= days_until(r.next_run, now) <= UPCOMING_BILLS_WINDOW_DAYS
        ),
        Decimal("0"),
    )
    return carry_over - upcoming


def get_total_monthly_budget(state: BudgetState) -> Decimal:
    """Monthly equivalent of all enabled income sources."""
    return sum((b.monthly_amount for b in state.monthly_budgets if b.enabled), Decimal("0"))


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------

def reset_data(state: BudgetState, now: datetime, rng: Optional[random.Random] = None) -> BudgetState:
    """
    Start the current month from scratch.

    Clears the working month and the archive; goals, bills, income sources,
    prefs and the whole game profile stay. Achievement quests keep their
    progress and completion so nothing can be earned twice.
    """
    achievements = [q for q in state.game.quests if q.type == QuestType.ACHIEVEMENT]
    state.transactions = []
    for envelope in state.envelopes:
        envelope.reset_to_budget()
    for account in state.accounts:
        account.balance = Decimal("0")
    state.game.quests = generate_daily_quests(now, rng) + achievements
    ensure_all_achievement_quests(state)
    state.current_month = month_key(now)
    state.monthly_history = []
    logger.info("Data reset for %s", state.current_month)
    return state


def restore_default_bills(state: BudgetState, now: datetime) -> BudgetState:
    existing = {r.id for r in state.recurring}
    missing = [b for b in default_bills(now) if b.id not in existing]
    if missing:
        state.recurring.extend(missing)
        logger.info("Restored %d default bills", len(missing))
    return state


def update_sound_settings(state: BudgetState, **changes) -> BudgetState:
    settings = state.prefs.sound_settings
    for key, value in changes.items():
        if key not in settings:
            logger.warning("Ignoring unknown sound setting %r", key)
            continue
        settings[key] = value
    return state
