"""
BudgetStore - the single owner of the live BudgetState.

Adds what the plain action functions leave out:
  - a re-entrant lock, so UI actions and the background badge job never
    interleave
  - the post-commit queue (achievement reconciliation, badge check)
  - autosave after every action; a failed save is logged, never raised

Usage:
    store = BudgetStore(repository=repo).open()
    store.add_transaction(amount="250", type="expense", envelope_id="food")
    store.get_safe_to_spend()
"""
import copy
import logging
import random
import threading
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional

from questledger.application import ledger
from questledger.application.badges import check_and_award_badges, ensure_all_badges
from questledger.application.months import switch_to_month
from questledger.application.post_commit import PostCommitQueue, PostCommitTask
from questledger.application.quests import (
    complete_quest,
    ensure_all_achievement_quests,
    refresh_daily_quests,
    track_section_view,
    update_achievement_quests,
    update_quest_progress,
)
from questledger.application.seed import seed_state
from questledger.application.streak import check_streak
from questledger.config import Settings, get_settings
from questledger.domain.gamification import Section
from questledger.domain.state import BudgetState
from questledger.domain.transaction import Transaction
from questledger.infrastructure.persistence.codec import StateDocumentError
from questledger.infrastructure.persistence.repository import BudgetDocumentRepository

logger = logging.getLogger(__name__)

# Actions after which lifetime counters, xp or coins may have moved
_REWARD_FOLLOW_UPS = (PostCommitTask.RECONCILE_ACHIEVEMENTS, PostCommitTask.CHECK_BADGES)


class BudgetStore:
    def __init__(
        self,
        repository: Optional[BudgetDocumentRepository] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
        settings: Optional[Settings] = None,
        state: Optional[BudgetState] = None,
    ):
        self.repository = repository
        self.clock = clock or datetime.now
        self.rng = rng
        self.settings = settings or get_settings()
        self.queue = PostCommitQueue()
        self._lock = threading.RLock()
        self._state = state

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> "BudgetStore":
        """
        Load the stored document, or seed a fresh state.

        A corrupt document is logged and replaced by a fresh seed, unless
        STRICT_LOAD is set, in which case StateDocumentError propagates.
        Catalog badges and achievements missing from older documents are
        added.
        """
        with self._lock:
            now = self.clock()
            state = None
            if self.repository is not None:
                try:
                    state = self.repository.load(now)
                except StateDocumentError:
                    if self.settings.STRICT_LOAD:
                        raise
                    logger.exception("Stored budget document is unreadable, starting fresh")
            if state is None:
                state = seed_state(now, self.rng)
                logger.info("Seeded a fresh budget for %s", state.current_month)
            ensure_all_badges(state)
            ensure_all_achievement_quests(state)
            self._state = state
            self._persist()
        return self

    @property
    def state(self) -> BudgetState:
        """Live state, for code already holding the lock. Readers use snapshot()."""
        if self._state is None:
            self.open()
        return self._state

    def save(self) -> None:
        """Explicit save; unlike autosave, errors propagate."""
        with self._lock:
            if self.repository is not None:
                self.repository.save(self.state)

    def _persist(self) -> None:
        if self.repository is None or not self.settings.AUTOSAVE:
            return
        try:
            self.repository.save(self._state)
        except Exception:
            logger.exception("Autosave failed")

    # ------------------------------------------------------------------
    # Post-commit queue
    # ------------------------------------------------------------------

    def _drain(self) -> bool:
        tasks = self.queue.drain()
        for task in tasks:
            if task == PostCommitTask.RECONCILE_ACHIEVEMENTS:
                update_achievement_quests(self.state)
            elif task == PostCommitTask.CHECK_BADGES:
                check_and_award_badges(self.state, self.clock())
        return bool(tasks)

    def _run(self, action: Callable, *args, follow_ups: Iterable[PostCommitTask] = (), **kwargs) -> None:
        with self._lock:
            self._drain()
            action(self.state, *args, **kwargs)
            for task in follow_ups:
                self.queue.enqueue(task)
            self._persist()

    def _read(self, query: Callable, *args):
        with self._lock:
            if self._drain():
                self._persist()
            return query(self.state, *args)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def snapshot(self) -> BudgetState:
        """Deep copy of the current state; mutating it does not affect the store."""
        return self._read(copy.deepcopy)

    def get_safe_to_spend(self) -> Decimal:
        return self._read(ledger.get_safe_to_spend, self.clock())

    def get_total_monthly_budget(self) -> Decimal:
        return self._read(ledger.get_total_monthly_budget)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def add_transaction(self, **data) -> None:
        """Keyword arguments as in ledger.add_transaction (amount, type, envelope_id...)."""
        self._run(ledger.add_transaction, now=self.clock(), follow_ups=_REWARD_FOLLOW_UPS, **data)

    def import_transactions(self, transactions: Iterable[Transaction | dict]) -> None:
        self._run(ledger.import_transactions, list(transactions), follow_ups=_REWARD_FOLLOW_UPS)

    # ------------------------------------------------------------------
    # Envelopes
    # ------------------------------------------------------------------

    def allocate_envelope(self, envelope_id: str, delta) -> None:
        self._run(ledger.allocate_envelope, envelope_id, delta)

    def add_envelope(self, **data) -> None:
        self._run(ledger.add_envelope, **data)

    def update_envelope(self, envelope_id: str, **changes) -> None:
        self._run(ledger.update_envelope, envelope_id, **changes)

    def delete_envelope(self, envelope_id: str) -> None:
        self._run(ledger.delete_envelope, envelope_id)

    # ------------------------------------------------------------------
    # Recurring bills
    # ------------------------------------------------------------------

    def add_recurring(self, **data) -> None:
        self._run(ledger.add_recurring, **data)

    def update_recurring(self, rule_id: str, **changes) -> None:
        self._run(ledger.update_recurring, rule_id, **changes)

    def delete_recurring(self, rule_id: str) -> None:
        self._run(ledger.delete_recurring, rule_id)

    def mark_bill_paid(self, rule_id: str) -> None:
        self._run(ledger.mark_bill_paid, rule_id, self.clock(), follow_ups=_REWARD_FOLLOW_UPS)

    def restore_default_bills(self) -> None:
        self._run(ledger.restore_default_bills, self.clock())

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    def add_goal(self, **data) -> None:
        self._run(ledger.add_goal, **data)

    def update_goal(self, goal_id: str, **changes) -> None:
        self._run(ledger.update_goal, goal_id, **changes, follow_ups=(PostCommitTask.CHECK_BADGES,))

    def delete_goal(self, goal_id: str) -> None:
        self._run(ledger.delete_goal, goal_id)

    def add_to_goal(self, goal_id: str, amount) -> None:
        self._run(ledger.add_to_goal, goal_id, amount, self.clock(), follow_ups=_REWARD_FOLLOW_UPS)

    def initialize_default_goals(self) -> None:
        self._run(ledger.initialize_default_goals, self.clock())

    def reset_goals_saved_amounts(self) -> None:
        self._run(ledger.reset_goals_saved_amounts)

    # ------------------------------------------------------------------
    # Income sources
    # ------------------------------------------------------------------

    def add_monthly_budget(self, **data) -> None:
        self._run(ledger.add_monthly_budget, **data, follow_ups=_REWARD_FOLLOW_UPS)

    def update_monthly_budget(self, config_id: str, **changes) -> None:
        self._run(ledger.update_monthly_budget, config_id, **changes, follow_ups=_REWARD_FOLLOW_UPS)

    def delete_monthly_budget(self, config_id: str) -> None:
        self._run(ledger.delete_monthly_budget, config_id)

    # ------------------------------------------------------------------
    # Gamification
    # ------------------------------------------------------------------

    def complete_quest(self, quest_id: str) -> None:
        self._run(complete_quest, quest_id, follow_ups=_REWARD_FOLLOW_UPS)

    def update_quest_progress(self, quest_id: str, delta: int) -> None:
        self._run(update_quest_progress, quest_id, delta, follow_ups=_REWARD_FOLLOW_UPS)

    def refresh_daily_quests(self) -> None:
        self._run(refresh_daily_quests, self.clock(), self.rng)

    def update_achievement_quests(self) -> None:
        self._run(update_achievement_quests, follow_ups=(PostCommitTask.CHECK_BADGES,))

    def ensure_all_achievement_quests(self) -> None:
        self._run(ensure_all_achievement_quests, follow_ups=_REWARD_FOLLOW_UPS)

    def check_and_award_badges(self) -> None:
        self._run(check_and_award_badges, self.clock(), follow_ups=(PostCommitTask.RECONCILE_ACHIEVEMENTS,))

    def check_streak(self) -> None:
        self._run(check_streak, self.clock(), follow_ups=_REWARD_FOLLOW_UPS)

    def track_section_view(self, section: str | Section) -> None:
        try:
            section = Section(section)
        except ValueError:
            logger.warning("Ignoring view of unknown section %r", section)
            return
        self._run(track_section_view, section, self.clock(), follow_ups=_REWARD_FOLLOW_UPS)

    # ------------------------------------------------------------------
    # Months and maintenance
    # ------------------------------------------------------------------

    def switch_to_month(self, target_month: str) -> None:
        self._run(switch_to_month, target_month)

    def reset_data(self) -> None:
        self._run(ledger.reset_data, self.clock(), self.rng, follow_ups=_REWARD_FOLLOW_UPS)

    def update_sound_settings(self, **changes) -> None:
        self._run(ledger.update_sound_settings, **changes)
