"""
Quest catalogs and quest use cases.

Two kinds of quests live side by side in ``game.quests``:

- daily quests: sampled every calendar day from DAILY_QUEST_TEMPLATES,
  id = "<template id>-<YYYY-MM-DD>", expire at the next local midnight;
- achievement quests: permanent, seeded once from ACHIEVEMENT_QUESTS, their
  progress is recomputed from a durable Counter by reconciliation.

Daily quests progress through typed triggers (DailyTrigger), achievement
quests through Counters; no quest is ever matched by title or substring.
"""
import logging
import random
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from questledger.application.counters import Counter, read_counter
from questledger.application.xp import grant_quest_reward
from questledger.domain.gamification import Quest, QuestCategory, QuestType, Section
from questledger.domain.state import BudgetState
from questledger.utils.dates import next_midnight, parse_iso

logger = logging.getLogger(__name__)

_DATE_SUFFIX_RE = re.compile(r"-\d{4}-\d{2}-\d{2}$")

MIN_DAILY_QUESTS = 3
MAX_DAILY_QUESTS = 4


class DailyTrigger(str, Enum):
    EXPENSE_COUNT = "expense_count"
    CATEGORIZED_EXPENSE_COUNT = "categorized_expense_count"
    INCOME_COUNT = "income_count"
    BILL_PAYMENT_COUNT = "bill_payment_count"
    GOAL_CONTRIBUTION_COUNT = "goal_contribution_count"
    DISTINCT_GOALS_FUNDED = "distinct_goals_funded"
    BUDGET_UPDATED = "budget_updated"
    VIEW_BILLS = "view_bills"
    VIEW_ENVELOPES = "view_envelopes"
    VIEW_INSIGHTS = "view_insights"
    VIEW_SAFE_TO_SPEND = "view_safe_to_spend"
    # Completed by the caller through complete_quest / update_quest_progress
    MANUAL = "manual"


SECTION_TRIGGERS: dict[Section, DailyTrigger] = {
    Section.BILLS: DailyTrigger.VIEW_BILLS,
    Section.ENVELOPES: DailyTrigger.VIEW_ENVELOPES,
    Section.INSIGHTS: DailyTrigger.VIEW_INSIGHTS,
    Section.SAFE_TO_SPEND: DailyTrigger.VIEW_SAFE_TO_SPEND,
}


@dataclass(frozen=True)
class DailyQuestTemplate:
    id: str
    title: str
    description: str
    category: QuestCategory
    xp: int
    coin_reward: int
    target: int
    trigger: DailyTrigger

    def instantiate(self, now: datetime) -> Quest:
        """Daily instance for the calendar day of ``now``, expiring at next midnight."""
        return Quest(
            id=f"{self.id}-{now.date().isoformat()}",
            title=self.title,
            description=self.description,
            type=QuestType.DAILY,
            category=self.category,
            target=self.target,
            xp=self.xp,
            coin_reward=self.coin_reward,
            expires_at=next_midnight(now).isoformat(),
        )


@dataclass(frozen=True)
class AchievementDefinition:
    id: str
    title: str
    description: str
    category: QuestCategory
    xp: int
    coin_reward: int
    target: int
    counter: Counter

    def instantiate(self) -> Quest:
        return Quest(
            id=self.id,
            title=self.title,
            description=self.description,
            type=QuestType.ACHIEVEMENT,
            category=self.category,
            target=self.target,
            xp=self.xp,
            coin_reward=self.coin_reward,
        )


DAILY_QUEST_TEMPLATES: tuple[DailyQuestTemplate, ...] = (
    DailyQuestTemplate("daily-log-expense", "Track Your Spending", "Log at least 1 expense today",
                       QuestCategory.SPENDING, 10, 5, 1, DailyTrigger.EXPENSE_COUNT),
    DailyQuestTemplate("daily-log-3-expenses", "Diligent Tracker", "Log 3 or more expenses today",
                       QuestCategory.SPENDING, 20, 10, 3, DailyTrigger.EXPENSE_COUNT),
    DailyQuestTemplate("daily-log-5-expenses", "Super Tracker", "Log 5 or more expenses today",
                       QuestCategory.SPENDING, 30, 15, 5, DailyTrigger.EXPENSE_COUNT),
    DailyQuestTemplate("daily-check-bills", "Bill Awareness", "Check your bills section",
                       QuestCategory.BILLS, 5, 3, 1, DailyTrigger.VIEW_BILLS),
    DailyQuestTemplate("daily-update-goal", "Goal Progress", "Add money to any savings goal",
                       QuestCategory.GOALS, 15, 8, 1, DailyTrigger.GOAL_CONTRIBUTION_COUNT),
    DailyQuestTemplate("daily-stay-budget", "Budget Conscious", "Keep spending within budget for the day",
                       QuestCategory.SPENDING, 25, 15, 1, DailyTrigger.MANUAL),
    DailyQuestTemplate("daily-pay-bill", "Bill Payer", "Mark a bill as paid",
                       QuestCategory.BILLS, 20, 12, 1, DailyTrigger.BILL_PAYMENT_COUNT),
    DailyQuestTemplate("daily-review-envelopes", "Budget Review", "Review your budget envelopes",
                       QuestCategory.SPENDING, 8, 4, 1, DailyTrigger.VIEW_ENVELOPES),
    DailyQuestTemplate("daily-add-income", "Income Logger", "Log an income transaction",
                       QuestCategory.SAVING, 12, 6, 1, DailyTrigger.INCOME_COUNT),
    DailyQuestTemplate("daily-check-insights", "Financial Insights", "View your financial insights",
                       QuestCategory.SPENDING, 10, 5, 1, DailyTrigger.VIEW_INSIGHTS),
    DailyQuestTemplate("daily-update-budget", "Budget Planner", "Update your monthly budget",
                       QuestCategory.SPENDING, 15, 8, 1, DailyTrigger.BUDGET_UPDATED),
    DailyQuestTemplate("daily-check-safe-to-spend", "Spending Check", "Check your safe-to-spend amount",
                       QuestCategory.SPENDING, 8, 4, 1, DailyTrigger.VIEW_SAFE_TO_SPEND),
    DailyQuestTemplate("daily-2-goals-contribute", "Multi-Goal Saver", "Contribute to 2 different goals",
                       QuestCategory.GOALS, 25, 12, 2, DailyTrigger.DISTINCT_GOALS_FUNDED),
    DailyQuestTemplate("daily-categorize-expense", "Smart Categorization", "Log an expense with proper category",
                       QuestCategory.SPENDING, 12, 6, 1, DailyTrigger.CATEGORIZED_EXPENSE_COUNT),
    DailyQuestTemplate("daily-pay-2-bills", "Bill Crusher", "Pay 2 bills in one day",
                       QuestCategory.BILLS, 30, 15, 2, DailyTrigger.BILL_PAYMENT_COUNT),
    DailyQuestTemplate("daily-save-50", "Thrifty Day", "Keep daily spending under 50 coins worth",
                       QuestCategory.SAVING, 20, 10, 1, DailyTrigger.MANUAL),
)

DAILY_TEMPLATES_BY_ID = {t.id: t for t in DAILY_QUEST_TEMPLATES}

ACHIEVEMENT_QUESTS: tuple[AchievementDefinition, ...] = (
    AchievementDefinition("achievement-first-expense", "First Steps", "Log your first expense",
                          QuestCategory.SPENDING, 50, 25, 1, Counter.LIFETIME_EXPENSES),
    AchievementDefinition("achievement-10-expenses", "Tracking Habit", "Log 10 total expenses",
                          QuestCategory.SPENDING, 100, 50, 10, Counter.LIFETIME_EXPENSES),
    AchievementDefinition("achievement-streak-7", "Week Warrior", "Maintain a 7-day streak",
                          QuestCategory.STREAK, 150, 75, 7, Counter.STREAK),
    AchievementDefinition("achievement-streak-30", "Monthly Master", "Maintain a 30-day streak",
                          QuestCategory.STREAK, 500, 250, 30, Counter.STREAK),
    AchievementDefinition("achievement-goal-complete", "Goal Achieved", "Complete your first savings goal",
                          QuestCategory.GOALS, 200, 100, 1, Counter.LIFETIME_GOALS_COMPLETED),
    AchievementDefinition("achievement-level-5", "Rising Star", "Reach Level 5",
                          QuestCategory.STREAK, 100, 50, 5, Counter.LEVEL),
    AchievementDefinition("achievement-level-10", "Finance Pro", "Reach Level 10",
                          QuestCategory.STREAK, 250, 125, 10, Counter.LEVEL),
    AchievementDefinition("achievement-50-expenses", "Expense Master", "Log 50 total expenses",
                          QuestCategory.SPENDING, 300, 150, 50, Counter.LIFETIME_EXPENSES),
    AchievementDefinition("achievement-100-expenses", "Ultimate Tracker", "Log 100 total expenses",
                          QuestCategory.SPENDING, 500, 250, 100, Counter.LIFETIME_EXPENSES),
    AchievementDefinition("achievement-5-goals", "Goal Crusher", "Complete 5 savings goals",
                          QuestCategory.GOALS, 400, 200, 5, Counter.LIFETIME_GOALS_COMPLETED),
    AchievementDefinition("achievement-10-bills", "Bill Master", "Pay 10 bills",
                          QuestCategory.BILLS, 300, 150, 10, Counter.LIFETIME_BILL_PAYMENTS),
    AchievementDefinition("achievement-level-20", "Financial Expert", "Reach Level 20",
                          QuestCategory.STREAK, 600, 300, 20, Counter.LEVEL),
    AchievementDefinition("achievement-streak-60", "Two Month Legend", "Maintain a 60-day streak",
                          QuestCategory.STREAK, 800, 400, 60, Counter.STREAK),
    AchievementDefinition("achievement-1000-coins", "Coin Collector", "Earn 1000 total coins",
                          QuestCategory.SAVING, 350, 150, 1000, Counter.TOTAL_COINS_EARNED),
    AchievementDefinition("achievement-50-bills", "Bill Champion", "Pay 50 bills",
                          QuestCategory.BILLS, 700, 350, 50, Counter.LIFETIME_BILL_PAYMENTS),
)

ACHIEVEMENTS_BY_ID = {a.id: a for a in ACHIEVEMENT_QUESTS}


def template_id_of(quest: Quest) -> str:
    """Template identity of a quest: the id without its date suffix."""
    return _DATE_SUFFIX_RE.sub("", quest.id)


def daily_trigger_of(quest: Quest) -> Optional[DailyTrigger]:
    template = DAILY_TEMPLATES_BY_ID.get(template_id_of(quest))
    return template.trigger if template else None


def seed_achievement_quests() -> list[Quest]:
    return [definition.instantiate() for definition in ACHIEVEMENT_QUESTS]


def generate_daily_quests(now: datetime, rng: Optional[random.Random] = None) -> list[Quest]:
    """
    Sample 3-4 distinct daily quests for the calendar day of ``now``.

    The date in the id makes the instance identity idempotent per day:
    the same template can never be active twice on one day.
    """
    rng = rng or random.Random()
    count = rng.randint(MIN_DAILY_QUESTS, MAX_DAILY_QUESTS)
    selected = rng.sample(DAILY_QUEST_TEMPLATES, count)
    return [template.instantiate(now) for template in selected]


def should_refresh_daily_quests(quests: list[Quest], now: datetime) -> bool:
    daily = [q for q in quests if q.type == QuestType.DAILY]
    if not daily:
        return True
    return any(q.expires_at is not None and parse_iso(q.expires_at) <= now for q in daily)


def refresh_daily_quests(
    state: BudgetState, now: datetime, rng: Optional[random.Random] = None
) -> BudgetState:
    """
    Replace every daily quest (done or not) once any of them has expired.

    No-op while all active daily quests are still valid. Achievement quests
    are never touched.
    """
    game = state.game
    if not should_refresh_daily_quests(game.quests, now):
        return state
    kept = [q for q in game.quests if q.type != QuestType.DAILY]
    fresh = generate_daily_quests(now, rng)
    game.quests = kept + fresh
    logger.info("Daily quests refreshed: %s", ", ".join(q.id for q in fresh))
    return state


def _find_quest(state: BudgetState, quest_id: str) -> Optional[Quest]:
    quests = state.game.quests
    exact = next((q for q in quests if q.id == quest_id), None)
    if exact is not None:
        return exact
    return next((q for q in quests if q.id.startswith(quest_id + "-")), None)


def complete_quest(state: BudgetState, quest_id: str) -> BudgetState:
    """Mark a quest done and pay its reward. No-op for unknown or done quests."""
    quest = state.game.find_quest(quest_id)
    if quest is None or quest.done:
        return state
    if quest.set_progress(quest.target):
        grant_quest_reward(state.game, quest)
    return state


def update_quest_progress(state: BudgetState, quest_id: str, delta: int) -> BudgetState:
    """
    Add ``delta`` to a quest's progress, clamped at target.

    ``quest_id`` may be the full id or, for daily quests, the template id.
    Reaching the target completes the quest and pays its reward.
    """
    quest = _find_quest(state, quest_id)
    if quest is None or quest.done:
        return state
    if quest.set_progress(quest.progress + delta):
        grant_quest_reward(state.game, quest)
    return state


def apply_daily_trigger(state: BudgetState, trigger: DailyTrigger, count: int) -> BudgetState:
    """
    Set progress of every open daily quest bound to ``trigger`` to ``count``.

    ``count`` is an absolute same-day tally (e.g. expenses logged today),
    so applying it twice is harmless.
    """
    for quest in state.game.quests:
        if quest.type != QuestType.DAILY or quest.done:
            continue
        if daily_trigger_of(quest) != trigger:
            continue
        if quest.set_progress(max(quest.progress, count)):
            grant_quest_reward(state.game, quest)
    return state


def update_achievement_quests(state: BudgetState) -> BudgetState:
    """
    Reconcile achievement quests against their lifetime counters.

    Done quests are excluded from recomputation; each not-done quest whose
    counter reaches its target completes exactly once. Counters are re-read
    for every quest, so a level gained by one completion is visible to the
    level quests evaluated after it.
    """
    for quest in state.game.quests:
        if quest.type != QuestType.ACHIEVEMENT or quest.done:
            continue
        definition = ACHIEVEMENTS_BY_ID.get(quest.id)
        if definition is None:
            continue
        if quest.set_progress(read_counter(state, definition.counter)):
            grant_quest_reward(state.game, quest)
    return state


def ensure_all_achievement_quests(state: BudgetState) -> BudgetState:
    """Append catalog achievements missing from older documents."""
    existing = {q.id for q in state.game.quests}
    missing = [d.instantiate() for d in ACHIEVEMENT_QUESTS if d.id not in existing]
    if missing:
        logger.info("Adding %d missing achievement quests: %s",
                    len(missing), ", ".join(q.title for q in missing))
        state.game.quests.extend(missing)
    return state


def track_section_view(state: BudgetState, section: Section, now: datetime) -> BudgetState:
    """
    Record the first view of a section per calendar day.

    The first view of the day completes the matching section-view daily
    quest; later views the same day change nothing.
    """
    views = state.game.daily_section_views
    last_view = views.get(section.value)
    if last_view is not None and parse_iso(last_view).date() == now.date():
        return state
    views[section.value] = now.isoformat()
    trigger = SECTION_TRIGGERS.get(section)
    if trigger is not None:
        apply_daily_trigger(state, trigger, 1)
    return state
