"""
Badge catalog and the badge unlock check.

check_and_award_badges is called after user actions and from a periodic
background job, so it is built to be called redundantly: each unlock is
guarded by ``unlocked_at is None`` right before the mutation that grants it.
"""
import logging
from dataclasses import dataclass
from datetime import datetime

from questledger.application.counters import Counter, read_counter
from questledger.application.xp import BADGE_UNLOCK_COINS, award_coins
from questledger.domain.gamification import Badge, BadgeTier
from questledger.domain.state import BudgetState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BadgeDefinition:
    id: str
    name: str
    description: str
    icon: str
    tier: BadgeTier
    requirement: int
    counter: Counter

    def instantiate(self) -> Badge:
        return Badge(
            id=self.id,
            name=self.name,
            description=self.description,
            icon=self.icon,
            tier=self.tier,
            requirement=self.requirement,
        )


BADGE_DEFINITIONS: tuple[BadgeDefinition, ...] = (
    BadgeDefinition("badge-expense-bronze", "Expense Tracker", "Log 10 expenses", "📝",
                    BadgeTier.BRONZE, 10, Counter.LIFETIME_EXPENSES),
    BadgeDefinition("badge-expense-silver", "Diligent Logger", "Log 50 expenses", "📊",
                    BadgeTier.SILVER, 50, Counter.LIFETIME_EXPENSES),
    BadgeDefinition("badge-expense-gold", "Master Tracker", "Log 100 expenses", "📈",
                    BadgeTier.GOLD, 100, Counter.LIFETIME_EXPENSES),
    BadgeDefinition("badge-streak-bronze", "Consistent", "7-day streak", "🔥",
                    BadgeTier.BRONZE, 7, Counter.STREAK),
    BadgeDefinition("badge-streak-silver", "Dedicated", "30-day streak", "⭐",
                    BadgeTier.SILVER, 30, Counter.STREAK),
    BadgeDefinition("badge-streak-gold", "Unstoppable", "100-day streak", "💎",
                    BadgeTier.GOLD, 100, Counter.STREAK),
    BadgeDefinition("badge-streak-platinum", "Legendary", "365-day streak", "👑",
                    BadgeTier.PLATINUM, 365, Counter.STREAK),
    BadgeDefinition("badge-goals-bronze", "Goal Setter", "Complete 1 goal", "🎯",
                    BadgeTier.BRONZE, 1, Counter.LIFETIME_GOALS_COMPLETED),
    BadgeDefinition("badge-goals-silver", "Goal Achiever", "Complete 5 goals", "🏆",
                    BadgeTier.SILVER, 5, Counter.LIFETIME_GOALS_COMPLETED),
    BadgeDefinition("badge-goals-gold", "Dream Chaser", "Complete 10 goals", "🌟",
                    BadgeTier.GOLD, 10, Counter.LIFETIME_GOALS_COMPLETED),
    BadgeDefinition("badge-saver-bronze", "Saver", "Save 1,000", "💰",
                    BadgeTier.BRONZE, 1000, Counter.TOTAL_SAVED),
    BadgeDefinition("badge-saver-silver", "Smart Saver", "Save 5,000", "💵",
                    BadgeTier.SILVER, 5000, Counter.TOTAL_SAVED),
    BadgeDefinition("badge-saver-gold", "Wealth Builder", "Save 10,000", "💎",
                    BadgeTier.GOLD, 10000, Counter.TOTAL_SAVED),
    BadgeDefinition("badge-bills-bronze", "Bill Payer", "Pay 5 bills on time", "📄",
                    BadgeTier.BRONZE, 5, Counter.LIFETIME_BILL_PAYMENTS),
    BadgeDefinition("badge-bills-silver", "Responsible", "Pay 20 bills on time", "✅",
                    BadgeTier.SILVER, 20, Counter.LIFETIME_BILL_PAYMENTS),
    BadgeDefinition("badge-bills-gold", "Never Late", "Pay 50 bills on time", "⚡",
                    BadgeTier.GOLD, 50, Counter.LIFETIME_BILL_PAYMENTS),
)

BADGES_BY_ID = {b.id: b for b in BADGE_DEFINITIONS}


def initialize_badges() -> list[Badge]:
    return [definition.instantiate() for definition in BADGE_DEFINITIONS]


def ensure_all_badges(state: BudgetState) -> BudgetState:
    existing = {b.id for b in state.game.badges}
    state.game.badges.extend(d.instantiate() for d in BADGE_DEFINITIONS if d.id not in existing)
    return state


def check_and_award_badges(state: BudgetState, now: datetime) -> BudgetState:
    """
    Unlock every badge whose counter has reached its requirement.

    Already-unlocked badges are skipped entirely, their progress stays
    frozen. Each unlock stamps ``unlocked_at`` and pays BADGE_UNLOCK_COINS.
    """
    game = state.game
    for badge in game.badges:
        if badge.is_unlocked:
            continue
        definition = BADGES_BY_ID.get(badge.id)
        if definition is None:
            continue
        badge.progress = read_counter(state, definition.counter)
        if badge.progress >= badge.requirement and badge.unlocked_at is None:
            badge.unlocked_at = now.isoformat()
            award_coins(game, BADGE_UNLOCK_COINS)
            logger.info("Badge unlocked: %s (%s)", badge.id, badge.tier.value)
    return state
