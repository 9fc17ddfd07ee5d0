"""
Daily activity streak.
"""
import logging
from datetime import datetime

from questledger.domain.state import BudgetState
from questledger.utils.dates import days_between

logger = logging.getLogger(__name__)


def check_streak(state: BudgetState, now: datetime) -> BudgetState:
    """
    Update the streak from the calendar-day gap since ``last_active``.

    0 days  → no change (idempotent within a day)
    1 day   → streak + 1
    >1 days → streak resets to 1
    A negative gap (clock moved back) is ignored.
    """
    game = state.game
    gap = days_between(game.last_active, now)
    if gap <= 0:
        return state
    if gap == 1:
        game.streak += 1
    else:
        logger.info("Streak broken after %d days, was %d", gap, game.streak)
        game.streak = 1
    game.last_active = now.isoformat()
    game.streak_record = max(game.streak_record, game.streak)
    return state
