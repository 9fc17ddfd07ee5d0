"""
Tests for badge unlocks and the activity streak
"""
from datetime import datetime, timedelta
from decimal import Decimal

from questledger.application.badges import BADGE_DEFINITIONS, check_and_award_badges, ensure_all_badges
from questledger.application.streak import check_streak


def _badge(state, badge_id):
    return next(b for b in state.game.badges if b.id == badge_id)


# ---------------------------------------------------------------------------
# Badges
# ---------------------------------------------------------------------------

class TestBadges:
    def test_unlock_once_with_50_coins(self, state, now):
        state.game.lifetime_expenses = 10
        check_and_award_badges(state, now)
        badge = _badge(state, "badge-expense-bronze")
        assert badge.unlocked_at == now.isoformat()
        assert badge.progress == 10
        assert state.game.coins == 50

        later = now + timedelta(hours=3)
        check_and_award_badges(state, later)
        assert badge.unlocked_at == now.isoformat()
        assert state.game.coins == 50

    def test_locked_badge_tracks_progress(self, state, now):
        state.game.lifetime_expenses = 4
        check_and_award_badges(state, now)
        badge = _badge(state, "badge-expense-bronze")
        assert badge.progress == 4
        assert badge.unlocked_at is None

    def test_progress_frozen_after_unlock(self, state, now):
        state.game.lifetime_expenses = 10
        check_and_award_badges(state, now)
        state.game.lifetime_expenses = 12
        check_and_award_badges(state, now)
        assert _badge(state, "badge-expense-bronze").progress == 10
        assert _badge(state, "badge-expense-silver").progress == 12

    def test_saver_badge_uses_total_saved(self, state, now):
        state.find_goal("laptop").saved = Decimal("600")
        state.find_goal("vacation").saved = Decimal("400")
        check_and_award_badges(state, now)
        assert _badge(state, "badge-saver-bronze").unlocked_at is not None

    def test_ensure_all_badges(self, state):
        state.game.badges = state.game.badges[:3]
        ensure_all_badges(state)
        assert len(state.game.badges) == len(BADGE_DEFINITIONS)


# ---------------------------------------------------------------------------
# Streak
# ---------------------------------------------------------------------------

def _active(state, when: datetime, streak: int, record: int = 0):
    state.game.last_active = when.isoformat()
    state.game.streak = streak
    state.game.streak_record = record


class TestStreak:
    def test_same_day_is_noop(self, state, now):
        _active(state, now.replace(hour=7), 3, 3)
        check_streak(state, now)
        assert state.game.streak == 3
        assert state.game.last_active == now.replace(hour=7).isoformat()

    def test_next_day_extends(self, state, now):
        _active(state, now - timedelta(days=1), 3, 3)
        check_streak(state, now)
        assert state.game.streak == 4
        assert state.game.streak_record == 4
        assert state.game.last_active == now.isoformat()

    def test_calendar_days_not_hours(self, state):
        # 23:50 -> 00:10 is one calendar day
        _active(state, datetime(2024, 1, 14, 23, 50), 2, 2)
        check_streak(state, datetime(2024, 1, 15, 0, 10))
        assert state.game.streak == 3

    def test_gap_resets_to_one_and_keeps_record(self, state, now):
        _active(state, now - timedelta(days=3), 5, 9)
        check_streak(state, now)
        assert state.game.streak == 1
        assert state.game.streak_record == 9

    def test_twice_in_one_day(self, state, now):
        _active(state, now - timedelta(days=1), 1, 1)
        check_streak(state, now)
        check_streak(state, now + timedelta(hours=2))
        assert state.game.streak == 2

    def test_clock_moved_back_is_ignored(self, state, now):
        _active(state, now + timedelta(days=2), 4, 4)
        check_streak(state, now)
        assert state.game.streak == 4
