"""
Tests for XP, levels and reward payouts
"""
import pytest

from questledger.application.xp import (
    XP_RULES,
    award_coins,
    award_xp,
    grant_quest_reward,
    level_for_xp,
    required_xp,
)
from questledger.domain.gamification import XP_CAP, Gamification, Quest, QuestCategory, QuestType


def _game(**kwargs) -> Gamification:
    return Gamification(last_active="2024-01-15T10:00:00", **kwargs)


# ---------------------------------------------------------------------------
# Level curve
# ---------------------------------------------------------------------------

class TestLevelCurve:
    @pytest.mark.parametrize("level, threshold", [(2, 153), (3, 264), (4, 390), (5, 527)])
    def test_thresholds(self, level, threshold):
        assert required_xp(level) == threshold

    @pytest.mark.parametrize("xp, level", [(0, 1), (152, 1), (153, 2), (389, 3), (390, 4), (527, 5)])
    def test_level_for_xp(self, xp, level):
        assert level_for_xp(xp) == level

    def test_level_for_xp_is_monotone(self):
        levels = [level_for_xp(xp) for xp in range(0, 20000, 37)]
        assert levels == sorted(levels)


# ---------------------------------------------------------------------------
# award_xp
# ---------------------------------------------------------------------------

class TestAwardXp:
    def test_500_xp_from_zero_reaches_level_4_and_pays_50_coins(self):
        game = _game()
        award_xp(game, 500)
        assert game.xp == 500
        assert game.level == 4
        assert game.coins == 50

    def test_lifetime_totals_credited(self):
        game = _game()
        award_xp(game, 25)
        award_xp(game, 15)
        assert game.total_xp_earned == 40
        assert game.total_coins_earned == 3

    def test_xp_capped(self):
        game = _game(xp=XP_CAP - 10, level=level_for_xp(XP_CAP - 10))
        award_xp(game, 100)
        assert game.xp == XP_CAP

    def test_level_never_decreases(self):
        game = _game(xp=0, level=10)
        award_xp(game, XP_RULES["expense_logged"])
        assert game.level == 10

    @pytest.mark.parametrize("amount", [0, -20])
    def test_non_positive_amount_is_noop(self, amount):
        game = _game(xp=10)
        award_xp(game, amount)
        assert game.xp == 10
        assert game.coins == 0


def test_award_coins_counts_towards_total():
    game = _game(coins=5)
    award_coins(game, 50)
    assert game.coins == 55
    assert game.total_coins_earned == 50


def test_grant_quest_reward_pays_xp_coins_and_counts_quest():
    game = _game()
    quest = Quest(id="q", title="Q", type=QuestType.DAILY, category=QuestCategory.BILLS,
                  target=1, xp=20, coin_reward=12)
    grant_quest_reward(game, quest)
    assert game.xp == 20
    # 2 coins from the XP plus the quest's own 12
    assert game.coins == 14
    assert game.quests_completed == 1
