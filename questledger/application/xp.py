"""
XP rules, level formula and reward crediting.

XP rules:
  expense logged           → +5  XP
  income / transfer logged → +15 XP
  bill marked paid         → +10 XP
  goal contribution        → +10 XP
  transactions imported    → +50 XP (flat, per batch)

Level formula: level L is reached at round(60 * L^1.35) total XP.
  Level 2:  153 XP
  Level 3:  264 XP
  Level 4:  390 XP
  Level 5:  527 XP
  ...
Every XP award also pays floor(xp / 10) coins.
"""
import logging
import math

from questledger.domain.gamification import XP_CAP, Gamification, Quest

logger = logging.getLogger(__name__)

XP_RULES: dict[str, int] = {
    "expense_logged": 5,
    "income_logged": 15,
    "bill_paid": 10,
    "goal_contribution": 10,
    "transactions_imported": 50,
}

BADGE_UNLOCK_COINS = 50


def required_xp(level: int) -> int:
    """Total XP needed to stand on ``level`` (half-up rounding)."""
    return math.floor(60 * math.pow(level, 1.35) + 0.5)


def level_for_xp(xp: int) -> int:
    """
    Pure function: largest level L >= 1 with xp >= required_xp(L).

    Level 1 is the floor, even below required_xp(1).
    """
    level = 1
    while xp >= required_xp(level + 1):
        level += 1
    return level


def award_xp(game: Gamification, amount: int) -> Gamification:
    """
    Credit XP to the profile in place.

    xp is capped at XP_CAP; level only ever climbs from its current value;
    floor(amount / 10) coins are paid out. Lifetime totals are credited too.
    """
    if amount <= 0:
        return game
    game.xp = min(game.xp + amount, XP_CAP)
    previous_level = game.level
    while game.xp >= required_xp(game.level + 1):
        game.level += 1
    coins = amount // 10
    game.coins += coins
    game.total_xp_earned += amount
    game.total_coins_earned += coins
    if game.level > previous_level:
        logger.info("Level up: %d -> %d (xp=%d)", previous_level, game.level, game.xp)
    return game


def award_coins(game: Gamification, coins: int) -> Gamification:
    game.coins += coins
    game.total_coins_earned += coins
    return game


def grant_quest_reward(game: Gamification, quest: Quest) -> Gamification:
    """
    Pay out a completed quest: its XP through award_xp plus its coin reward.

    Callers must only invoke this right after the quest's not-done -> done
    transition (``Quest.set_progress`` returning True or an explicit
    ``done`` check), which is what keeps rewards from being paid twice.
    """
    award_xp(game, quest.xp)
    award_coins(game, quest.coin_reward)
    game.quests_completed += 1
    logger.info("Quest completed: %s (+%d XP, +%d coins)", quest.id, quest.xp, quest.coin_reward)
    return game
