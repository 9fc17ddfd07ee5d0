"""
Schema migrations for the stored budget document.

Each step takes the raw payload dict of version N and returns version N+1.
Steps only add what is missing; they never drop user data.

    v0 -> v1: prefs.sound_settings
    v1 -> v2: lifetime counters, streak_record, totals, daily_section_views,
              current_month, monthly_history
"""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from questledger.domain.state import default_sound_settings
from questledger.domain.transaction import BILL_PAYMENT_TAG, TransactionType
from questledger.utils.dates import is_month_key, month_key, parse_iso

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 2

Document = Dict[str, Any]


def _v0_to_v1(document: Document, now: datetime) -> Document:
    prefs = document.setdefault("prefs", {})
    sound = default_sound_settings()
    sound.update(prefs.get("sound_settings") or {})
    prefs["sound_settings"] = sound
    return document


def _v1_to_v2(document: Document, now: datetime) -> Document:
    game = document.setdefault("game", {})
    transactions = document.get("transactions") or []

    # Lifetime counters did not exist yet; the best estimate is what is on record
    game.setdefault("lifetime_expenses", sum(
        1 for t in transactions if t.get("type") == TransactionType.EXPENSE.value
    ))
    game.setdefault("lifetime_bill_payments", sum(
        1 for t in transactions
        if BILL_PAYMENT_TAG in (t.get("tags") or []) or "Bill payment" in (t.get("note") or "")
    ))
    game.setdefault("lifetime_goals_completed", sum(
        1 for g in document.get("goals") or []
        if float(g.get("saved") or 0) >= float(g.get("target_amount") or 0) > 0
    ))
    game.setdefault("streak_record", game.get("streak", 0))
    game.setdefault("total_xp_earned", game.get("xp", 0))
    game.setdefault("total_coins_earned", game.get("coins", 0))
    game.setdefault("quests_completed", sum(1 for q in game.get("quests") or [] if q.get("done")))
    game.setdefault("daily_section_views", {})
    game.setdefault("last_active", now.isoformat())

    if not is_month_key(document.get("current_month") or ""):
        document["current_month"] = month_key(parse_iso(game["last_active"]))
    document.setdefault("monthly_history", [])
    return document


MIGRATIONS: Dict[int, Callable[[Document, datetime], Document]] = {
    0: _v0_to_v1,
    1: _v1_to_v2,
}


def migrate(document: Document, from_version: int, now: Optional[datetime] = None) -> Document:
    """
    Bring ``document`` from ``from_version`` up to CURRENT_SCHEMA_VERSION.

    Raises:
        ValueError: the document is newer than this code understands
    """
    if from_version > CURRENT_SCHEMA_VERSION:
        raise ValueError(
            f"Document schema v{from_version} is newer than supported v{CURRENT_SCHEMA_VERSION}"
        )
    now = now or datetime.now()
    version = from_version
    while version < CURRENT_SCHEMA_VERSION:
        document = MIGRATIONS[version](document, now)
        version += 1
        logger.info("Migrated budget document to schema v%d", version)
    return document
