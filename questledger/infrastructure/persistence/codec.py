"""
BudgetState <-> JSON-compatible payload.
"""
from datetime import datetime
from decimal import InvalidOperation
from typing import Any, Dict

from questledger.domain.state import BudgetState
from questledger.utils.dates import month_key


class StateDocumentError(ValueError):
    """Stored document cannot be turned back into a BudgetState"""
    pass


def encode_state(state: BudgetState) -> Dict[str, Any]:
    return state.to_dict()


def decode_state(payload: Any, now: datetime) -> BudgetState:
    """
    Decode a (migrated) payload.

    Missing nested objects fall back to defaults; anything that still cannot
    be decoded is reported as StateDocumentError.
    """
    if not isinstance(payload, dict):
        raise StateDocumentError(f"Expected an object, got {type(payload).__name__}")
    try:
        data = dict(payload)
        game = dict(data.get("game") or {})
        game.setdefault("last_active", now.isoformat())
        data["game"] = game
        if not data.get("current_month"):
            data["current_month"] = month_key(now)
        return BudgetState.from_dict(data)
    except (KeyError, TypeError, ValueError, AttributeError, InvalidOperation) as e:
        raise StateDocumentError(f"Invalid budget document: {e!r}") from e
