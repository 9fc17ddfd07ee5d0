"""
Tests for the budget document migration chain
"""
from datetime import datetime
from decimal import Decimal

import pytest

from questledger.infrastructure.db.models import BudgetDocument
from questledger.infrastructure.persistence.migrations import CURRENT_SCHEMA_VERSION, migrate

NOW = datetime(2024, 1, 15, 10, 0)


def _v0_document():
    return {
        "prefs": {"currency": "PHP", "sound_settings": {"master_volume": 0.2}},
        "envelopes": [{"id": "food", "name": "Food", "color": "#0f0", "monthly_budget": "500",
                       "carry_over": True, "balance": "120"}],
        "goals": [{"id": "g", "name": "Phone", "target_amount": "100", "saved": "150"}],
        "transactions": [
            {"id": "t1", "date": "2023-11-03T09:00:00", "amount": "50", "type": "expense",
             "account_id": "cash"},
            {"id": "t2", "date": "2023-11-04T09:00:00", "amount": "80", "type": "expense",
             "account_id": "cash", "note": "Bill payment (auto-logged)"},
            {"id": "t3", "date": "2023-11-04T10:00:00", "amount": "900", "type": "income",
             "account_id": "cash"},
        ],
        "game": {"xp": 40, "level": 1, "streak": 4, "coins": 7, "last_active": "2023-11-05T08:00:00",
                 "quests": [{"id": "achievement-first-expense", "type": "achievement", "target": 1,
                             "progress": 1, "done": True}]},
    }


class TestMigrate:
    def test_v0_to_current(self):
        doc = migrate(_v0_document(), 0, now=NOW)
        game = doc["game"]

        # v0 -> v1
        sound = doc["prefs"]["sound_settings"]
        assert sound["master_volume"] == 0.2
        assert sound["sfx_enabled"] is True

        # v1 -> v2
        assert game["lifetime_expenses"] == 2
        assert game["lifetime_bill_payments"] == 1
        assert game["lifetime_goals_completed"] == 1
        assert game["streak_record"] == 4
        assert game["total_xp_earned"] == 40
        assert game["total_coins_earned"] == 7
        assert game["quests_completed"] == 1
        assert game["daily_section_views"] == {}
        assert doc["current_month"] == "2023-11"
        assert doc["monthly_history"] == []

    def test_existing_values_kept(self):
        doc = _v0_document()
        doc["game"]["lifetime_expenses"] = 99
        doc["current_month"] = "2023-10"
        migrated = migrate(doc, 1, now=NOW)
        assert migrated["game"]["lifetime_expenses"] == 99
        assert migrated["current_month"] == "2023-10"

    def test_missing_last_active_uses_now(self):
        doc = migrate({"game": {}}, 1, now=NOW)
        assert doc["game"]["last_active"] == NOW.isoformat()
        assert doc["current_month"] == "2024-01"

    def test_current_version_untouched(self):
        doc = {"game": {"xp": 1}}
        assert migrate(dict(doc), CURRENT_SCHEMA_VERSION, now=NOW) == doc

    def test_newer_version_rejected(self):
        with pytest.raises(ValueError):
            migrate({}, CURRENT_SCHEMA_VERSION + 1, now=NOW)


def test_repository_loads_v0_row(repository, db_session):
    db_session.add(BudgetDocument(key="test", schema_version=0, payload_json=_v0_document()))
    db_session.commit()

    state = repository.load(NOW)

    assert state.current_month == "2023-11"
    assert state.game.lifetime_expenses == 2
    assert state.find_envelope("food").balance == Decimal("120")
    assert state.prefs.sound_settings["music_volume"] == 0.5
