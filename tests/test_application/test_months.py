"""
Tests for switching between monthly periods
"""
from decimal import Decimal

import pytest

from questledger.application import ledger
from questledger.application.months import switch_to_month


@pytest.fixture
def january(state, now):
    """January with food funded at 1000 and one 300 expense"""
    ledger.update_envelope(state, "food", monthly_budget="1000")
    ledger.add_transaction(state, id="jan-1", amount="300", type="expense", envelope_id="food", now=now)
    state.accounts[0].balance = Decimal("2500")
    return state


def test_fresh_month_starts_from_budgets(january):
    switch_to_month(january, "2024-02")
    assert january.current_month == "2024-02"
    assert january.transactions == []
    assert january.find_envelope("food").balance == Decimal("1000")
    assert january.accounts[0].balance == Decimal("0")
    assert [m.month_key for m in january.monthly_history] == ["2024-01"]


def test_round_trip_restores_month(january, now):
    switch_to_month(january, "2024-02")
    ledger.add_transaction(january, id="feb-1", amount="100", type="expense", envelope_id="food", now=now)

    switch_to_month(january, "2024-01")
    assert [t.id for t in january.transactions] == ["jan-1"]
    assert january.find_envelope("food").balance == Decimal("700")

    switch_to_month(january, "2024-02")
    assert [t.id for t in january.transactions] == ["feb-1"]
    assert january.find_envelope("food").balance == Decimal("900")


def test_history_holds_one_snapshot_per_month(january):
    for key in ("2024-02", "2024-01", "2024-02", "2024-01"):
        switch_to_month(january, key)
    keys = [m.month_key for m in january.monthly_history]
    assert sorted(keys) == ["2024-01", "2024-02"]


def test_envelope_created_later_falls_back_to_budget(january):
    switch_to_month(january, "2024-02")
    ledger.add_envelope(january, id="pets", name="Pets", monthly_budget="300")
    ledger.allocate_envelope(january, "pets", "-100")
    switch_to_month(january, "2024-01")
    assert january.find_envelope("pets").balance == Decimal("300")


def test_gamification_carries_through(january):
    game_before = january.game.to_dict()
    switch_to_month(january, "2024-02")
    assert january.game.to_dict() == game_before


@pytest.mark.parametrize("key", ["2024-13", "2024-1", "", "January"])
def test_malformed_key_is_noop(january, key):
    before = january.to_dict()
    switch_to_month(january, key)
    assert january.to_dict() == before


def test_same_month_is_noop(january):
    switch_to_month(january, "2024-01")
    assert january.monthly_history == []
    assert len(january.transactions) == 1


def test_negative_budget_starts_fresh_month_at_zero(january):
    ledger.update_envelope(january, "food", monthly_budget="-50")
    switch_to_month(january, "2024-02")
    assert january.find_envelope("food").balance == Decimal("0")


def test_envelope_missing_from_snapshot_floors_negative_budget(january):
    switch_to_month(january, "2024-02")
    ledger.add_envelope(january, id="pets", name="Pets", monthly_budget="300")
    ledger.update_envelope(january, "pets", monthly_budget="-20")
    switch_to_month(january, "2024-01")
    assert january.find_envelope("pets").balance == Decimal("0")
