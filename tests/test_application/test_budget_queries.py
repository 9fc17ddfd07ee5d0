"""
Tests for income sources, Safe-to-Spend and envelope editing
"""
from decimal import Decimal

from questledger.application import ledger


# ---------------------------------------------------------------------------
# Income sources
# ---------------------------------------------------------------------------

class TestMonthlyBudget:
    def test_seeded_weekly_allowance(self, state):
        assert ledger.get_total_monthly_budget(state) == Decimal("21650")

    def test_disabled_sources_excluded(self, state):
        ledger.update_monthly_budget(state, "budget-1", enabled=False)
        assert ledger.get_total_monthly_budget(state) == Decimal("0")

    def test_frequencies_combine(self, state):
        ledger.delete_monthly_budget(state, "budget-1")
        ledger.add_monthly_budget(state, amount="1000", source="income", frequency="biweekly")
        ledger.add_monthly_budget(state, amount="300", source="other", frequency="monthly")
        assert ledger.get_total_monthly_budget(state) == Decimal("2470")

    def test_invalid_frequency_ignored(self, state):
        ledger.update_monthly_budget(state, "budget-1", frequency="hourly")
        assert state.find_monthly_budget("budget-1").frequency.value == "weekly"

    def test_budget_edit_completes_planner_quest(self, state, with_daily_quests):
        quest, = with_daily_quests("daily-update-budget")
        ledger.update_monthly_budget(state, "budget-1", amount="6000")
        assert quest.done


# ---------------------------------------------------------------------------
# Safe-to-Spend
# ---------------------------------------------------------------------------

class TestSafeToSpend:
    def _setup(self, state):
        ledger.update_envelope(state, "food", monthly_budget="1000")
        # Not carried over: excluded
        ledger.update_envelope(state, "fun", monthly_budget="500")
        for bill_id, amount, due in (
            ("due-today", "50", "2024-01-15T00:00:00"),
            ("due-in-5", "200", "2024-01-20T00:00:00"),
            ("due-in-7", "25", "2024-01-22T00:00:00"),
            ("due-in-8", "400", "2024-01-23T00:00:00"),
            ("overdue", "999", "2024-01-14T00:00:00"),
        ):
            ledger.add_recurring(state, id=bill_id, label=bill_id, amount=amount,
                                 interval="monthly", next_run=due)
        ledger.add_recurring(state, id="salary", label="Salary", amount="3000", interval="monthly",
                             next_run="2024-01-16T00:00:00", type="income")

    def test_only_carry_over_envelopes_and_bills_due_within_a_week(self, state, now):
        self._setup(state)
        assert ledger.get_safe_to_spend(state, now) == Decimal("725")

    def test_is_pure(self, state, now):
        self._setup(state)
        before = state.to_dict()
        first = ledger.get_safe_to_spend(state, now)
        assert ledger.get_safe_to_spend(state, now) == first
        assert state.to_dict() == before


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------

class TestEnvelopes:
    def test_first_funding_sets_balance(self, state):
        ledger.update_envelope(state, "food", monthly_budget="800")
        assert state.find_envelope("food").balance == Decimal("800")

    def test_budget_change_on_funded_envelope_keeps_balance(self, state, now):
        ledger.update_envelope(state, "food", monthly_budget="800")
        ledger.add_transaction(state, amount="100", type="expense", envelope_id="food", now=now)
        ledger.update_envelope(state, "food", monthly_budget="1200")
        assert state.find_envelope("food").balance == Decimal("700")

    def test_allocate_clamps_at_zero(self, state):
        ledger.update_envelope(state, "food", monthly_budget="100")
        ledger.allocate_envelope(state, "food", "50")
        assert state.find_envelope("food").balance == Decimal("150")
        ledger.allocate_envelope(state, "food", "-500")
        assert state.find_envelope("food").balance == Decimal("0")

    def test_allocate_unknown_envelope_is_noop(self, state):
        before = state.to_dict()
        ledger.allocate_envelope(state, "nope", "50")
        assert state.to_dict() == before

    def test_add_and_delete(self, state):
        ledger.add_envelope(state, id="pets", name="Pets", monthly_budget="300")
        assert state.find_envelope("pets").balance == Decimal("300")
        ledger.delete_envelope(state, "pets")
        assert state.find_envelope("pets") is None

    def test_update_cannot_replace_methods(self, state, now, caplog):
        ledger.update_envelope(state, "food", monthly_budget="500", apply_delta=5)
        assert "Ignoring unknown field 'apply_delta'" in caplog.text
        ledger.add_transaction(state, amount="100", type="expense", envelope_id="food", now=now)
        assert state.find_envelope("food").balance == Decimal("400")
