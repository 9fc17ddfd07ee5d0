"""
Tests for goal contributions and goal maintenance
"""
from decimal import Decimal

from questledger.application import ledger


class TestAddToGoal:
    def test_contribution_moves_money_from_savings(self, state, now):
        ledger.update_envelope(state, "savings", monthly_budget="5000")

        ledger.add_to_goal(state, "emergency-fund", "1000", now)

        assert state.find_goal("emergency-fund").saved == Decimal("1000")
        assert state.find_envelope("savings").balance == Decimal("4000")
        record = state.transactions[0]
        assert record.type.value == "income"
        assert record.envelope_id == "savings"
        assert record.is_goal_contribution
        assert record.goal_id == "emergency-fund"
        assert record.merchant == "💰 Emergency Fund"
        assert record.note == "Goal contribution: Emergency Fund"

    def test_goal_linked_elsewhere_still_draws_from_savings(self, state, now):
        ledger.update_envelope(state, "savings", monthly_budget="1000")
        ledger.update_envelope(state, "food", monthly_budget="800")
        ledger.add_goal(state, id="g", name="Groceries", target_amount="500", linked_envelope_id="food")

        ledger.add_to_goal(state, "g", "100", now)

        assert state.find_envelope("savings").balance == Decimal("900")
        assert state.find_envelope("food").balance == Decimal("800")
        assert state.transactions[0].envelope_id == "savings"

    def test_unlinked_goal_draws_from_savings(self, state, now):
        ledger.update_envelope(state, "savings", monthly_budget="500")
        ledger.add_to_goal(state, "laptop", "200", now)
        assert state.find_envelope("savings").balance == Decimal("300")

    def test_pays_10_xp(self, state, now):
        ledger.add_to_goal(state, "laptop", "200", now)
        assert state.game.xp == 10

    def test_completion_counted_once(self, state, now):
        ledger.add_goal(state, id="bike", name="Bike", target_amount="500")
        ledger.add_to_goal(state, "bike", "300", now)
        assert state.game.lifetime_goals_completed == 0
        ledger.add_to_goal(state, "bike", "300", now)
        assert state.game.lifetime_goals_completed == 1
        ledger.add_to_goal(state, "bike", "100", now)
        assert state.game.lifetime_goals_completed == 1

    def test_unknown_goal_is_noop(self, state, now):
        ledger.add_to_goal(state, "nope", "100", now)
        assert state.transactions == []

    def test_distinct_goals_quest(self, state, now, with_daily_quests):
        contribute, two_goals = with_daily_quests("daily-update-goal", "daily-2-goals-contribute")
        ledger.add_to_goal(state, "laptop", "50", now)
        ledger.add_to_goal(state, "laptop", "50", now)
        assert contribute.done
        assert two_goals.progress == 1
        ledger.add_to_goal(state, "vacation", "50", now)
        assert two_goals.done


class TestGoalMaintenance:
    def test_update_goal(self, state):
        ledger.update_goal(state, "laptop", target_amount="25000", name="Gaming Laptop")
        goal = state.find_goal("laptop")
        assert goal.target_amount == Decimal("25000")
        assert goal.name == "Gaming Laptop"

    def test_update_never_changes_id(self, state):
        ledger.update_goal(state, "laptop", id="other")
        assert state.find_goal("laptop") is not None

    def test_reset_saved_amounts(self, state, now):
        ledger.add_to_goal(state, "laptop", "50", now)
        ledger.reset_goals_saved_amounts(state)
        assert all(g.saved == 0 for g in state.goals)

    def test_initialize_default_goals_readds_missing(self, state, now):
        ledger.delete_goal(state, "emergency-fund")
        ledger.add_goal(state, id="bike", name="Bike", target_amount="500")
        ledger.initialize_default_goals(state, now)
        ids = sorted(g.id for g in state.goals)
        assert ids == ["bike", "emergency-fund", "laptop", "vacation"]

    def test_update_ignores_computed_property(self, state, caplog):
        ledger.update_goal(state, "laptop", is_completed=True, name="Gaming Laptop")
        goal = state.find_goal("laptop")
        assert goal.name == "Gaming Laptop"
        assert not goal.is_completed
        assert "Ignoring unknown field 'is_completed'" in caplog.text
