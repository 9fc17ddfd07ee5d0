"""
Month switching.

The working month is archived into ``monthly_history`` before the target
month is loaded, so switching away and back restores the month exactly.
"""
import logging
from decimal import Decimal

from questledger.domain.state import BudgetState, MonthlyData
from questledger.utils.dates import is_month_key

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def archive_current_month(state: BudgetState) -> MonthlyData:
    """Upsert the snapshot of the working month into the history."""
    snapshot = MonthlyData(
        month_key=state.current_month,
        transactions=list(state.transactions),
        envelope_balances={e.id: e.balance for e in state.envelopes},
    )
    state.monthly_history = [
        m for m in state.monthly_history if m.month_key != state.current_month
    ] + [snapshot]
    return snapshot


def switch_to_month(state: BudgetState, target_month: str) -> BudgetState:
    """
    Make ``target_month`` ("YYYY-MM") the working month.

    A month seen before gets its transactions and balances back; envelopes
    created after that snapshot start from their monthly budget. An unseen
    month starts empty with envelopes at their monthly budget and accounts
    at 0. Switching to the current month or to a malformed key is a no-op.
    """
    if not is_month_key(target_month):
        logger.warning("Ignoring switch to malformed month key %r", target_month)
        return state
    if target_month == state.current_month:
        return state

    previous = state.current_month
    snapshot = state.find_snapshot(target_month)

    # Build the whole working set first, then swap it in
    if snapshot is not None:
        transactions = list(snapshot.transactions)
        balances = {
            e.id: snapshot.envelope_balances.get(e.id, max(ZERO, e.monthly_budget))
            for e in state.envelopes
        }
    else:
        transactions = []
        balances = {e.id: max(ZERO, e.monthly_budget) for e in state.envelopes}

    archive_current_month(state)
    state.transactions = transactions
    for envelope in state.envelopes:
        envelope.balance = balances[envelope.id]
    if snapshot is None:
        for account in state.accounts:
            account.balance = ZERO
    state.current_month = target_month

    logger.info("Switched %s -> %s (%s, %d transactions)", previous, target_month,
                "restored" if snapshot is not None else "fresh month", len(transactions))
    return state
