"""
Store factory and a small command-line entry point
"""
import logging
from typing import Optional

from questledger.application.scheduler import shutdown_scheduler, start_scheduler
from questledger.application.store import BudgetStore
from questledger.config import Settings, get_settings
from questledger.domain.gamification import QuestType
from questledger.infrastructure.db.session import get_engine, get_session_factory, init_db
from questledger.infrastructure.persistence.repository import BudgetDocumentRepository
from questledger.utils.money import format_money

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_store(settings: Optional[Settings] = None, start_jobs: bool = False) -> BudgetStore:
    """
    Store factory - opens the configured database and loads (or seeds) the budget

    Args:
        settings: overrides get_settings()
        start_jobs: also start the background badge check

    Returns:
        Opened BudgetStore
    """
    settings = settings or get_settings()
    if settings.DEBUG:
        logging.getLogger().setLevel(logging.DEBUG)

    init_db(get_engine())
    db = get_session_factory()()
    repository = BudgetDocumentRepository(db, key=settings.DOCUMENT_KEY)

    store = BudgetStore(repository=repository, settings=settings).open()
    logger.info("Budget store ready (document %r)", settings.DOCUMENT_KEY)
    if start_jobs:
        start_scheduler(store)
    return store


def main() -> None:
    """Open the budget, roll the day over and print where things stand."""
    store = create_store()
    try:
        store.check_streak()
        store.refresh_daily_quests()
        state = store.snapshot()
        currency = state.prefs.currency
        print(f"Month:          {state.current_month}")
        print(f"Safe to spend:  {format_money(store.get_safe_to_spend(), currency)}")
        print(f"Monthly income: {format_money(store.get_total_monthly_budget(), currency)}")
        print(f"Level {state.game.level}, {state.game.xp} XP, {state.game.coins} coins, "
              f"{state.game.streak}-day streak")
        for quest in state.game.quests:
            if quest.type == QuestType.DAILY:
                mark = "x" if quest.done else " "
                print(f"  [{mark}] {quest.title} ({quest.progress}/{quest.target})")
    finally:
        shutdown_scheduler()
        store.repository.db.close()


if __name__ == "__main__":
    main()
