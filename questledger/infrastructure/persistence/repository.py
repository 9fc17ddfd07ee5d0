"""
Budget document repository - the whole state as one row in budget_documents.
"""
import copy
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from questledger.domain.state import BudgetState
from questledger.infrastructure.db.models import BudgetDocument
from questledger.infrastructure.persistence.codec import (
    StateDocumentError,
    decode_state,
    encode_state,
)
from questledger.infrastructure.persistence.migrations import CURRENT_SCHEMA_VERSION, migrate

logger = logging.getLogger(__name__)


class BudgetDocumentRepository:
    """
    Save and load a BudgetState under a fixed key
    """

    def __init__(self, db: Session, key: str = "default"):
        self.db = db
        self.key = key

    def save(self, state: BudgetState) -> None:
        """
        Upsert the document and commit

        Raises:
            SQLAlchemyError: on write failure (the session is rolled back)
        """
        payload = encode_state(state)
        try:
            row = self.db.get(BudgetDocument, self.key)
            if row is None:
                row = BudgetDocument(key=self.key)
                self.db.add(row)
            row.schema_version = CURRENT_SCHEMA_VERSION
            row.payload_json = payload
            row.saved_at = datetime.now()
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def load(self, now: Optional[datetime] = None) -> Optional[BudgetState]:
        """
        Load and migrate the stored document

        Returns:
            BudgetState, or None if nothing was saved yet

        Raises:
            StateDocumentError: the stored document is corrupt or too new
        """
        now = now or datetime.now()
        row = self.db.get(BudgetDocument, self.key)
        if row is None:
            return None
        if not isinstance(row.payload_json, dict):
            raise StateDocumentError(f"Document {self.key!r} is not an object")
        try:
            payload = migrate(copy.deepcopy(row.payload_json), row.schema_version or 0, now=now)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise StateDocumentError(f"Cannot migrate document {self.key!r}: {e}") from e
        state = decode_state(payload, now)
        logger.info("Loaded budget document %r (schema v%d)", self.key, row.schema_version or 0)
        return state
