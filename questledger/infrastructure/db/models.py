"""
SQLAlchemy ORM models
"""
from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from questledger.infrastructure.db.session import Base


class BudgetDocument(Base):
    """
    One serialized BudgetState per key.

    ``payload_json`` is the whole state; ``schema_version`` tells the loader
    which migrations it still needs.
    """
    __tablename__ = "budget_documents"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    schema_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    payload_json: Mapped[dict] = mapped_column(JSON, nullable=False)

    saved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
