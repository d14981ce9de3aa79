"""
Module: fieldops_kernel.db.models
Responsibility: ORM persistence for whole-collection snapshots.

The store adapter contract is get-all / set-all per collection, so one row
holds one entire collection as a JSON array.  There is no
per-entity table; the kernel never performs partial updates.
"""

from datetime import datetime

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from fieldops_kernel.db.base import Base


class CollectionSnapshot(Base):
    """The latest full contents of one named collection."""

    __tablename__ = "ledger_collections"

    name: Mapped[str] = mapped_column(String(100), primary_key=True)
    payload: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    entity_count: Mapped[int] = mapped_column(nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<CollectionSnapshot {self.name} ({self.entity_count} entities)>"
