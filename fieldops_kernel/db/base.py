"""
Module: fieldops_kernel.db.base
Responsibility: Declarative base for the SQLAlchemy ORM models backing the
    persistent store adapter.
Architecture position: Kernel > DB.  Lowest-level import target within
    ``db/``.  MUST NOT import from domain/ or outer layers.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import JSON, DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - datetime maps to DateTime(timezone=True) -- always timezone-aware.
        - dict/list map to the portable JSON type (JSONB is not required).
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        dict: JSON,
        list: JSON,
    }
