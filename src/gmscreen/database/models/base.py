"""Declarative base and shared columns for gmscreen tables."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models.

    Serialized pydantic documents are annotated as ``dict[str, Any]`` and
    stored in JSON columns.
    """

    type_annotation_map = {dict[str, Any]: JSON}


class TimestampMixin:
    """Row bookkeeping: when a row was first stored and last written.

    Domain timestamps live inside the serialized document so they keep
    their timezone on SQLite.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class StoredOrderMixin:
    """Position of a row in its store.

    Assigned once when a row is first stored and kept when it is rewritten,
    so listings come back in the order items were added.
    """

    seq: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
