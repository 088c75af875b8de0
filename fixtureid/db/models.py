"""SQLAlchemy async database models for fixtureid.

store_fixture_ids is append-only: every publish inserts new rows and the
latest row per fixture_id (by updated_at) is the current state.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Float, Index, Integer, Text, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class StoreFixtureModel(Base):
    """One version of a fixture identity record."""

    __tablename__ = "store_fixture_ids"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    fixture_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    store_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)

    fixture_type: Mapped[str] = mapped_column(Text, nullable=False)
    brand: Mapped[str] = mapped_column(Text, nullable=False, default="unknown")
    floor_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    pos_x: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    pos_y: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    pos_z: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Audit
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_store_fixture_latest", "store_id", "fixture_id", "updated_at"),
    )
