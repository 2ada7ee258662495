"""
Table and Session Models: Table, TableSession.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BigIntPK, Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from .tenant import Restaurant


class Table(TimestampMixin, Base):
    """
    Physical table in a restaurant, identified by a code printed on its QR.
    Tables are toggled active/inactive, never hard-deleted.
    """

    # "table" is a reserved SQL keyword
    __tablename__ = "restaurant_table"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tenant.id"), nullable=False, index=True
    )
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(String(20), nullable=False)  # "T01", "Terrace-3"
    name: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("restaurant_id", "code", name="uq_table_restaurant_code"),
    )

    restaurant: Mapped["Restaurant"] = relationship(back_populates="tables")
    sessions: Mapped[list["TableSession"]] = relationship(back_populates="table")


class TableSession(Base):
    """
    A QR session at a table.

    session_token is the `jti` of the table credential issued for it; a
    credential is only honoured while its session is active.
    At most one active session exists per table (partial unique index).
    """

    __tablename__ = "table_session"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tenant.id"), nullable=False, index=True
    )
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    table_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant_table.id"), nullable=False, index=True
    )
    session_token: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    opened_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    table: Mapped["Table"] = relationship(back_populates="sessions")

    __table_args__ = (
        Index(
            "uq_table_session_one_active",
            "table_id",
            unique=True,
            postgresql_where=text("active"),
            sqlite_where=text("active = 1"),
        ),
    )

    def __repr__(self) -> str:
        return f"<TableSession(id={self.id}, table_id={self.table_id}, active={self.active})>"
