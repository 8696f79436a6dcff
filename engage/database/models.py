"""
engage.database.models — SQLAlchemy 2.0 Data Models
====================================================

Tables:
- users — one row per member who has ever interacted (Discord snowflake PK)
- links — append-only log of posted links

Rows are only ever written by :mod:`engage.services.ledger_service`.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Engage ORM models."""


# ---------------------------------------------------------------------------
# Users — balance and activity state
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String(100), default=None)
    # Signed on purpose: inactivity penalties may push a balance below zero
    points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_active_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    warned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    links: Mapped[list[Link]] = relationship(back_populates="owner")

    __table_args__ = (
        Index("ix_users_last_active_at", "last_active_at"),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} name={self.display_name!r} points={self.points}>"


# ---------------------------------------------------------------------------
# Links — created once by a paid post, never updated
# ---------------------------------------------------------------------------
class Link(Base):
    __tablename__ = "links"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    owner: Mapped[User] = relationship(back_populates="links")

    __table_args__ = (
        Index("ix_links_created_at", "created_at"),
        Index("ix_links_owner_id", "owner_id"),
    )

    def __repr__(self) -> str:
        return f"<Link id={self.id} owner={self.owner_id} title={self.title!r}>"
