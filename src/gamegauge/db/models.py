"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Relationships, constraints, and indexes defined here.
Alembic auto-generates migrations by comparing these models to the actual DB.

Key concepts:
- Integer identity primary keys (ids show up in URLs: /boards/42)
- Ownership chain User → Board → Participant → ScoreEntry, every FK
  declared ON DELETE CASCADE
- Relationships are used for *reading* the tree. Deletes are issued
  explicitly by the services (see board_service) instead of relying on
  ORM delete-orphan cascades.
- Python-side timestamp defaults so new rows are readable without a
  refresh round-trip in async code
"""

import enum
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Range of every Integer column (ids, scores, rounds): 32-bit signed.
DB_INT_MIN = -(2**31)
DB_INT_MAX = 2**31 - 1


class ScoreCondition(str, enum.Enum):
    """Which end of the ranking wins."""

    HIGHEST_WINS = "HIGHEST_WINS"
    LOWEST_WINS = "LOWEST_WINS"


# ══════════════════════════════════════════════════════════════
# Users
# ══════════════════════════════════════════════════════════════


class User(Base):
    """A registered account. Owns boards.

    Learn: The email is the token subject, so it doubles as the identity
    string passed into every service call. The reset token is stored as
    a SHA-256 digest — same idea as hashed API keys: a DB leak does not
    hand out working reset links. Token and expiry are set and cleared
    together.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    email_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    verification_token: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    reset_token_hash: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, index=True
    )
    reset_token_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    # Relationships
    boards: Mapped[list["Board"]] = relationship(
        back_populates="owner", passive_deletes=True
    )


# ══════════════════════════════════════════════════════════════
# Boards, participants, scores
# ══════════════════════════════════════════════════════════════


class Board(Base):
    """A scoring table owned by one user.

    Learn: display_order is user-controlled (drag & drop in the UI).
    New boards are appended after the owner's current last board.
    """

    __tablename__ = "boards"
    __table_args__ = (
        Index("ix_boards_owner_order", "owner_id", "display_order"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    target_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    score_condition: Mapped[ScoreCondition] = mapped_column(
        Enum(ScoreCondition, name="score_condition"),
        nullable=False,
        default=ScoreCondition.HIGHEST_WINS,
    )
    number_of_rounds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    owner: Mapped["User"] = relationship(back_populates="boards")
    participants: Mapped[list["Participant"]] = relationship(
        back_populates="board",
        order_by="Participant.id",
        passive_deletes=True,
    )


class Participant(Base):
    """A player inside exactly one board."""

    __tablename__ = "participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    board_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    board: Mapped["Board"] = relationship(back_populates="participants")
    score_entries: Mapped[list["ScoreEntry"]] = relationship(
        back_populates="participant",
        order_by="ScoreEntry.round_number",
        passive_deletes=True,
    )

    @property
    def total_score(self) -> int:
        """Sum of all entries — computed on read, never stored."""
        return sum(entry.score_value for entry in self.score_entries)


class ScoreEntry(Base):
    """One score for one participant in one round.

    Learn: (participant_id, round_number) is NOT a unique constraint.
    The one-entry-per-round rule is kept by BoardService.set_score,
    which updates the existing entry in place instead of appending.
    """

    __tablename__ = "score_entries"
    __table_args__ = (
        Index("ix_score_entries_participant_round", "participant_id", "round_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    score_value: Mapped[int] = mapped_column(Integer, nullable=False)
    round_number: Mapped[int] = mapped_column(Integer, nullable=False)
    participant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    # Relationships
    participant: Mapped["Participant"] = relationship(back_populates="score_entries")
