"""Pydantic schemas for boards, participants and scores.

Learn: Separate "Create/Update" schemas (input) from "Read" schemas
(output). The Read side is built from ORM objects by explicit
from_* constructors because two fields are derived, not stored:
- ParticipantRead.total_score — sum of the participant's entries
- BoardRead.participants — ranked by total score (desc), then id
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from gamegauge.db.models import (
    DB_INT_MAX,
    DB_INT_MIN,
    Board,
    Participant,
    ScoreCondition,
    ScoreEntry,
)


# ─── Boards ─────────────────────────────────────────────

class BoardCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    target_score: Optional[int] = Field(None, ge=DB_INT_MIN, le=DB_INT_MAX)
    score_condition: ScoreCondition = ScoreCondition.HIGHEST_WINS
    number_of_rounds: Optional[int] = Field(None, ge=1, le=DB_INT_MAX)


class BoardUpdate(BaseModel):
    """Full overwrite of the board rules — omitted optionals become null."""
    name: str = Field(..., min_length=3, max_length=100)
    target_score: Optional[int] = Field(None, ge=DB_INT_MIN, le=DB_INT_MAX)
    score_condition: ScoreCondition = ScoreCondition.HIGHEST_WINS
    number_of_rounds: Optional[int] = Field(None, ge=1, le=DB_INT_MAX)


class BoardOrderUpdate(BaseModel):
    board_ids: list[int] = Field(default_factory=list)


# ─── Participants & scores ──────────────────────────────

class ParticipantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)


class ParticipantUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)


class ScoreSet(BaseModel):
    """Upsert keyed by round: same round again = overwrite."""
    score_value: int = Field(..., ge=DB_INT_MIN, le=DB_INT_MAX)
    round_number: int = Field(..., ge=1, le=DB_INT_MAX)


# ─── Import / export ────────────────────────────────────

class ScoreEntryImport(BaseModel):
    score_value: int = Field(..., ge=DB_INT_MIN, le=DB_INT_MAX)
    round_number: int = Field(..., ge=1, le=DB_INT_MAX)


class ParticipantImport(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    scores: list[ScoreEntryImport] = Field(default_factory=list)

    @field_validator("scores", mode="before")
    @classmethod
    def _null_scores(cls, v):
        return [] if v is None else v


class BoardImport(BaseModel):
    """A whole board graph — what the CLI export writes and import reads.

    `null` for participants or scores reads as an empty list.
    """
    name: str = Field(..., min_length=3, max_length=100)
    target_score: Optional[int] = Field(None, ge=DB_INT_MIN, le=DB_INT_MAX)
    score_condition: ScoreCondition = ScoreCondition.HIGHEST_WINS
    number_of_rounds: Optional[int] = Field(None, ge=1, le=DB_INT_MAX)
    participants: list[ParticipantImport] = Field(default_factory=list)

    @field_validator("participants", mode="before")
    @classmethod
    def _null_participants(cls, v):
        return [] if v is None else v

    @classmethod
    def from_board(cls, board: Board) -> "BoardImport":
        return cls(
            name=board.name,
            target_score=board.target_score,
            score_condition=board.score_condition,
            number_of_rounds=board.number_of_rounds,
            participants=[
                ParticipantImport(
                    name=p.name,
                    scores=[
                        ScoreEntryImport(
                            score_value=s.score_value, round_number=s.round_number
                        )
                        for s in p.score_entries
                    ],
                )
                for p in board.participants
            ],
        )


# ─── Read models ────────────────────────────────────────

class ScoreEntryRead(BaseModel):
    id: int
    score_value: int
    round_number: int

    @classmethod
    def from_entry(cls, entry: ScoreEntry) -> "ScoreEntryRead":
        return cls(
            id=entry.id,
            score_value=entry.score_value,
            round_number=entry.round_number,
        )


class ParticipantRead(BaseModel):
    id: int
    name: str
    total_score: int
    scores: list[ScoreEntryRead] = []

    @classmethod
    def from_participant(cls, participant: Participant) -> "ParticipantRead":
        entries = sorted(participant.score_entries, key=lambda s: (s.round_number, s.id))
        return cls(
            id=participant.id,
            name=participant.name,
            total_score=participant.total_score,
            scores=[ScoreEntryRead.from_entry(s) for s in entries],
        )


class BoardRead(BaseModel):
    id: int
    name: str
    target_score: Optional[int] = None
    score_condition: ScoreCondition
    number_of_rounds: Optional[int] = None
    display_order: int
    created_at: datetime
    updated_at: datetime
    owner_username: str
    participants: list[ParticipantRead] = []

    @classmethod
    def from_board(cls, board: Board) -> "BoardRead":
        participants = [ParticipantRead.from_participant(p) for p in board.participants]
        participants.sort(key=lambda p: (-p.total_score, p.id))
        return cls(
            id=board.id,
            name=board.name,
            target_score=board.target_score,
            score_condition=board.score_condition,
            number_of_rounds=board.number_of_rounds,
            display_order=board.display_order,
            created_at=board.created_at,
            updated_at=board.updated_at,
            owner_username=board.owner.username,
            participants=participants,
        )
