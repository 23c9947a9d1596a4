"""Board, participant and score API routes.

Learn: Every handler receives the caller's identity from
get_current_user and hands `identity.subject` to BoardService, which
re-checks ownership on every call. Routes never look at owner ids
themselves.

Static paths (/order, /import) are declared before /{board_id} so the
router doesn't try to parse "order" as an integer id.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession

from gamegauge.auth.dependencies import CurrentIdentity, get_current_user
from gamegauge.db.engine import get_db
from gamegauge.db.models import DB_INT_MAX
from gamegauge.schemas.board import (
    BoardCreate,
    BoardImport,
    BoardOrderUpdate,
    BoardRead,
    BoardUpdate,
    ParticipantCreate,
    ParticipantRead,
    ParticipantUpdate,
    ScoreEntryRead,
    ScoreSet,
)
from gamegauge.services.board_service import BoardService

router = APIRouter(prefix="/boards")

# Ids outside the column range can never match a row: rejected as 400.
RowId = Annotated[int, Path(ge=1, le=DB_INT_MAX)]


def _svc(db: AsyncSession = Depends(get_db)) -> BoardService:
    return BoardService(db)


# ─── Boards ─────────────────────────────────────────────

@router.get("", response_model=list[BoardRead])
async def list_boards(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    boards = await svc.list_boards(identity.subject)
    return [BoardRead.from_board(b) for b in boards]


@router.post("", response_model=BoardRead, status_code=201)
async def create_board(
    body: BoardCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    board = await svc.create_board(body, identity.subject)
    return BoardRead.from_board(board)


@router.put("/order", status_code=204)
async def update_boards_order(
    body: BoardOrderUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    """Reorder boards. Ids the caller doesn't own are ignored."""
    await svc.update_boards_order(body.board_ids, identity.subject)
    return Response(status_code=204)


@router.post("/import", response_model=BoardRead, status_code=201)
async def import_board(
    body: BoardImport,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    board = await svc.import_board(body, identity.subject)
    return BoardRead.from_board(board)


@router.get("/{board_id}", response_model=BoardRead)
async def get_board(
    board_id: RowId,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    board = await svc.get_board(board_id, identity.subject)
    return BoardRead.from_board(board)


@router.put("/{board_id}", response_model=BoardRead)
async def update_board(
    board_id: RowId,
    body: BoardUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    board = await svc.update_board(board_id, body, identity.subject)
    return BoardRead.from_board(board)


@router.delete("/{board_id}", status_code=204)
async def delete_board(
    board_id: RowId,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    await svc.delete_board(board_id, identity.subject)
    return Response(status_code=204)


@router.post("/{board_id}/restart", status_code=204)
async def restart_board(
    board_id: RowId,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    """Wipe all scores, keep the participants."""
    await svc.restart_board(board_id, identity.subject)
    return Response(status_code=204)


@router.post("/{board_id}/duplicate", response_model=BoardRead, status_code=201)
async def duplicate_board(
    board_id: RowId,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    board = await svc.duplicate_board(board_id, identity.subject)
    return BoardRead.from_board(board)


@router.get("/{board_id}/export", response_model=BoardImport)
async def export_board(
    board_id: RowId,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    """The board in the same shape POST /boards/import accepts."""
    return await svc.export_board(board_id, identity.subject)


# ─── Participants ───────────────────────────────────────

@router.post(
    "/{board_id}/participants", response_model=ParticipantRead, status_code=201
)
async def add_participant(
    board_id: RowId,
    body: ParticipantCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    participant = await svc.add_participant(board_id, body, identity.subject)
    return ParticipantRead.from_participant(participant)


@router.put(
    "/{board_id}/participants/{participant_id}", response_model=ParticipantRead
)
async def update_participant(
    board_id: RowId,
    participant_id: RowId,
    body: ParticipantUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    participant = await svc.update_participant(
        board_id, participant_id, body, identity.subject
    )
    return ParticipantRead.from_participant(participant)


@router.delete("/{board_id}/participants/{participant_id}", status_code=204)
async def remove_participant(
    board_id: RowId,
    participant_id: RowId,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    await svc.remove_participant(board_id, participant_id, identity.subject)
    return Response(status_code=204)


# ─── Scores ─────────────────────────────────────────────

@router.put(
    "/{board_id}/participants/{participant_id}/scores",
    response_model=ScoreEntryRead,
)
async def set_score(
    board_id: RowId,
    participant_id: RowId,
    body: ScoreSet,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    """Create or overwrite the score for body.round_number."""
    entry = await svc.set_score(board_id, participant_id, body, identity.subject)
    return ScoreEntryRead.from_entry(entry)


@router.delete(
    "/{board_id}/participants/{participant_id}/scores/{score_id}",
    status_code=204,
)
async def delete_score(
    board_id: RowId,
    participant_id: RowId,
    score_id: RowId,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: BoardService = Depends(_svc),
):
    await svc.delete_score(board_id, participant_id, score_id, identity.subject)
    return Response(status_code=204)
