"""Board service — ownership-scoped CRUD for boards, participants, scores.

Learn: Every public method takes the caller's identity (the token
subject, i.e. the email) as a plain argument and starts from scratch:
1. resolve the user for that subject
2. load the board with ONE query keyed on (board_id, owner_id)

"Board doesn't exist" and "board belongs to someone else" therefore come
back as the same NotFoundError: a caller can't probe for foreign ids.
Participants and scores are only ever looked up inside the board that
was just loaded, never globally.

Deletes are explicit statements (scores → participants → board) so the
cascade is visible in code and doesn't depend on ORM collection state.
The FKs also carry ON DELETE CASCADE for anything that bypasses us.
"""

from typing import Optional

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from gamegauge.db.models import DB_INT_MAX, Board, Participant, ScoreEntry, User
from gamegauge.errors import AuthorizationError, NotFoundError
from gamegauge.schemas.board import (
    BoardCreate,
    BoardImport,
    BoardUpdate,
    ParticipantCreate,
    ParticipantUpdate,
    ScoreSet,
)

logger = structlog.get_logger()

COPY_SUFFIX = " (Copy)"
BOARD_NAME_MAX = 100


class BoardService:
    """Business logic for boards and everything nested inside them."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Lookups ────────────────────────────────────────

    async def _get_user(self, owner_email: str) -> User:
        result = await self.db.execute(select(User).where(User.email == owner_email))
        user = result.scalars().first()
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def _get_owned_board(self, board_id: int, user: User) -> Board:
        """Load a board with its whole tree, or fail if the user doesn't own it.

        Learn: populate_existing makes the query overwrite objects already
        sitting in the session, so collections reflect rows deleted or
        added by earlier statements in the same unit of work.
        """
        result = await self.db.execute(
            select(Board)
            .where(Board.id == board_id, Board.owner_id == user.id)
            .options(
                selectinload(Board.participants).selectinload(Participant.score_entries),
                joinedload(Board.owner),
            )
            .execution_options(populate_existing=True)
        )
        board = result.scalars().first()
        if board is None:
            exists = await self.db.scalar(select(Board.id).where(Board.id == board_id))
            if exists is not None:
                logger.warning("board.access_denied", board_id=board_id, user_id=user.id)
                raise AuthorizationError("Board not found")
            raise NotFoundError("Board not found")
        return board

    @staticmethod
    def _find_participant(board: Board, participant_id: int) -> Participant:
        for participant in board.participants:
            if participant.id == participant_id:
                return participant
        raise NotFoundError("Participant not found")

    async def _next_display_order(self, user: User) -> int:
        result = await self.db.execute(
            select(func.max(Board.display_order)).where(Board.owner_id == user.id)
        )
        current = result.scalar()
        return 0 if current is None else current + 1

    async def _delete_board_scores(self, board_id: int) -> None:
        participant_ids = select(Participant.id).where(Participant.board_id == board_id)
        await self.db.execute(
            delete(ScoreEntry)
            .where(ScoreEntry.participant_id.in_(participant_ids))
            .execution_options(synchronize_session=False)
        )

    # ─── Boards ─────────────────────────────────────────

    async def create_board(self, body: BoardCreate, owner_email: str) -> Board:
        user = await self._get_user(owner_email)
        board = Board(
            name=body.name,
            owner_id=user.id,
            target_score=body.target_score,
            score_condition=body.score_condition,
            number_of_rounds=body.number_of_rounds,
            display_order=await self._next_display_order(user),
        )
        self.db.add(board)
        await self.db.commit()
        logger.info("board.created", board_id=board.id, user_id=user.id)
        return await self._get_owned_board(board.id, user)

    async def list_boards(self, owner_email: str) -> list[Board]:
        user = await self._get_user(owner_email)
        result = await self.db.execute(
            select(Board)
            .where(Board.owner_id == user.id)
            .options(
                selectinload(Board.participants).selectinload(Participant.score_entries),
                joinedload(Board.owner),
            )
            .order_by(Board.display_order, Board.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_board(self, board_id: int, owner_email: str) -> Board:
        user = await self._get_user(owner_email)
        return await self._get_owned_board(board_id, user)

    async def update_board(
        self, board_id: int, body: BoardUpdate, owner_email: str
    ) -> Board:
        user = await self._get_user(owner_email)
        board = await self._get_owned_board(board_id, user)

        board.name = body.name
        board.target_score = body.target_score
        board.score_condition = body.score_condition
        board.number_of_rounds = body.number_of_rounds
        await self.db.commit()

        logger.info("board.updated", board_id=board.id)
        return await self._get_owned_board(board.id, user)

    async def delete_board(self, board_id: int, owner_email: str) -> None:
        user = await self._get_user(owner_email)
        board = await self._get_owned_board(board_id, user)

        await self._delete_board_scores(board.id)
        await self.db.execute(
            delete(Participant)
            .where(Participant.board_id == board.id)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(
            delete(Board)
            .where(Board.id == board.id)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        logger.info("board.deleted", board_id=board_id, user_id=user.id)

    # ─── Participants ───────────────────────────────────

    async def add_participant(
        self, board_id: int, body: ParticipantCreate, owner_email: str
    ) -> Participant:
        """Add a participant and return it — the new row, not a list position."""
        user = await self._get_user(owner_email)
        board = await self._get_owned_board(board_id, user)

        participant = Participant(name=body.name, board_id=board.id, score_entries=[])
        self.db.add(participant)
        await self.db.commit()

        logger.info("participant.added", board_id=board.id, participant_id=participant.id)
        return participant

    async def remove_participant(
        self, board_id: int, participant_id: int, owner_email: str
    ) -> None:
        user = await self._get_user(owner_email)
        board = await self._get_owned_board(board_id, user)
        participant = self._find_participant(board, participant_id)

        await self.db.execute(
            delete(ScoreEntry)
            .where(ScoreEntry.participant_id == participant.id)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(
            delete(Participant)
            .where(Participant.id == participant.id)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        logger.info("participant.removed", board_id=board.id, participant_id=participant_id)

    async def update_participant(
        self,
        board_id: int,
        participant_id: int,
        body: ParticipantUpdate,
        owner_email: str,
    ) -> Participant:
        user = await self._get_user(owner_email)
        board = await self._get_owned_board(board_id, user)
        participant = self._find_participant(board, participant_id)

        participant.name = body.name
        await self.db.commit()
        logger.info("participant.renamed", board_id=board.id, participant_id=participant.id)
        return participant

    # ─── Scores ─────────────────────────────────────────

    async def set_score(
        self,
        board_id: int,
        participant_id: int,
        body: ScoreSet,
        owner_email: str,
    ) -> ScoreEntry:
        """Upsert the participant's score for one round.

        Learn: round numbers are unique per participant by procedure, not
        by constraint. An existing entry for the round is overwritten in
        place; only a new round appends a row.
        """
        user = await self._get_user(owner_email)
        board = await self._get_owned_board(board_id, user)
        participant = self._find_participant(board, participant_id)

        entry: Optional[ScoreEntry] = next(
            (s for s in participant.score_entries if s.round_number == body.round_number),
            None,
        )
        if entry is not None:
            entry.score_value = body.score_value
        else:
            entry = ScoreEntry(
                score_value=body.score_value,
                round_number=body.round_number,
                participant_id=participant.id,
            )
            self.db.add(entry)
        await self.db.commit()

        logger.info(
            "score.set",
            board_id=board.id,
            participant_id=participant.id,
            round_number=body.round_number,
        )
        return entry

    async def delete_score(
        self,
        board_id: int,
        participant_id: int,
        score_id: int,
        owner_email: str,
    ) -> None:
        user = await self._get_user(owner_email)
        board = await self._get_owned_board(board_id, user)
        participant = self._find_participant(board, participant_id)

        entry = next((s for s in participant.score_entries if s.id == score_id), None)
        if entry is None:
            raise NotFoundError("Score not found")

        await self.db.delete(entry)
        await self.db.commit()
        logger.info("score.deleted", board_id=board.id, score_id=score_id)

    async def restart_board(self, board_id: int, owner_email: str) -> None:
        """Wipe every score of the board in one statement. Participants stay."""
        user = await self._get_user(owner_email)
        board = await self._get_owned_board(board_id, user)

        await self._delete_board_scores(board.id)
        await self.db.commit()
        logger.info("board.restarted", board_id=board.id)

    # ─── Ordering ───────────────────────────────────────

    async def update_boards_order(self, board_ids: list[int], owner_email: str) -> int:
        """Assign display_order 0..N-1 following board_ids.

        Ids the caller doesn't own are skipped without error and don't
        consume a slot. Returns how many boards were reordered.
        """
        user = await self._get_user(owner_email)
        candidates = {i for i in board_ids if 1 <= i <= DB_INT_MAX}
        if not candidates:
            return 0

        result = await self.db.execute(
            select(Board).where(Board.owner_id == user.id, Board.id.in_(candidates))
        )
        owned = {board.id: board for board in result.scalars().all()}

        position = 0
        for board_id in board_ids:
            board = owned.get(board_id)
            if board is None:
                continue
            board.display_order = position
            position += 1
        await self.db.commit()

        skipped = len(board_ids) - position
        logger.info("board.reordered", user_id=user.id, count=position, skipped=skipped)
        return position

    # ─── Import / duplicate / export ────────────────────

    async def import_board(self, body: BoardImport, owner_email: str) -> Board:
        """Create a whole board graph in one transaction."""
        user = await self._get_user(owner_email)
        board = Board(
            name=body.name,
            owner_id=user.id,
            target_score=body.target_score,
            score_condition=body.score_condition,
            number_of_rounds=body.number_of_rounds,
            display_order=await self._next_display_order(user),
        )
        self.db.add(board)
        await self.db.flush()

        for item in body.participants:
            participant = Participant(name=item.name, board_id=board.id)
            self.db.add(participant)
            await self.db.flush()

            # Same round twice in the payload: the later value wins.
            by_round: dict[int, int] = {}
            for score in item.scores:
                by_round[score.round_number] = score.score_value
            for round_number, score_value in by_round.items():
                self.db.add(
                    ScoreEntry(
                        score_value=score_value,
                        round_number=round_number,
                        participant_id=participant.id,
                    )
                )

        await self.db.commit()
        logger.info(
            "board.imported",
            board_id=board.id,
            user_id=user.id,
            participants=len(body.participants),
        )
        return await self._get_owned_board(board.id, user)

    async def duplicate_board(self, board_id: int, owner_email: str) -> Board:
        """Copy rules and participant names into a new board. Scores are not copied."""
        user = await self._get_user(owner_email)
        source = await self._get_owned_board(board_id, user)

        name = source.name[: BOARD_NAME_MAX - len(COPY_SUFFIX)] + COPY_SUFFIX
        copy = Board(
            name=name,
            owner_id=user.id,
            target_score=source.target_score,
            score_condition=source.score_condition,
            number_of_rounds=source.number_of_rounds,
            display_order=await self._next_display_order(user),
        )
        self.db.add(copy)
        await self.db.flush()

        for participant in source.participants:
            self.db.add(Participant(name=participant.name, board_id=copy.id))
        await self.db.commit()

        logger.info("board.duplicated", source_id=source.id, board_id=copy.id)
        return await self._get_owned_board(copy.id, user)

    async def export_board(self, board_id: int, owner_email: str) -> BoardImport:
        """The board in import-payload shape, ready to be imported elsewhere."""
        board = await self.get_board(board_id, owner_email)
        return BoardImport.from_board(board)
