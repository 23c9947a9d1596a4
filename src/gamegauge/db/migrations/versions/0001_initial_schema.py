"""Initial schema: users, boards, participants, score entries

Learn: The four tables of the ownership chain. Every child FK is
ON DELETE CASCADE so the database agrees with the explicit deletes the
services issue (score entries → participants → board).

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-06-14 10:12:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(50), nullable=False, unique=True),
        sa.Column("email", sa.String(100), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verification_token", sa.String(255), nullable=True),
        sa.Column("reset_token_hash", sa.String(64), nullable=True),
        sa.Column("reset_token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_reset_token_hash", "users", ["reset_token_hash"])

    op.create_table(
        "boards",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column(
            "owner_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("target_score", sa.Integer(), nullable=True),
        sa.Column(
            "score_condition",
            sa.Enum("HIGHEST_WINS", "LOWEST_WINS", name="score_condition"),
            nullable=False,
            server_default="HIGHEST_WINS",
        ),
        sa.Column("number_of_rounds", sa.Integer(), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_boards_owner_order", "boards", ["owner_id", "display_order"])

    op.create_table(
        "participants",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column(
            "board_id",
            sa.Integer(),
            sa.ForeignKey("boards.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_participants_board_id", "participants", ["board_id"])

    op.create_table(
        "score_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("score_value", sa.Integer(), nullable=False),
        sa.Column("round_number", sa.Integer(), nullable=False),
        sa.Column(
            "participant_id",
            sa.Integer(),
            sa.ForeignKey("participants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(
        "ix_score_entries_participant_round",
        "score_entries",
        ["participant_id", "round_number"],
    )


def downgrade() -> None:
    op.drop_index("ix_score_entries_participant_round", table_name="score_entries")
    op.drop_table("score_entries")
    op.drop_index("ix_participants_board_id", table_name="participants")
    op.drop_table("participants")
    op.drop_index("ix_boards_owner_order", table_name="boards")
    op.drop_table("boards")
    sa.Enum(name="score_condition").drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_users_reset_token_hash", table_name="users")
    op.drop_table("users")
