"""Baseline: user state, sessions, admin and master tables.

Seeds the single id_generator row that every user-state primary key is
allocated from.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps(*, deleted: bool = True) -> list[sa.Column]:
    cols = [
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.BigInteger(), nullable=False),
    ]
    if deleted:
        cols.append(sa.Column("deleted_at", sa.BigInteger(), nullable=True))
    return cols


def upgrade() -> None:
    """Create all tables and seed the id generator."""
    # --- Id generator ---
    op.create_table(
        "id_generator",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("last_id", sa.BigInteger(), nullable=False, server_default="0"),
    )
    op.execute("INSERT INTO id_generator (id, last_id) VALUES (1, 100000000000)")

    # --- Users ---
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("isu_coin", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("last_getreward_at", sa.BigInteger(), nullable=False),
        sa.Column("last_activated_at", sa.BigInteger(), nullable=False),
        sa.Column("registered_at", sa.BigInteger(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "user_devices",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("platform_id", sa.String(255), nullable=False),
        sa.Column("platform_type", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "platform_id"),
    )
    op.create_table(
        "user_bans",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False, unique=True),
        *_timestamps(),
    )

    # --- Sessions and tokens ---
    op.create_table(
        "user_sessions",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("session_id", sa.String(128), nullable=False, unique=True),
        sa.Column("expired_at", sa.BigInteger(), nullable=False),
        *_timestamps(),
    )
    op.create_index("idx_user_sessions_user", "user_sessions", ["user_id", "deleted_at"])
    op.create_table(
        "user_one_time_tokens",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("token", sa.String(128), nullable=False, unique=True),
        sa.Column("token_type", sa.Integer(), nullable=False),
        sa.Column("expired_at", sa.BigInteger(), nullable=False),
        *_timestamps(),
    )
    op.create_index("idx_user_one_time_tokens_user", "user_one_time_tokens", ["user_id", "deleted_at"])

    # --- Cards, decks, items ---
    op.create_table(
        "user_cards",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("card_id", sa.Integer(), nullable=False),
        sa.Column("amount_per_sec", sa.Integer(), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("total_exp", sa.BigInteger(), nullable=False),
        *_timestamps(),
    )
    op.create_index("idx_user_cards_user", "user_cards", ["user_id"])
    op.create_table(
        "user_decks",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("user_card_id_1", sa.BigInteger(), nullable=False),
        sa.Column("user_card_id_2", sa.BigInteger(), nullable=False),
        sa.Column("user_card_id_3", sa.BigInteger(), nullable=False),
        *_timestamps(),
    )
    op.create_index("idx_user_decks_user", "user_decks", ["user_id", "deleted_at"])
    op.create_table(
        "user_items",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("item_type", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "item_id"),
    )

    # --- Login bonuses and presents ---
    op.create_table(
        "user_login_bonuses",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("login_bonus_id", sa.Integer(), nullable=False),
        sa.Column("last_reward_sequence", sa.Integer(), nullable=False),
        sa.Column("loop_count", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "login_bonus_id"),
    )
    op.create_table(
        "user_presents",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("sent_at", sa.BigInteger(), nullable=False),
        sa.Column("item_type", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("present_message", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_user_presents_user", "user_presents", ["user_id", "deleted_at", "created_at"])
    op.create_table(
        "user_present_all_received_history",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("present_all_id", sa.Integer(), nullable=False),
        sa.Column("received_at", sa.BigInteger(), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "idx_present_history_user", "user_present_all_received_history", ["user_id", "present_all_id"]
    )

    # --- Admin ---
    op.create_table(
        "admin_users",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("password", sa.String(256), nullable=False),
        sa.Column("last_activated_at", sa.BigInteger(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "admin_sessions",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("session_id", sa.String(128), nullable=False, unique=True),
        sa.Column("expired_at", sa.BigInteger(), nullable=False),
        *_timestamps(),
    )

    # --- Masters ---
    op.create_table(
        "version_masters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("status", sa.Integer(), nullable=False),
        sa.Column("master_version", sa.String(255), nullable=False),
    )
    op.create_table(
        "item_masters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("item_type", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("amount_per_sec", sa.Integer(), nullable=True),
        sa.Column("max_level", sa.Integer(), nullable=True),
        sa.Column("max_amount_per_sec", sa.Integer(), nullable=True),
        sa.Column("base_exp_per_level", sa.Integer(), nullable=True),
        sa.Column("gained_exp", sa.Integer(), nullable=True),
        sa.Column("shortening_min", sa.BigInteger(), nullable=True),
    )
    op.create_table(
        "gacha_masters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("start_at", sa.BigInteger(), nullable=False),
        sa.Column("end_at", sa.BigInteger(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
    )
    op.create_table(
        "gacha_item_masters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("gacha_id", sa.Integer(), nullable=False),
        sa.Column("item_type", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("weight", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
    )
    op.create_index("idx_gacha_item_masters_gacha", "gacha_item_masters", ["gacha_id", "id"])
    op.create_table(
        "login_bonus_masters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("start_at", sa.BigInteger(), nullable=False),
        sa.Column("end_at", sa.BigInteger(), nullable=False),
        sa.Column("column_count", sa.Integer(), nullable=False),
        sa.Column("looped", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
    )
    op.create_table(
        "login_bonus_reward_masters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("login_bonus_id", sa.Integer(), nullable=False),
        sa.Column("reward_sequence", sa.Integer(), nullable=False),
        sa.Column("item_type", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.UniqueConstraint("login_bonus_id", "reward_sequence"),
    )
    op.create_table(
        "present_all_masters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("registered_start_at", sa.BigInteger(), nullable=False),
        sa.Column("registered_end_at", sa.BigInteger(), nullable=False),
        sa.Column("item_type", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("present_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
    )


def downgrade() -> None:
    """Drop all tables."""
    for table in (
        "present_all_masters",
        "login_bonus_reward_masters",
        "login_bonus_masters",
        "gacha_item_masters",
        "gacha_masters",
        "item_masters",
        "version_masters",
        "admin_sessions",
        "admin_users",
        "user_present_all_received_history",
        "user_presents",
        "user_login_bonuses",
        "user_items",
        "user_decks",
        "user_cards",
        "user_one_time_tokens",
        "user_sessions",
        "user_bans",
        "user_devices",
        "users",
        "id_generator",
    ):
        op.drop_table(table)
