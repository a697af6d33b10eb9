"""ORM models for user state, sessions and master data.

All timestamps are epoch seconds. User-state rows take their primary keys from
the id generator, so none of them autoincrement. Rows are never physically
deleted; ``deleted_at`` marks tombstones.
"""

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Boolean,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from conquest.db.base import Base


# ---------------------------------------------------------------------------
# Id generator
# ---------------------------------------------------------------------------


class IdGeneratorRow(Base):
    """Single-row counter backing the global id allocator."""

    __tablename__ = "id_generator"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    last_id: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    isu_coin: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    last_getreward_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    last_activated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    registered_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class UserDevice(Base):
    """Platform device bound to a user at registration (viewer id)."""

    __tablename__ = "user_devices"
    __table_args__ = (UniqueConstraint("user_id", "platform_id"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    platform_id: Mapped[str] = mapped_column(String(255), nullable=False)
    platform_type: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class UserBan(Base):
    __tablename__ = "user_bans"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False, unique=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


# ---------------------------------------------------------------------------
# Sessions and one-time tokens
# ---------------------------------------------------------------------------


class UserSession(Base):
    """Opaque user session. At most one non-deleted row per user."""

    __tablename__ = "user_sessions"
    __table_args__ = (Index("idx_user_sessions_user", "user_id", "deleted_at"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    session_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    expired_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class UserOneTimeToken(Base):
    """Single-use credential gating a gacha draw (type 1) or card leveling (type 2)."""

    __tablename__ = "user_one_time_tokens"
    __table_args__ = (Index("idx_user_one_time_tokens_user", "user_id", "deleted_at"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    token_type: Mapped[int] = mapped_column(Integer, nullable=False)
    expired_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


# ---------------------------------------------------------------------------
# Owned resources
# ---------------------------------------------------------------------------


class UserCard(Base):
    __tablename__ = "user_cards"
    __table_args__ = (Index("idx_user_cards_user", "user_id"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    card_id: Mapped[int] = mapped_column(Integer, nullable=False)
    amount_per_sec: Mapped[int] = mapped_column(Integer, nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    total_exp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class UserDeck(Base):
    """Active production deck: exactly three card instances."""

    __tablename__ = "user_decks"
    __table_args__ = (Index("idx_user_decks_user", "user_id", "deleted_at"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    user_card_id_1: Mapped[int] = mapped_column(BigInteger, nullable=False)
    user_card_id_2: Mapped[int] = mapped_column(BigInteger, nullable=False)
    user_card_id_3: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class UserItem(Base):
    """Stock of an enhancement or time-shortening material."""

    __tablename__ = "user_items"
    __table_args__ = (UniqueConstraint("user_id", "item_id"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    item_type: Mapped[int] = mapped_column(Integer, nullable=False)
    item_id: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class UserLoginBonus(Base):
    """Per-user progress through one login bonus definition."""

    __tablename__ = "user_login_bonuses"
    __table_args__ = (UniqueConstraint("user_id", "login_bonus_id"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    login_bonus_id: Mapped[int] = mapped_column(Integer, nullable=False)
    last_reward_sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    loop_count: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class UserPresent(Base):
    """Grant waiting in the receive box. Receipt sets deleted_at."""

    __tablename__ = "user_presents"
    __table_args__ = (Index("idx_user_presents_user", "user_id", "deleted_at", "created_at"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    sent_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    item_type: Mapped[int] = mapped_column(Integer, nullable=False)
    item_id: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    present_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class UserPresentAllReceivedHistory(Base):
    """Proof that a broadcast present was already delivered to a user."""

    __tablename__ = "user_present_all_received_history"
    __table_args__ = (Index("idx_present_history_user", "user_id", "present_all_id"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    present_all_id: Mapped[int] = mapped_column(Integer, nullable=False)
    received_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


class AdminUser(Base):
    __tablename__ = "admin_users"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    password: Mapped[str] = mapped_column(String(256), nullable=False)
    last_activated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class AdminSession(Base):
    __tablename__ = "admin_sessions"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    session_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    expired_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


# ---------------------------------------------------------------------------
# Master data (managed externally, read-only here)
# ---------------------------------------------------------------------------


class VersionMaster(Base):
    __tablename__ = "version_masters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    status: Mapped[int] = mapped_column(Integer, nullable=False)
    master_version: Mapped[str] = mapped_column(String(255), nullable=False)


class ItemMaster(Base):
    """Coin, card, or material definition. Card fields are zero for materials."""

    __tablename__ = "item_masters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    item_type: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount_per_sec: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_amount_per_sec: Mapped[int | None] = mapped_column(Integer, nullable=True)
    base_exp_per_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    gained_exp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    shortening_min: Mapped[int | None] = mapped_column(BigInteger, nullable=True)


class GachaMaster(Base):
    __tablename__ = "gacha_masters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    start_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    end_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class GachaItemMaster(Base):
    """One weighted entry of a gacha's draw pool."""

    __tablename__ = "gacha_item_masters"
    __table_args__ = (Index("idx_gacha_item_masters_gacha", "gacha_id", "id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    gacha_id: Mapped[int] = mapped_column(Integer, nullable=False)
    item_type: Mapped[int] = mapped_column(Integer, nullable=False)
    item_id: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    weight: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class LoginBonusMaster(Base):
    __tablename__ = "login_bonus_masters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    start_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    end_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    column_count: Mapped[int] = mapped_column(Integer, nullable=False)
    looped: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class LoginBonusRewardMaster(Base):
    __tablename__ = "login_bonus_reward_masters"
    __table_args__ = (UniqueConstraint("login_bonus_id", "reward_sequence"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    login_bonus_id: Mapped[int] = mapped_column(Integer, nullable=False)
    reward_sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    item_type: Mapped[int] = mapped_column(Integer, nullable=False)
    item_id: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class PresentAllMaster(Base):
    """Broadcast present delivered to every user who logs in during its window."""

    __tablename__ = "present_all_masters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    registered_start_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    registered_end_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    item_type: Mapped[int] = mapped_column(Integer, nullable=False)
    item_id: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    present_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
