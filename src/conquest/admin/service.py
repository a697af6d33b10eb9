"""Admin operations: authentication, user inspection and bans."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from conquest.auth.password import hash_password, needs_rehash, verify_password
from conquest.auth.sessions import expire_admin_session, rotate_admin_session
from conquest.db.models import (
    AdminUser,
    User,
    UserBan,
    UserCard,
    UserDeck,
    UserDevice,
    UserItem,
    UserLoginBonus,
    UserPresent,
    UserPresentAllReceivedHistory,
)
from conquest.errors import UnauthorizedError, UserNotFoundError
from conquest.resources.grant_service import get_user

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from conquest.core.id_generator import IdGenerator
    from conquest.db.models import AdminSession

logger = structlog.get_logger()


@dataclass
class UserDump:
    user: User
    devices: list[UserDevice]
    cards: list[UserCard]
    decks: list[UserDeck]
    items: list[UserItem]
    login_bonuses: list[UserLoginBonus]
    presents: list[UserPresent]
    present_all_received_history: list[UserPresentAllReceivedHistory]


async def admin_login(
    db: AsyncSession,
    ids: IdGenerator,
    admin_id: int,
    password: str,
    now: int,
    session_ttl_seconds: int,
) -> AdminSession:
    """Check the admin password and replace any live admin session."""
    result = await db.execute(select(AdminUser).where(AdminUser.id == admin_id))
    admin = result.scalar_one_or_none()
    if admin is None:
        raise UserNotFoundError

    if not verify_password(password, admin.password):
        logger.warning("admin_login_failed", admin_id=admin_id)
        raise UnauthorizedError

    if needs_rehash(admin.password):
        admin.password = hash_password(password)
        logger.info("admin_password_rehashed", admin_id=admin_id)
    admin.last_activated_at = now
    admin.updated_at = now
    session = await rotate_admin_session(db, ids, admin.id, now, session_ttl_seconds)
    logger.info("admin_login", admin_id=admin_id)
    return session


async def admin_logout(db: AsyncSession, session_id: str, now: int) -> None:
    await expire_admin_session(db, session_id, now)


async def _all(db: AsyncSession, model, user_id: int) -> list:
    result = await db.execute(select(model).where(model.user_id == user_id).order_by(model.id))
    return list(result.scalars().all())


async def get_user_dump(db: AsyncSession, user_id: int) -> UserDump:
    """Everything stored about one user."""
    user = await get_user(db, user_id)
    return UserDump(
        user=user,
        devices=await _all(db, UserDevice, user_id),
        cards=await _all(db, UserCard, user_id),
        decks=await _all(db, UserDeck, user_id),
        items=await _all(db, UserItem, user_id),
        login_bonuses=await _all(db, UserLoginBonus, user_id),
        presents=await _all(db, UserPresent, user_id),
        present_all_received_history=await _all(db, UserPresentAllReceivedHistory, user_id),
    )


async def ban_user(db: AsyncSession, ids: IdGenerator, user_id: int, now: int) -> User:
    """Ban a user. Banning an already banned user only touches updated_at."""
    user = await get_user(db, user_id)

    result = await db.execute(select(UserBan).where(UserBan.user_id == user_id))
    ban = result.scalar_one_or_none()
    if ban is None:
        db.add(UserBan(id=await ids.generate(db), user_id=user_id, created_at=now, updated_at=now))
    else:
        ban.updated_at = now
    await db.flush()

    logger.info("user_banned", user_id=user_id)
    return user
