"""Session and one-time-token persistence.

Sessions and tokens are opaque UUID strings. Nothing here commits; callers
decide the transaction boundary.
"""

from __future__ import annotations

import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select, update

from conquest.db.models import AdminSession, UserOneTimeToken, UserSession

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from conquest.core.id_generator import IdGenerator


class TokenType(enum.IntEnum):
    GACHA_DRAW = 1
    CARD_LEVELING = 2


def generate_uuid() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# User sessions
# ---------------------------------------------------------------------------


async def get_active_session(db: AsyncSession, session_id: str) -> UserSession | None:
    result = await db.execute(
        select(UserSession).where(
            UserSession.session_id == session_id,
            UserSession.deleted_at.is_(None),
        )
    )
    return result.scalar_one_or_none()


async def expire_session(db: AsyncSession, session_id: str, now: int) -> None:
    await db.execute(
        update(UserSession)
        .where(UserSession.session_id == session_id)
        .values(deleted_at=now)
        .execution_options(synchronize_session=False)
    )


async def rotate_session(
    db: AsyncSession,
    ids: IdGenerator,
    user_id: int,
    now: int,
    ttl_seconds: int,
) -> UserSession:
    """Soft-delete the user's live sessions and issue a fresh one."""
    await db.execute(
        update(UserSession)
        .where(UserSession.user_id == user_id, UserSession.deleted_at.is_(None))
        .values(deleted_at=now)
        .execution_options(synchronize_session=False)
    )
    session = UserSession(
        id=await ids.generate(db),
        user_id=user_id,
        session_id=generate_uuid(),
        expired_at=now + ttl_seconds,
        created_at=now,
        updated_at=now,
    )
    db.add(session)
    await db.flush()
    return session


# ---------------------------------------------------------------------------
# Admin sessions
# ---------------------------------------------------------------------------


async def get_active_admin_session(db: AsyncSession, session_id: str) -> AdminSession | None:
    result = await db.execute(
        select(AdminSession).where(
            AdminSession.session_id == session_id,
            AdminSession.deleted_at.is_(None),
        )
    )
    return result.scalar_one_or_none()


async def expire_admin_session(db: AsyncSession, session_id: str, now: int) -> None:
    await db.execute(
        update(AdminSession)
        .where(AdminSession.session_id == session_id, AdminSession.deleted_at.is_(None))
        .values(deleted_at=now)
        .execution_options(synchronize_session=False)
    )


async def rotate_admin_session(
    db: AsyncSession,
    ids: IdGenerator,
    admin_id: int,
    now: int,
    ttl_seconds: int,
) -> AdminSession:
    await db.execute(
        update(AdminSession)
        .where(AdminSession.user_id == admin_id, AdminSession.deleted_at.is_(None))
        .values(deleted_at=now)
        .execution_options(synchronize_session=False)
    )
    session = AdminSession(
        id=await ids.generate(db),
        user_id=admin_id,
        session_id=generate_uuid(),
        expired_at=now + ttl_seconds,
        created_at=now,
        updated_at=now,
    )
    db.add(session)
    await db.flush()
    return session


# ---------------------------------------------------------------------------
# One-time tokens
# ---------------------------------------------------------------------------


async def issue_one_time_token(
    db: AsyncSession,
    ids: IdGenerator,
    user_id: int,
    token_type: TokenType,
    now: int,
    ttl_seconds: int,
) -> UserOneTimeToken:
    """Invalidate every live token of the user and issue a new one."""
    await db.execute(
        update(UserOneTimeToken)
        .where(UserOneTimeToken.user_id == user_id, UserOneTimeToken.deleted_at.is_(None))
        .values(deleted_at=now)
        .execution_options(synchronize_session=False)
    )
    token = UserOneTimeToken(
        id=await ids.generate(db),
        user_id=user_id,
        token=generate_uuid(),
        token_type=int(token_type),
        expired_at=now + ttl_seconds,
        created_at=now,
        updated_at=now,
    )
    db.add(token)
    await db.flush()
    return token


async def consume_one_time_token(
    db: AsyncSession,
    token: str,
    token_type: TokenType,
    now: int,
) -> bool:
    """Burn a token. Returns True only if it was live and unexpired.

    A token that is found is soft-deleted whether or not it has expired, so it
    can never validate twice.
    """
    result = await db.execute(
        select(UserOneTimeToken).where(
            UserOneTimeToken.token == token,
            UserOneTimeToken.token_type == int(token_type),
            UserOneTimeToken.deleted_at.is_(None),
        )
    )
    tk = result.scalar_one_or_none()
    if tk is None:
        return False

    tk.deleted_at = now
    tk.updated_at = now
    await db.flush()
    return tk.expired_at >= now
