"""Request admission pipeline.

A route declares which stages it needs; stages run in the listed order against
one ``AdmissionContext`` and short-circuit by raising an ``AppError``. The
only writes a stage may make are tombstones (expired session, burnt token),
and those are committed even when the stage rejects the request.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from conquest.auth.sessions import (
    TokenType,
    consume_one_time_token,
    expire_admin_session,
    expire_session,
    get_active_admin_session,
    get_active_session,
)
from conquest.db.models import UserBan, UserDevice, VersionMaster
from conquest.errors import (
    AppError,
    ExpiredSessionError,
    ForbiddenError,
    InvalidMasterVersionError,
    InvalidTokenError,
    MasterVersionNotFoundError,
    UnauthorizedError,
    UserDeviceNotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


@dataclass
class AdmissionContext:
    """What the pipeline knows about one inbound request."""

    request_at: int
    user_id: int | None = None
    session_id: str | None = None
    master_version: str | None = None
    one_time_token: str | None = None
    token_type: TokenType | None = None


Stage = Callable[["AsyncSession", AdmissionContext], Awaitable[None]]


async def run_stages(db: AsyncSession, ctx: AdmissionContext, stages: Sequence[Stage]) -> None:
    """Run stages in order, committing any tombstones they wrote."""
    try:
        for stage in stages:
            await stage(db, ctx)
    except AppError as e:
        await db.commit()
        logger.info(
            "admission_rejected",
            stage=stage.__name__,
            user_id=ctx.user_id,
            session_id=ctx.session_id,
            reason=e.message,
        )
        raise
    await db.commit()


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


async def check_master_version(db: AsyncSession, ctx: AdmissionContext) -> None:
    result = await db.execute(select(VersionMaster).where(VersionMaster.status == 1))
    active = result.scalars().first()
    if active is None:
        raise MasterVersionNotFoundError
    if ctx.master_version != active.master_version:
        raise InvalidMasterVersionError


async def check_ban(db: AsyncSession, ctx: AdmissionContext) -> None:
    if ctx.user_id is None:
        return
    if await is_banned(db, ctx.user_id):
        raise ForbiddenError


async def check_session(db: AsyncSession, ctx: AdmissionContext) -> None:
    if not ctx.session_id:
        raise UnauthorizedError
    if ctx.user_id is None:
        raise ValidationError("invalid userId")

    session = await get_active_session(db, ctx.session_id)
    if session is None:
        raise UnauthorizedError
    if session.user_id != ctx.user_id:
        raise ForbiddenError
    if session.expired_at < ctx.request_at:
        await expire_session(db, ctx.session_id, ctx.request_at)
        raise ExpiredSessionError


async def check_one_time_token(db: AsyncSession, ctx: AdmissionContext) -> None:
    if not ctx.one_time_token or ctx.token_type is None:
        raise InvalidTokenError
    if not await consume_one_time_token(db, ctx.one_time_token, ctx.token_type, ctx.request_at):
        raise InvalidTokenError


async def check_admin_session(db: AsyncSession, ctx: AdmissionContext) -> None:
    if not ctx.session_id:
        raise UnauthorizedError
    session = await get_active_admin_session(db, ctx.session_id)
    if session is None:
        raise UnauthorizedError
    if session.expired_at < ctx.request_at:
        await expire_admin_session(db, ctx.session_id, ctx.request_at)
        raise ExpiredSessionError


GAMEPLAY_STAGES: tuple[Stage, ...] = (check_master_version, check_ban, check_session)
ENTRY_STAGES: tuple[Stage, ...] = (check_master_version, check_ban)
ADMIN_STAGES: tuple[Stage, ...] = (check_admin_session,)


# ---------------------------------------------------------------------------
# Checks used inside handlers
# ---------------------------------------------------------------------------


async def is_banned(db: AsyncSession, user_id: int) -> bool:
    result = await db.execute(select(UserBan.id).where(UserBan.user_id == user_id))
    return result.first() is not None


async def check_viewer_id(db: AsyncSession, user_id: int, viewer_id: str | None) -> None:
    """Require that the request comes from a device registered to the user."""
    result = await db.execute(
        select(UserDevice.id).where(
            UserDevice.user_id == user_id,
            UserDevice.platform_id == viewer_id,
        )
    )
    if result.first() is None:
        raise UserDeviceNotFoundError
