"""Admin router: /admin/*."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from conquest.admin import service
from conquest.admin.schemas import (
    AdminBanUserResponse,
    AdminLoginRequest,
    AdminLoginResponse,
    AdminSessionOut,
    AdminUserResponse,
)
from conquest.auth.dependencies import admin_admission, get_request_time
from conquest.auth.pipeline import AdmissionContext
from conquest.config import get_settings
from conquest.core.id_generator import IdGenerator, get_id_generator
from conquest.database import get_session
from conquest.resources.schemas import (
    UserCardOut,
    UserDeckOut,
    UserDeviceOut,
    UserItemOut,
    UserLoginBonusOut,
    UserOut,
    UserPresentAllReceivedHistoryOut,
    UserPresentOut,
)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/login", response_model=AdminLoginResponse)
async def admin_login(
    body: AdminLoginRequest,
    request_at: int = Depends(get_request_time),
    db: AsyncSession = Depends(get_session),
    ids: IdGenerator = Depends(get_id_generator),
):
    """Authenticate an admin and issue an admin session."""
    settings = get_settings()
    session = await service.admin_login(
        db, ids, body.user_id, body.password, request_at, settings.session_ttl_seconds
    )
    await db.commit()
    return AdminLoginResponse(session=AdminSessionOut.model_validate(session))


@router.delete("/logout", status_code=204)
async def admin_logout(
    ctx: AdmissionContext = Depends(admin_admission),
    db: AsyncSession = Depends(get_session),
):
    """End the current admin session."""
    await service.admin_logout(db, ctx.session_id, ctx.request_at)
    await db.commit()
    return Response(status_code=204)


@router.get("/user/{user_id}", response_model=AdminUserResponse)
async def admin_user(
    user_id: int,
    ctx: AdmissionContext = Depends(admin_admission),
    db: AsyncSession = Depends(get_session),
):
    """Full state of one user."""
    dump = await service.get_user_dump(db, user_id)
    return AdminUserResponse(
        user=UserOut.model_validate(dump.user),
        user_devices=[UserDeviceOut.model_validate(d) for d in dump.devices],
        user_cards=[UserCardOut.model_validate(c) for c in dump.cards],
        user_decks=[UserDeckOut.from_row(d) for d in dump.decks],
        user_items=[UserItemOut.model_validate(i) for i in dump.items],
        user_login_bonuses=[UserLoginBonusOut.model_validate(b) for b in dump.login_bonuses],
        user_presents=[UserPresentOut.model_validate(p) for p in dump.presents],
        user_present_all_received_history=[
            UserPresentAllReceivedHistoryOut.model_validate(h) for h in dump.present_all_received_history
        ],
    )


@router.post("/user/{user_id}/ban", response_model=AdminBanUserResponse)
async def admin_ban_user(
    user_id: int,
    ctx: AdmissionContext = Depends(admin_admission),
    db: AsyncSession = Depends(get_session),
    ids: IdGenerator = Depends(get_id_generator),
):
    """Ban a user from gameplay."""
    user = await service.ban_user(db, ids, user_id, ctx.request_at)
    await db.commit()
    return AdminBanUserResponse(user=UserOut.model_validate(user))
