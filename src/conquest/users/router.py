"""User router: registration, login and per-user game state."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from conquest.auth.dependencies import entry_admission, gameplay_admission, leveling_token
from conquest.auth.pipeline import AdmissionContext, check_viewer_id
from conquest.config import get_settings
from conquest.core.id_generator import IdGenerator, get_id_generator
from conquest.database import get_session
from conquest.resources.leveling import add_exp_to_card
from conquest.resources.schemas import (
    UpdatedResources,
    UserCardOut,
    UserDeckOut,
    UserDeviceOut,
    UserItemOut,
    UserLoginBonusOut,
    UserOut,
    UserPresentOut,
)
from conquest.users import service
from conquest.users.schemas import (
    AddExpToCardRequest,
    CreateUserRequest,
    CreateUserResponse,
    HomeResponse,
    ListItemResponse,
    LoginRequest,
    LoginResponse,
    UpdateDeckRequest,
    UpdatedResourcesResponse,
    ViewerRequest,
)

router = APIRouter(tags=["Users"])


@router.post("/user", response_model=CreateUserResponse, response_model_exclude_none=True)
async def create_user(
    body: CreateUserRequest,
    ctx: AdmissionContext = Depends(entry_admission),
    db: AsyncSession = Depends(get_session),
    ids: IdGenerator = Depends(get_id_generator),
):
    """Register a new user with a starter deck."""
    settings = get_settings()
    reg = await service.create_user(
        db,
        ids,
        body.viewer_id,
        body.platform_type,
        ctx.request_at,
        settings.initial_card_id,
        settings.session_ttl_seconds,
    )
    await db.commit()

    return CreateUserResponse(
        user_id=reg.user.id,
        viewer_id=reg.device.platform_id,
        session_id=reg.session.session_id,
        created_at=ctx.request_at,
        updated_resources=UpdatedResources(
            now=ctx.request_at,
            user=UserOut.model_validate(reg.user),
            user_device=UserDeviceOut.model_validate(reg.device),
            user_cards=[UserCardOut.model_validate(c) for c in reg.cards],
            user_decks=[UserDeckOut.from_row(reg.deck)],
            user_login_bonuses=[UserLoginBonusOut.model_validate(b) for b in reg.login_bonuses],
            user_presents=[UserPresentOut.model_validate(p) for p in reg.presents],
        ),
    )


@router.post("/login", response_model=LoginResponse, response_model_exclude_none=True)
async def login(
    body: LoginRequest,
    ctx: AdmissionContext = Depends(entry_admission),
    db: AsyncSession = Depends(get_session),
    ids: IdGenerator = Depends(get_id_generator),
):
    """Start a new session for an existing user."""
    settings = get_settings()
    result = await service.login(
        db, ids, body.user_id, body.viewer_id, ctx.request_at, settings.session_ttl_seconds
    )
    await db.commit()

    resources = UpdatedResources(now=ctx.request_at, user=UserOut.model_validate(result.user))
    if result.login_bonuses is not None:
        resources.user_login_bonuses = [UserLoginBonusOut.model_validate(b) for b in result.login_bonuses]
    if result.presents is not None:
        resources.user_presents = [UserPresentOut.model_validate(p) for p in result.presents]

    return LoginResponse(
        viewer_id=body.viewer_id,
        session_id=result.session.session_id,
        updated_resources=resources,
    )


@router.get("/user/{user_id}/item", response_model=ListItemResponse)
async def list_item(
    user_id: int,
    ctx: AdmissionContext = Depends(gameplay_admission),
    db: AsyncSession = Depends(get_session),
    ids: IdGenerator = Depends(get_id_generator),
):
    """Owned items and cards, with a card-leveling token."""
    settings = get_settings()
    inventory = await service.list_items(db, ids, user_id, ctx.request_at, settings.one_time_token_ttl_seconds)
    await db.commit()

    return ListItemResponse(
        one_time_token=inventory.one_time_token,
        user=UserOut.model_validate(inventory.user),
        items=[UserItemOut.model_validate(i) for i in inventory.items],
        cards=[UserCardOut.model_validate(c) for c in inventory.cards],
    )


@router.post(
    "/user/{user_id}/card/addexp/{card_id}",
    response_model=UpdatedResourcesResponse,
    response_model_exclude_none=True,
)
async def add_exp(
    user_id: int,
    card_id: int,
    body: AddExpToCardRequest,
    ctx: AdmissionContext = Depends(leveling_token),
    db: AsyncSession = Depends(get_session),
):
    """Feed enhancement materials into a card."""
    await check_viewer_id(db, user_id, body.viewer_id)
    card, items = await add_exp_to_card(
        db,
        user_id,
        card_id,
        [(item.id, item.amount) for item in body.items],
        ctx.request_at,
    )
    await db.commit()

    return UpdatedResourcesResponse(
        updated_resources=UpdatedResources(
            now=ctx.request_at,
            user_cards=[UserCardOut.model_validate(card)],
            user_items=[UserItemOut.model_validate(i) for i in items],
        )
    )


@router.post("/user/{user_id}/card", response_model=UpdatedResourcesResponse, response_model_exclude_none=True)
async def update_deck(
    user_id: int,
    body: UpdateDeckRequest,
    ctx: AdmissionContext = Depends(gameplay_admission),
    db: AsyncSession = Depends(get_session),
    ids: IdGenerator = Depends(get_id_generator),
):
    """Replace the active deck."""
    deck = await service.update_deck(db, ids, user_id, body.viewer_id, body.card_ids, ctx.request_at)
    await db.commit()

    return UpdatedResourcesResponse(
        updated_resources=UpdatedResources(now=ctx.request_at, user_decks=[UserDeckOut.from_row(deck)])
    )


@router.post("/user/{user_id}/reward", response_model=UpdatedResourcesResponse, response_model_exclude_none=True)
async def reward(
    user_id: int,
    body: ViewerRequest,
    ctx: AdmissionContext = Depends(gameplay_admission),
    db: AsyncSession = Depends(get_session),
):
    """Collect coins produced since the last collection."""
    user = await service.reward(db, user_id, body.viewer_id, ctx.request_at)
    await db.commit()

    return UpdatedResourcesResponse(
        updated_resources=UpdatedResources(now=ctx.request_at, user=UserOut.model_validate(user))
    )


@router.get("/user/{user_id}/home", response_model=HomeResponse, response_model_exclude_none=True)
async def home(
    user_id: int,
    ctx: AdmissionContext = Depends(gameplay_admission),
    db: AsyncSession = Depends(get_session),
):
    """Home screen: deck, production rate and time since last collection."""
    data = await service.home(db, user_id, ctx.request_at)

    return HomeResponse(
        now=ctx.request_at,
        user=UserOut.model_validate(data.user),
        deck=UserDeckOut.from_row(data.deck) if data.deck is not None else None,
        total_amount_per_sec=data.total_amount_per_sec,
        past_time=data.past_time,
    )
