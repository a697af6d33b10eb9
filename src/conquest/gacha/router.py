"""Gacha router: /user/{user_id}/gacha/*."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from conquest.auth.dependencies import gacha_token, gameplay_admission
from conquest.auth.pipeline import AdmissionContext
from conquest.config import get_settings
from conquest.core.id_generator import IdGenerator, get_id_generator
from conquest.database import get_session
from conquest.gacha.gacha_service import draw_gacha, list_gacha, validate_draw_count
from conquest.gacha.schemas import (
    DrawGachaRequest,
    DrawGachaResponse,
    GachaData,
    GachaItemMasterOut,
    GachaMasterOut,
    ListGachaResponse,
)
from conquest.resources.schemas import UserPresentOut

router = APIRouter(prefix="/user/{user_id}/gacha", tags=["Gacha"])


async def _draw_count(n: int, ctx: AdmissionContext = Depends(gameplay_admission)) -> int:
    """Validate the draw count after admission and before the token is burnt."""
    return validate_draw_count(n)


@router.get("/index", response_model=ListGachaResponse)
async def get_gacha_list(
    user_id: int,
    ctx: AdmissionContext = Depends(gameplay_admission),
    db: AsyncSession = Depends(get_session),
    ids: IdGenerator = Depends(get_id_generator),
):
    """Active gachas with their pools, plus a fresh draw token."""
    settings = get_settings()
    offers, token = await list_gacha(db, ids, user_id, ctx.request_at, settings.one_time_token_ttl_seconds)
    await db.commit()

    return ListGachaResponse(
        one_time_token=token,
        gachas=[
            GachaData(
                gacha=GachaMasterOut.model_validate(offer.gacha),
                gacha_item_list=[GachaItemMasterOut.model_validate(i) for i in offer.items],
            )
            for offer in offers
        ],
    )


@router.post("/draw/{gacha_id}/{n}", response_model=DrawGachaResponse)
async def post_draw_gacha(
    user_id: int,
    gacha_id: int,
    body: DrawGachaRequest,
    ctx: AdmissionContext = Depends(gameplay_admission),
    times: int = Depends(_draw_count),
    token_ctx: AdmissionContext = Depends(gacha_token),
    db: AsyncSession = Depends(get_session),
    ids: IdGenerator = Depends(get_id_generator),
):
    """Pay coins for 1 or 10 draws; results land in the receive box."""
    settings = get_settings()
    presents = await draw_gacha(
        db,
        ids,
        user_id,
        gacha_id,
        times,
        body.viewer_id,
        ctx.request_at,
        settings.gacha_coin_cost,
    )
    await db.commit()

    return DrawGachaResponse(presents=[UserPresentOut.model_validate(p) for p in presents])
