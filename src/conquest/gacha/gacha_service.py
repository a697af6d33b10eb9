"""Gacha listing and paid draws."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from conquest.auth.pipeline import check_viewer_id
from conquest.auth.sessions import TokenType, issue_one_time_token
from conquest.db.models import GachaItemMaster, GachaMaster, UserPresent
from conquest.errors import ConflictError, GachaItemNotFoundError, GachaNotFoundError, ValidationError
from conquest.gacha.draw import draw
from conquest.presents.present_service import create_present
from conquest.resources.grant_service import get_user

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from conquest.core.id_generator import IdGenerator

logger = structlog.get_logger()

ALLOWED_DRAW_COUNTS = frozenset({1, 10})


@dataclass
class GachaOffer:
    gacha: GachaMaster
    items: list[GachaItemMaster]


def validate_draw_count(n: int) -> int:
    if n not in ALLOWED_DRAW_COUNTS:
        raise ValidationError("invalid draw gacha times")
    return n


async def get_gacha_pool(db: AsyncSession, gacha_id: int) -> list[GachaItemMaster]:
    result = await db.execute(
        select(GachaItemMaster).where(GachaItemMaster.gacha_id == gacha_id).order_by(GachaItemMaster.id)
    )
    pool = list(result.scalars().all())
    if not pool:
        raise GachaItemNotFoundError
    return pool


async def list_gacha(
    db: AsyncSession,
    ids: IdGenerator,
    user_id: int,
    now: int,
    token_ttl_seconds: int,
) -> tuple[list[GachaOffer], str]:
    """Active gachas with their pools and a fresh draw token.

    When no gacha is active nothing is issued and the token is empty.
    """
    result = await db.execute(
        select(GachaMaster)
        .where(GachaMaster.start_at <= now, GachaMaster.end_at >= now)
        .order_by(GachaMaster.display_order)
    )
    gachas = list(result.scalars().all())
    if not gachas:
        return [], ""

    offers = [GachaOffer(gacha=gacha, items=await get_gacha_pool(db, gacha.id)) for gacha in gachas]

    token = await issue_one_time_token(db, ids, user_id, TokenType.GACHA_DRAW, now, token_ttl_seconds)
    return offers, token.token


async def draw_gacha(
    db: AsyncSession,
    ids: IdGenerator,
    user_id: int,
    gacha_id: int,
    n: int,
    viewer_id: str | None,
    now: int,
    coin_cost: int,
    rng: random.Random | None = None,
) -> list[UserPresent]:
    """Pay for ``n`` draws and put each result in the user's receive box.

    The caller has already consumed the draw token. Does not commit.
    """
    validate_draw_count(n)
    await check_viewer_id(db, user_id, viewer_id)

    consumed_coin = n * coin_cost
    user = await get_user(db, user_id)
    if user.isu_coin < consumed_coin:
        raise ConflictError("not enough isucon")

    result = await db.execute(
        select(GachaMaster).where(
            GachaMaster.id == gacha_id,
            GachaMaster.start_at <= now,
            GachaMaster.end_at >= now,
        )
    )
    gacha = result.scalar_one_or_none()
    if gacha is None:
        raise GachaNotFoundError

    pool = await get_gacha_pool(db, gacha.id)
    results = draw(pool, n, rng)

    message = f"{gacha.name}の付与アイテムです"
    presents = [
        await create_present(db, ids, user_id, item.item_type, item.item_id, item.amount, message, now)
        for item in results
    ]

    user.isu_coin -= consumed_coin
    user.updated_at = now
    await db.flush()

    logger.info("gacha_drawn", user_id=user_id, gacha_id=gacha_id, times=n, consumed_coin=consumed_coin)
    return presents
