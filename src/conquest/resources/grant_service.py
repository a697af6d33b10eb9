"""Resource grants: coins, cards and materials.

``item_type`` from master data is decoded into one of the closed ``Grant``
variants before anything is written. Grants run inside the caller's
transaction and never commit.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from conquest.db.models import ItemMaster, User, UserCard, UserItem
from conquest.errors import InvalidItemTypeError, ItemNotFoundError, UserNotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from conquest.core.id_generator import IdGenerator

logger = structlog.get_logger()


class ItemType(enum.IntEnum):
    COIN = 1
    CARD = 2
    ENHANCEMENT_MATERIAL = 3
    TIME_SHORTENING_MATERIAL = 4


@dataclass(frozen=True)
class CoinGrant:
    amount: int


@dataclass(frozen=True)
class CardGrant:
    card_id: int


@dataclass(frozen=True)
class MaterialGrant:
    item_type: ItemType
    item_id: int
    amount: int


Grant = CoinGrant | CardGrant | MaterialGrant


def decode_grant(item_type: int, item_id: int, amount: int) -> Grant:
    """Turn a raw (item_type, item_id, amount) payload into a grant variant."""
    try:
        kind = ItemType(item_type)
    except ValueError:
        raise InvalidItemTypeError from None

    if kind is ItemType.COIN:
        return CoinGrant(amount=amount)
    if kind is ItemType.CARD:
        return CardGrant(card_id=item_id)
    return MaterialGrant(item_type=kind, item_id=item_id, amount=amount)


@dataclass
class GrantResult:
    coins: list[int] = field(default_factory=list)
    cards: list[UserCard] = field(default_factory=list)
    items: list[UserItem] = field(default_factory=list)


async def get_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise UserNotFoundError
    return user


async def get_item_master(db: AsyncSession, item_id: int, item_type: int) -> ItemMaster:
    result = await db.execute(
        select(ItemMaster).where(ItemMaster.id == item_id, ItemMaster.item_type == item_type)
    )
    item = result.scalar_one_or_none()
    if item is None:
        raise ItemNotFoundError
    return item


async def grant(
    db: AsyncSession,
    ids: IdGenerator,
    user_id: int,
    item_type: int,
    item_id: int,
    amount: int,
    now: int,
) -> GrantResult:
    """Grant one resource payload to a user."""
    variant = decode_grant(item_type, item_id, amount)
    result = GrantResult()

    if isinstance(variant, CoinGrant):
        user = await get_user(db, user_id)
        user.isu_coin += variant.amount
        result.coins.append(variant.amount)
    elif isinstance(variant, CardGrant):
        result.cards.append(await create_card(db, ids, user_id, variant.card_id, now))
    else:
        result.items.append(await _add_material(db, ids, user_id, variant, now))

    await db.flush()
    logger.debug("resource_granted", user_id=user_id, item_type=item_type, item_id=item_id, amount=amount)
    return result


async def create_card(db: AsyncSession, ids: IdGenerator, user_id: int, card_id: int, now: int) -> UserCard:
    """Create a level-1 card instance from its master definition."""
    master = await get_item_master(db, card_id, ItemType.CARD)
    card = UserCard(
        id=await ids.generate(db),
        user_id=user_id,
        card_id=master.id,
        amount_per_sec=master.amount_per_sec or 0,
        level=1,
        total_exp=0,
        created_at=now,
        updated_at=now,
    )
    db.add(card)
    return card


async def _add_material(
    db: AsyncSession,
    ids: IdGenerator,
    user_id: int,
    variant: MaterialGrant,
    now: int,
) -> UserItem:
    master = await get_item_master(db, variant.item_id, variant.item_type)

    existing = await db.execute(
        select(UserItem).where(UserItem.user_id == user_id, UserItem.item_id == master.id)
    )
    user_item = existing.scalar_one_or_none()
    if user_item is None:
        user_item = UserItem(
            id=await ids.generate(db),
            user_id=user_id,
            item_type=master.item_type,
            item_id=master.id,
            amount=variant.amount,
            created_at=now,
            updated_at=now,
        )
        db.add(user_item)
    else:
        user_item.amount += variant.amount
        user_item.updated_at = now
    return user_item
