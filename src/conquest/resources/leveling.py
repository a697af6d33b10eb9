"""Card leveling: convert enhancement materials into experience and levels.

The level-up threshold for level ``L`` is ``base_exp_per_level * 1.2 ** (L - 1)``
evaluated in floating point and truncated to an integer *before* it is
compared with the card's integer total experience. Comparing in floating
point instead moves some boundaries by one exp point, so keep this order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from conquest.db.models import ItemMaster, UserCard, UserItem
from conquest.errors import ConflictError, NotFoundError, ValidationError
from conquest.resources.grant_service import ItemType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

LEVEL_UP_RATE = 1.2


@dataclass
class CardProgress:
    level: int
    total_exp: int
    amount_per_sec: int


@dataclass(frozen=True)
class CardSpec:
    """Master-side constants of a card."""

    base_amount_per_sec: int
    max_amount_per_sec: int
    max_level: int
    base_exp_per_level: int

    @classmethod
    def from_master(cls, master: ItemMaster) -> CardSpec:
        return cls(
            base_amount_per_sec=master.amount_per_sec or 0,
            max_amount_per_sec=master.max_amount_per_sec or 0,
            max_level=master.max_level or 1,
            base_exp_per_level=master.base_exp_per_level or 0,
        )


def next_level_threshold(base_exp_per_level: int, level: int) -> int:
    return int(base_exp_per_level * LEVEL_UP_RATE ** (level - 1))


def amount_per_sec_step(spec: CardSpec) -> int:
    """Productivity gained per level (integer division)."""
    return (spec.max_amount_per_sec - spec.base_amount_per_sec) // (spec.max_level - 1)


def apply_exp(progress: CardProgress, spec: CardSpec, gained_exp: int) -> CardProgress:
    """Add experience and level up as far as it reaches, capped at max_level."""
    level = progress.level
    total_exp = progress.total_exp + gained_exp
    amount_per_sec = progress.amount_per_sec

    while level < spec.max_level and total_exp >= next_level_threshold(spec.base_exp_per_level, level):
        level += 1
        amount_per_sec += amount_per_sec_step(spec)

    return CardProgress(level=level, total_exp=total_exp, amount_per_sec=amount_per_sec)


@dataclass
class ConsumedItem:
    user_item: UserItem
    gained_exp: int
    amount: int


async def add_exp_to_card(
    db: AsyncSession,
    user_id: int,
    user_card_id: int,
    consume: list[tuple[int, int]],
    now: int,
) -> tuple[UserCard, list[UserItem]]:
    """Consume enhancement materials into a card.

    ``consume`` is a list of (user_item_id, amount). Repeated ids are summed
    before the stock check. Returns the updated card and the consumed item rows.
    """
    result = await db.execute(
        select(UserCard, ItemMaster)
        .join(ItemMaster, UserCard.card_id == ItemMaster.id)
        .where(UserCard.id == user_card_id, UserCard.user_id == user_id)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("not found user card")
    card, master = row.UserCard, row.ItemMaster
    spec = CardSpec.from_master(master)

    if card.level >= spec.max_level:
        raise ValidationError("target card is max level")

    requested: dict[int, int] = {}
    for item_id, amount in consume:
        requested[item_id] = requested.get(item_id, 0) + amount

    consumed: list[ConsumedItem] = []
    for item_id, amount in requested.items():
        item_result = await db.execute(
            select(UserItem, ItemMaster.gained_exp)
            .join(ItemMaster, UserItem.item_id == ItemMaster.id)
            .where(
                UserItem.id == item_id,
                UserItem.user_id == user_id,
                UserItem.item_type == ItemType.ENHANCEMENT_MATERIAL,
            )
        )
        item_row = item_result.one_or_none()
        if item_row is None:
            raise NotFoundError("not found user item")
        if amount > item_row.UserItem.amount:
            raise ConflictError("item not enough")
        consumed.append(ConsumedItem(user_item=item_row.UserItem, gained_exp=item_row.gained_exp or 0, amount=amount))

    gained = sum(c.gained_exp * c.amount for c in consumed)
    before = CardProgress(level=card.level, total_exp=card.total_exp, amount_per_sec=card.amount_per_sec)
    after = apply_exp(before, spec, gained)

    card.level = after.level
    card.total_exp = after.total_exp
    card.amount_per_sec = after.amount_per_sec
    card.updated_at = now

    for c in consumed:
        c.user_item.amount -= c.amount
        c.user_item.updated_at = now

    await db.flush()
    logger.info(
        "card_exp_added",
        user_id=user_id,
        user_card_id=card.id,
        gained_exp=gained,
        level_before=before.level,
        level_after=after.level,
    )
    return card, [c.user_item for c in consumed]
