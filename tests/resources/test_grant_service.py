"""Resource grant engine tests."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from conquest.db.models import UserCard, UserItem
from conquest.errors import InvalidItemTypeError, ItemNotFoundError, UserNotFoundError
from conquest.resources.grant_service import grant

NOW = 1_700_000_000


class TestCoinGrant:
    @pytest.mark.asyncio
    async def test_adds_to_balance(self, db_session, ids, plain_user):
        await grant(db_session, ids, plain_user.id, 1, 1, 300, NOW)
        await grant(db_session, ids, plain_user.id, 1, 1, 200, NOW)
        assert plain_user.isu_coin == 500

    @pytest.mark.asyncio
    async def test_missing_user(self, db_session, ids):
        with pytest.raises(UserNotFoundError):
            await grant(db_session, ids, 424242, 1, 1, 300, NOW)


class TestCardGrant:
    @pytest.mark.asyncio
    async def test_creates_level_one_card(self, db_session, ids, plain_user):
        result = await grant(db_session, ids, plain_user.id, 2, 3, 1, NOW)

        [card] = result.cards
        assert card.card_id == 3
        assert card.level == 1
        assert card.total_exp == 0
        assert card.amount_per_sec == 5

    @pytest.mark.asyncio
    async def test_item_type_must_match_master(self, db_session, ids, plain_user):
        # item 4 exists but is a material
        with pytest.raises(ItemNotFoundError):
            await grant(db_session, ids, plain_user.id, 2, 4, 1, NOW)


class TestMaterialGrant:
    @pytest.mark.asyncio
    async def test_upsert_increments(self, db_session, ids, plain_user):
        await grant(db_session, ids, plain_user.id, 3, 4, 2, NOW)
        result = await grant(db_session, ids, plain_user.id, 3, 4, 5, NOW + 1)

        [item] = result.items
        assert item.amount == 7
        assert item.updated_at == NOW + 1
        count = await db_session.execute(select(func.count()).select_from(UserItem).where(UserItem.user_id == plain_user.id))
        assert count.scalar_one() == 1

    @pytest.mark.asyncio
    async def test_time_shortening_material(self, db_session, ids, plain_user):
        result = await grant(db_session, ids, plain_user.id, 4, 5, 1, NOW)
        assert result.items[0].item_type == 4

    @pytest.mark.asyncio
    async def test_unknown_item(self, db_session, ids, plain_user):
        with pytest.raises(ItemNotFoundError):
            await grant(db_session, ids, plain_user.id, 3, 999, 1, NOW)


class TestInvalidType:
    @pytest.mark.asyncio
    async def test_no_partial_effect(self, db_session, ids, plain_user):
        with pytest.raises(InvalidItemTypeError):
            await grant(db_session, ids, plain_user.id, 7, 1, 100, NOW)

        cards = await db_session.execute(select(func.count()).select_from(UserCard))
        items = await db_session.execute(select(func.count()).select_from(UserItem))
        assert cards.scalar_one() == 0
        assert items.scalar_one() == 0
        assert plain_user.isu_coin == 0
