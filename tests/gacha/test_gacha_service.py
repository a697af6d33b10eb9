"""Gacha listing and draw tests."""

from __future__ import annotations

import random

import pytest
from sqlalchemy import select

from conquest.db.models import GachaMaster, UserOneTimeToken
from conquest.errors import (
    ConflictError,
    GachaItemNotFoundError,
    GachaNotFoundError,
    UserDeviceNotFoundError,
    ValidationError,
)
from conquest.gacha.gacha_service import draw_gacha, list_gacha

NOW = 1_700_000_000
VIEWER_ID = "viewer-0001"


class TestListGacha:
    @pytest.mark.asyncio
    async def test_lists_pool_and_issues_token(self, db_session, ids, plain_user):
        offers, token = await list_gacha(db_session, ids, plain_user.id, NOW, 600)

        assert [o.gacha.id for o in offers] == [1]
        assert [i.weight for i in offers[0].items] == [1, 2, 7]
        stored = (await db_session.execute(select(UserOneTimeToken))).scalar_one()
        assert stored.token == token
        assert stored.token_type == 1
        assert stored.expired_at == NOW + 600

    @pytest.mark.asyncio
    async def test_no_active_gacha(self, db_session, ids, plain_user):
        offers, token = await list_gacha(db_session, ids, plain_user.id, 10**12, 600)
        assert offers == []
        assert token == ""

    @pytest.mark.asyncio
    async def test_empty_pool(self, db_session, ids, plain_user):
        db_session.add(GachaMaster(id=2, name="Empty", start_at=0, end_at=NOW + 1, display_order=2, created_at=0))
        await db_session.flush()

        with pytest.raises(GachaItemNotFoundError):
            await list_gacha(db_session, ids, plain_user.id, NOW, 600)


class TestDrawGacha:
    @pytest.mark.asyncio
    async def test_draw_ten(self, db_session, ids, game_user):
        user = game_user.user
        user.isu_coin = 12_000
        await db_session.flush()

        presents = await draw_gacha(
            db_session, ids, user.id, 1, 10, VIEWER_ID, NOW, 1000, rng=random.Random(3)
        )

        assert len(presents) == 10
        assert {p.present_message for p in presents} == {"Standardの付与アイテムです"}
        assert {(p.item_type, p.item_id) for p in presents} <= {(2, 2), (2, 3), (3, 4)}
        assert user.isu_coin == 2_000

    @pytest.mark.asyncio
    async def test_not_enough_coin(self, db_session, ids, game_user):
        game_user.user.isu_coin = 999
        await db_session.flush()

        with pytest.raises(ConflictError) as exc_info:
            await draw_gacha(db_session, ids, game_user.user.id, 1, 1, VIEWER_ID, NOW, 1000)
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    @pytest.mark.parametrize("times", [0, 2, 11])
    async def test_invalid_count(self, db_session, ids, game_user, times):
        with pytest.raises(ValidationError):
            await draw_gacha(db_session, ids, game_user.user.id, 1, times, VIEWER_ID, NOW, 1000)

    @pytest.mark.asyncio
    async def test_unknown_gacha(self, db_session, ids, game_user):
        game_user.user.isu_coin = 1000
        await db_session.flush()

        with pytest.raises(GachaNotFoundError):
            await draw_gacha(db_session, ids, game_user.user.id, 99, 1, VIEWER_ID, NOW, 1000)

    @pytest.mark.asyncio
    async def test_viewer_must_match(self, db_session, ids, game_user):
        with pytest.raises(UserDeviceNotFoundError):
            await draw_gacha(db_session, ids, game_user.user.id, 1, 1, "someone-else", NOW, 1000)
