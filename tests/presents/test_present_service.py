"""Present distribution and receipt tests."""

from __future__ import annotations

import pytest
from sqlalchemy import select, update

from conquest.db.models import PresentAllMaster, UserPresent, UserPresentAllReceivedHistory
from conquest.errors import ConsistencyError, UnprocessableError, ValidationError
from conquest.presents import present_service
from conquest.presents.present_service import create_present, list_presents, obtain_present, receive_present

NOW = 1_700_000_000


class TestObtainPresent:
    @pytest.mark.asyncio
    async def test_idempotent_across_logins(self, db_session, ids, plain_user):
        first = await obtain_present(db_session, ids, plain_user.id, NOW)
        second = await obtain_present(db_session, ids, plain_user.id, NOW + 60)

        assert len(first) == 1
        assert second == []
        history = (await db_session.execute(select(UserPresentAllReceivedHistory))).scalars().all()
        assert [(h.user_id, h.present_all_id) for h in history] == [(plain_user.id, 1)]

    @pytest.mark.asyncio
    async def test_window_is_respected(self, db_session, ids, plain_user):
        db_session.add(PresentAllMaster(
            id=2, registered_start_at=NOW + 10, registered_end_at=NOW + 20,
            item_type=1, item_id=1, amount=1, present_message="later", created_at=0,
        ))
        await db_session.flush()

        delivered = await obtain_present(db_session, ids, plain_user.id, NOW)
        assert [p.present_message for p in delivered] == ["welcome"]

        delivered = await obtain_present(db_session, ids, plain_user.id, NOW + 15)
        assert [p.present_message for p in delivered] == ["later"]


class TestListPresents:
    @pytest.mark.asyncio
    async def test_pagination(self, db_session, ids, plain_user):
        for offset in range(3):
            await create_present(db_session, ids, plain_user.id, 1, 1, 10, f"p{offset}", NOW + offset)
        await db_session.flush()

        page1, next1 = await list_presents(db_session, plain_user.id, 1, 2)
        page2, next2 = await list_presents(db_session, plain_user.id, 2, 2)

        assert [p.present_message for p in page1] == ["p2", "p1"]
        assert next1 is True
        assert [p.present_message for p in page2] == ["p0"]
        assert next2 is False

    @pytest.mark.asyncio
    async def test_page_must_be_positive(self, db_session, plain_user):
        with pytest.raises(ValidationError):
            await list_presents(db_session, plain_user.id, 0, 100)


class TestReceivePresent:
    @pytest.mark.asyncio
    async def test_grants_and_tombstones(self, db_session, ids, plain_user):
        present = await create_present(db_session, ids, plain_user.id, 1, 1, 250, "gift", NOW)
        await db_session.flush()

        received = await receive_present(db_session, ids, plain_user.id, [present.id], NOW + 5)

        assert [p.id for p in received] == [present.id]
        assert received[0].deleted_at == NOW + 5
        assert plain_user.isu_coin == 250

    @pytest.mark.asyncio
    async def test_unknown_ids_are_a_no_op(self, db_session, ids, plain_user):
        assert await receive_present(db_session, ids, plain_user.id, [123456789], NOW) == []
        assert plain_user.isu_coin == 0

    @pytest.mark.asyncio
    async def test_second_receipt_is_a_no_op(self, db_session, ids, plain_user):
        present = await create_present(db_session, ids, plain_user.id, 1, 1, 250, "gift", NOW)
        await db_session.flush()

        await receive_present(db_session, ids, plain_user.id, [present.id], NOW)
        assert await receive_present(db_session, ids, plain_user.id, [present.id], NOW) == []
        assert plain_user.isu_coin == 250

    @pytest.mark.asyncio
    async def test_other_users_presents_ignored(self, db_session, ids, plain_user):
        present = await create_present(db_session, ids, plain_user.id + 1, 1, 1, 250, "gift", NOW)
        await db_session.flush()

        assert await receive_present(db_session, ids, plain_user.id, [present.id], NOW) == []

    @pytest.mark.asyncio
    async def test_empty_list_rejected(self, db_session, ids, plain_user):
        with pytest.raises(UnprocessableError) as exc_info:
            await receive_present(db_session, ids, plain_user.id, [], NOW)
        assert exc_info.value.status_code == 422

    @pytest.mark.asyncio
    async def test_concurrent_receipt_detected(self, db_session, ids, plain_user, monkeypatch):
        first = await create_present(db_session, ids, plain_user.id, 1, 1, 10, "a", NOW)
        second = await create_present(db_session, ids, plain_user.id, 1, 1, 10, "b", NOW)
        await db_session.flush()
        real_grant = present_service.grant

        async def grant_then_race(db, *args):
            result = await real_grant(db, *args)
            # another request receives the second present in the meantime
            await db.execute(
                update(UserPresent)
                .where(UserPresent.id == second.id)
                .values(deleted_at=NOW)
                .execution_options(synchronize_session=False)
            )
            return result

        monkeypatch.setattr(present_service, "grant", grant_then_race)

        with pytest.raises(ConsistencyError):
            await receive_present(db_session, ids, plain_user.id, [first.id, second.id], NOW)
