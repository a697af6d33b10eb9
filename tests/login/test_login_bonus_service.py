"""Login bonus progression and login processing tests."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from sqlalchemy import select

from conquest.db.models import LoginBonusMaster, UserLoginBonus, UserPresent
from conquest.errors import LoginBonusRewardNotFoundError
from conquest.login.bonus_service import advance_sequence, obtain_login_bonus
from conquest.login.login_service import login_process

NOW = 1_700_000_000
DAY = 86_400


async def _login_days(db, ids, user_id: int, days: int) -> list[tuple[UserLoginBonus, int]]:
    """Log in on consecutive days. Returns (progress row, sequence reached that day)."""
    days_granted = []
    for i in range(days):
        [progress] = await obtain_login_bonus(db, ids, user_id, NOW + i * DAY)
        days_granted.append((progress, progress.last_reward_sequence))
    return days_granted


class TestAdvanceSequence:
    def test_advances(self):
        progress = SimpleNamespace(last_reward_sequence=2, loop_count=1)
        assert advance_sequence(progress, SimpleNamespace(column_count=5, looped=False))
        assert progress.last_reward_sequence == 3

    def test_exhausted(self):
        progress = SimpleNamespace(last_reward_sequence=5, loop_count=1)
        assert not advance_sequence(progress, SimpleNamespace(column_count=5, looped=False))
        assert progress.last_reward_sequence == 5

    def test_loops(self):
        progress = SimpleNamespace(last_reward_sequence=5, loop_count=1)
        assert advance_sequence(progress, SimpleNamespace(column_count=5, looped=True))
        assert (progress.last_reward_sequence, progress.loop_count) == (1, 2)


class TestObtainLoginBonus:
    @pytest.mark.asyncio
    async def test_sequence_and_rewards(self, db_session, ids, plain_user):
        granted = await _login_days(db_session, ids, plain_user.id, 5)

        assert [sequence for _, sequence in granted] == [1, 2, 3, 4, 5]
        # one progress row per bonus, advanced in place
        assert len({id(progress) for progress, _ in granted}) == 1
        assert plain_user.isu_coin == 100 + 200 + 300 + 400 + 500

    @pytest.mark.asyncio
    async def test_non_looped_bonus_caps(self, db_session, ids, plain_user):
        await _login_days(db_session, ids, plain_user.id, 5)

        sixth = await obtain_login_bonus(db_session, ids, plain_user.id, NOW + 5 * DAY)

        assert sixth == []
        assert plain_user.isu_coin == 1500
        progress = (await db_session.execute(select(UserLoginBonus))).scalar_one()
        assert progress.last_reward_sequence == 5
        assert progress.loop_count == 1

    @pytest.mark.asyncio
    async def test_looped_bonus_wraps(self, db_session, ids, plain_user):
        bonus = await db_session.get(LoginBonusMaster, 1)
        bonus.looped = True
        await db_session.flush()
        await _login_days(db_session, ids, plain_user.id, 5)

        [progress] = await obtain_login_bonus(db_session, ids, plain_user.id, NOW + 5 * DAY)

        assert progress.last_reward_sequence == 1
        assert progress.loop_count == 2
        assert plain_user.isu_coin == 1500 + 100

    @pytest.mark.asyncio
    async def test_inactive_bonus_skipped(self, db_session, ids, plain_user):
        db_session.add(LoginBonusMaster(id=2, start_at=NOW + DAY, end_at=NOW + 2 * DAY, column_count=1, created_at=0))
        await db_session.flush()

        granted = await obtain_login_bonus(db_session, ids, plain_user.id, NOW)

        assert [g.login_bonus_id for g in granted] == [1]

    @pytest.mark.asyncio
    async def test_missing_reward_row(self, db_session, ids, plain_user):
        db_session.add(LoginBonusMaster(id=2, start_at=0, end_at=NOW + DAY, column_count=3, created_at=0))
        await db_session.flush()

        with pytest.raises(LoginBonusRewardNotFoundError):
            await obtain_login_bonus(db_session, ids, plain_user.id, NOW)


class TestLoginProcess:
    @pytest.mark.asyncio
    async def test_bonus_presents_and_stamp(self, db_session, ids, plain_user):
        later = NOW + DAY

        user, bonuses, presents = await login_process(db_session, ids, plain_user.id, later)

        assert user.isu_coin == 100
        assert user.last_activated_at == later
        assert user.updated_at == later
        assert [b.last_reward_sequence for b in bonuses] == [1]
        assert [p.present_message for p in presents] == ["welcome"]
        stored = (await db_session.execute(select(UserPresent))).scalars().all()
        assert len(stored) == 1
