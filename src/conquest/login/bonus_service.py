"""Daily login bonus progression."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from conquest.db.models import LoginBonusMaster, LoginBonusRewardMaster, UserLoginBonus
from conquest.errors import LoginBonusRewardNotFoundError
from conquest.resources.grant_service import grant

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from conquest.core.id_generator import IdGenerator

logger = structlog.get_logger()


def advance_sequence(progress: UserLoginBonus, bonus: LoginBonusMaster) -> bool:
    """Move progress to the next reward. Returns False when the bonus is exhausted.

    A bonus that reached its last column wraps back to 1 (and counts a loop)
    only when it is marked looped.
    """
    if progress.last_reward_sequence < bonus.column_count:
        progress.last_reward_sequence += 1
        return True
    if bonus.looped:
        progress.loop_count += 1
        progress.last_reward_sequence = 1
        return True
    return False


async def obtain_login_bonus(
    db: AsyncSession,
    ids: IdGenerator,
    user_id: int,
    now: int,
) -> list[UserLoginBonus]:
    """Advance every login bonus active at ``now`` and grant its reward.

    Returns the progress rows that actually granted something.
    """
    bonuses = await db.execute(
        select(LoginBonusMaster)
        .where(LoginBonusMaster.start_at <= now, LoginBonusMaster.end_at >= now)
        .order_by(LoginBonusMaster.id)
    )

    granted: list[UserLoginBonus] = []
    for bonus in bonuses.scalars().all():
        existing = await db.execute(
            select(UserLoginBonus).where(
                UserLoginBonus.user_id == user_id,
                UserLoginBonus.login_bonus_id == bonus.id,
            )
        )
        progress = existing.scalar_one_or_none()
        is_new = progress is None
        if progress is None:
            progress = UserLoginBonus(
                id=await ids.generate(db),
                user_id=user_id,
                login_bonus_id=bonus.id,
                last_reward_sequence=0,
                loop_count=1,
                created_at=now,
                updated_at=now,
            )

        if not advance_sequence(progress, bonus):
            continue
        progress.updated_at = now

        reward_result = await db.execute(
            select(LoginBonusRewardMaster).where(
                LoginBonusRewardMaster.login_bonus_id == bonus.id,
                LoginBonusRewardMaster.reward_sequence == progress.last_reward_sequence,
            )
        )
        reward = reward_result.scalar_one_or_none()
        if reward is None:
            logger.error(
                "login_bonus_reward_missing",
                login_bonus_id=bonus.id,
                reward_sequence=progress.last_reward_sequence,
            )
            raise LoginBonusRewardNotFoundError

        await grant(db, ids, user_id, reward.item_type, reward.item_id, reward.amount, now)

        if is_new:
            db.add(progress)
        await db.flush()
        granted.append(progress)

    return granted
