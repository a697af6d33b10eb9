"""Login processing: daily bonus, broadcast presents and activity stamp."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from conquest.core.clock import jst_date
from conquest.login.bonus_service import obtain_login_bonus
from conquest.presents.present_service import obtain_present
from conquest.resources.grant_service import get_user

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from conquest.core.id_generator import IdGenerator
    from conquest.db.models import User, UserLoginBonus, UserPresent

logger = structlog.get_logger()


def is_complete_today_login(last_activated_at: int, now: int) -> bool:
    """True when both instants fall on the same calendar day in UTC+9."""
    return jst_date(last_activated_at).date() == jst_date(now).date()


async def login_process(
    db: AsyncSession,
    ids: IdGenerator,
    user_id: int,
    now: int,
) -> tuple[User, list[UserLoginBonus], list[UserPresent]]:
    """Run the once-per-day login side effects for a user.

    Does not commit. Returns the refreshed user with the login bonuses that
    granted a reward and the broadcast presents that were delivered.
    """
    user = await get_user(db, user_id)

    login_bonuses = await obtain_login_bonus(db, ids, user_id, now)
    presents = await obtain_present(db, ids, user_id, now)

    # balance after bonus payouts
    await db.refresh(user, attribute_names=["isu_coin"])

    user.updated_at = now
    user.last_activated_at = now
    await db.flush()

    logger.info(
        "login_processed",
        user_id=user_id,
        login_bonuses=len(login_bonuses),
        presents=len(presents),
    )
    return user, login_bonuses, presents
