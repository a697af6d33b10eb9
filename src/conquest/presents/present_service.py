"""Receive box: broadcast fan-out, listing and receipt of presents."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select, update

from conquest.db.models import PresentAllMaster, UserPresent, UserPresentAllReceivedHistory
from conquest.errors import ConsistencyError, UnprocessableError, ValidationError
from conquest.resources.grant_service import grant

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from conquest.core.id_generator import IdGenerator

logger = structlog.get_logger()


async def create_present(
    db: AsyncSession,
    ids: IdGenerator,
    user_id: int,
    item_type: int,
    item_id: int,
    amount: int,
    message: str | None,
    now: int,
) -> UserPresent:
    """Put a payload into the user's receive box."""
    present = UserPresent(
        id=await ids.generate(db),
        user_id=user_id,
        sent_at=now,
        item_type=item_type,
        item_id=item_id,
        amount=amount,
        present_message=message,
        created_at=now,
        updated_at=now,
    )
    db.add(present)
    return present


async def obtain_present(
    db: AsyncSession,
    ids: IdGenerator,
    user_id: int,
    now: int,
) -> list[UserPresent]:
    """Deliver every broadcast present active at ``now`` that the user has not had yet."""
    masters = await db.execute(
        select(PresentAllMaster)
        .where(
            PresentAllMaster.registered_start_at <= now,
            PresentAllMaster.registered_end_at >= now,
        )
        .order_by(PresentAllMaster.id)
    )

    delivered: list[UserPresent] = []
    for master in masters.scalars().all():
        received = await db.execute(
            select(UserPresentAllReceivedHistory.id).where(
                UserPresentAllReceivedHistory.user_id == user_id,
                UserPresentAllReceivedHistory.present_all_id == master.id,
                UserPresentAllReceivedHistory.deleted_at.is_(None),
            )
        )
        if received.first() is not None:
            continue

        present = await create_present(
            db, ids, user_id, master.item_type, master.item_id, master.amount, master.present_message, now
        )
        db.add(UserPresentAllReceivedHistory(
            id=await ids.generate(db),
            user_id=user_id,
            present_all_id=master.id,
            received_at=now,
            created_at=now,
            updated_at=now,
        ))
        await db.flush()
        delivered.append(present)

    if delivered:
        logger.info("broadcast_presents_delivered", user_id=user_id, count=len(delivered))
    return delivered


async def list_presents(
    db: AsyncSession,
    user_id: int,
    page: int,
    per_page: int,
) -> tuple[list[UserPresent], bool]:
    """One page of unreceived presents, newest first. Returns (presents, is_next)."""
    if page < 1:
        raise ValidationError("index number is more than 1")

    offset = per_page * (page - 1)
    live = (UserPresent.user_id == user_id, UserPresent.deleted_at.is_(None))

    result = await db.execute(
        select(UserPresent)
        .where(*live)
        .order_by(UserPresent.created_at.desc(), UserPresent.id)
        .limit(per_page)
        .offset(offset)
    )
    presents = list(result.scalars().all())

    count_result = await db.execute(select(func.count()).select_from(UserPresent).where(*live))
    total = count_result.scalar_one()
    return presents, total > offset + per_page


async def receive_present(
    db: AsyncSession,
    ids: IdGenerator,
    user_id: int,
    present_ids: list[int],
    now: int,
) -> list[UserPresent]:
    """Open presents and apply their payloads.

    Unknown or already-received ids are ignored. A present that disappears
    between the read and its tombstone write means another request received it
    concurrently; that aborts the whole receipt.
    """
    if not present_ids:
        raise UnprocessableError("presentIds is empty")

    result = await db.execute(
        select(UserPresent)
        .where(
            UserPresent.id.in_(present_ids),
            UserPresent.user_id == user_id,
            UserPresent.deleted_at.is_(None),
        )
        .order_by(UserPresent.id)
    )
    presents = list(result.scalars().all())
    if not presents:
        return []

    for present in presents:
        tombstone = await db.execute(
            update(UserPresent)
            .where(UserPresent.id == present.id, UserPresent.deleted_at.is_(None))
            .values(deleted_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if tombstone.rowcount != 1:
            logger.error("present_already_received", user_id=user_id, present_id=present.id)
            raise ConsistencyError("received present")
        present.deleted_at = now
        present.updated_at = now

        await grant(db, ids, user_id, present.item_type, present.item_id, present.amount, now)

    logger.info("presents_received", user_id=user_id, count=len(presents))
    return presents
