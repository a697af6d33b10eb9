"""Global monotonic id allocation backed by a single counter row."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError

from conquest.db.models import IdGeneratorRow
from conquest.errors import IdGenerationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = structlog.get_logger()

COUNTER_ROW_ID = 1

# deadlock_detected, serialization_failure, lock_not_available
_RETRYABLE_SQLSTATES = frozenset({"40P01", "40001", "55P03"})
# ER_LOCK_DEADLOCK, ER_LOCK_WAIT_TIMEOUT
_RETRYABLE_MYSQL_ERRNOS = frozenset({1213, 1205})


def is_retryable(exc: DBAPIError) -> bool:
    """Return True for lock-wait / deadlock conditions worth retrying."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _RETRYABLE_SQLSTATES:
        return True
    args = getattr(orig, "args", ())
    if args and args[0] in _RETRYABLE_MYSQL_ERRNOS:
        return True
    return "database is locked" in str(orig)


class IdGenerator:
    """Atomic increment-and-fetch over the ``id_generator`` row.

    With a session factory, every allocation runs in its own short transaction
    so the counter row is never locked for the lifetime of a request. Without
    one, allocation happens inside the caller's session.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        max_attempts: int = 100,
    ) -> None:
        self._session_factory = session_factory
        self.max_attempts = max_attempts

    async def generate(self, db: AsyncSession) -> int:
        last_error: DBAPIError | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                if self._session_factory is None:
                    return await _increment(db)
                async with self._session_factory() as own, own.begin():
                    return await _increment(own)
            except DBAPIError as e:
                if not is_retryable(e):
                    raise
                last_error = e
                logger.debug("id_generation_retry", attempt=attempt, error=str(e.orig))

        logger.error("id_generation_failed", attempts=self.max_attempts, error=str(last_error))
        msg = f"failed to generate id: {last_error}"
        raise IdGenerationError(msg)


async def _increment(db: AsyncSession) -> int:
    stmt = (
        update(IdGeneratorRow)
        .where(IdGeneratorRow.id == COUNTER_ROW_ID)
        .values(last_id=IdGeneratorRow.last_id + 1)
        .returning(IdGeneratorRow.last_id)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    return result.scalar_one()


async def seed_id_generator(db: AsyncSession, start: int = 0) -> None:
    """Create the counter row if it does not exist yet (idempotent)."""
    existing = await db.execute(select(IdGeneratorRow).where(IdGeneratorRow.id == COUNTER_ROW_ID))
    if existing.scalar_one_or_none() is None:
        db.add(IdGeneratorRow(id=COUNTER_ROW_ID, last_id=start))
        await db.flush()


_generator: IdGenerator | None = None


def get_id_generator() -> IdGenerator:
    """Get the process-wide id generator (FastAPI dependency)."""
    global _generator  # noqa: PLW0603
    if _generator is None:
        from conquest.config import get_settings
        from conquest.database import get_session_factory

        settings = get_settings()
        factory = get_session_factory() if settings.id_generator_isolated else None
        _generator = IdGenerator(factory, max_attempts=settings.id_generator_max_attempts)
    return _generator


def reset_id_generator() -> None:
    """Forget the cached generator (after the database is re-initialized)."""
    global _generator  # noqa: PLW0603
    _generator = None
