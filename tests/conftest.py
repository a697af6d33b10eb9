"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from email.utils import formatdate

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conquest.config import get_settings
from conquest.core.id_generator import IdGenerator, reset_id_generator, seed_id_generator
from conquest.database import close_db, get_engine, get_session_factory, init_db
from conquest.db.base import Base
from conquest.db.models import (
    GachaItemMaster,
    GachaMaster,
    ItemMaster,
    LoginBonusMaster,
    LoginBonusRewardMaster,
    PresentAllMaster,
    User,
    VersionMaster,
)

# 2023-11-15 07:13:20 JST
NOW = 1_700_000_000
FAR_FUTURE = 4_102_444_800
MASTER_VERSION = "1"
VIEWER_ID = "viewer-0001"


def isu_date(epoch: int) -> str:
    return formatdate(epoch, usegmt=True)


async def seed_masters(db: AsyncSession) -> None:
    """Minimal master data: one of every item type, a gacha, a bonus and a broadcast."""
    db.add(VersionMaster(id=1, status=1, master_version=MASTER_VERSION))
    db.add_all([
        ItemMaster(id=1, item_type=1, name="ISU coin"),
        ItemMaster(
            id=2, item_type=2, name="Hammer", amount_per_sec=2,
            max_level=5, max_amount_per_sec=10, base_exp_per_level=100,
        ),
        ItemMaster(
            id=3, item_type=2, name="Drill", amount_per_sec=5,
            max_level=3, max_amount_per_sec=25, base_exp_per_level=200,
        ),
        ItemMaster(id=4, item_type=3, name="Oil", gained_exp=50),
        ItemMaster(id=5, item_type=4, name="Hourglass", shortening_min=60),
    ])
    db.add(GachaMaster(id=1, name="Standard", start_at=0, end_at=FAR_FUTURE, display_order=1, created_at=0))
    db.add_all([
        GachaItemMaster(id=1, gacha_id=1, item_type=2, item_id=2, amount=1, weight=1, created_at=0),
        GachaItemMaster(id=2, gacha_id=1, item_type=2, item_id=3, amount=1, weight=2, created_at=0),
        GachaItemMaster(id=3, gacha_id=1, item_type=3, item_id=4, amount=3, weight=7, created_at=0),
    ])
    db.add(LoginBonusMaster(id=1, start_at=0, end_at=FAR_FUTURE, column_count=5, looped=False, created_at=0))
    db.add_all([
        LoginBonusRewardMaster(
            id=seq, login_bonus_id=1, reward_sequence=seq, item_type=1, item_id=1, amount=100 * seq, created_at=0,
        )
        for seq in range(1, 6)
    ])
    db.add(PresentAllMaster(
        id=1,
        registered_start_at=0,
        registered_end_at=FAR_FUTURE,
        item_type=1,
        item_id=1,
        amount=500,
        present_message="welcome",
        created_at=0,
    ))
    await db.flush()


@pytest_asyncio.fixture
async def database(tmp_path, monkeypatch) -> AsyncGenerator[str, None]:
    """A fresh SQLite database with the schema, id counter and master data."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'conquest.db'}"
    monkeypatch.setenv("CONQUEST_DATABASE_URL", url)
    monkeypatch.setenv("CONQUEST_ID_GENERATOR_ISOLATED", "false")
    get_settings.cache_clear()
    reset_id_generator()

    await init_db(url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with get_session_factory()() as session:
        await seed_id_generator(session)
        await seed_masters(session)
        await session.commit()

    yield url

    await close_db()
    reset_id_generator()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def db_session(database: str) -> AsyncGenerator[AsyncSession, None]:
    """A direct database session for service calls and assertions."""
    async with get_session_factory()() as session:
        yield session


@pytest.fixture
def ids() -> IdGenerator:
    """In-session id generator, as used against SQLite."""
    return IdGenerator()


@pytest_asyncio.fixture
async def client(database: str) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app (Redis is not initialized, so no rate limiting)."""
    from conquest.main import create_app

    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_headers() -> Callable[..., dict[str, str]]:
    """Build the gameplay headers for a request at a given time."""

    def _make(
        session_id: str | None = None,
        now: int = NOW,
        master_version: str | None = MASTER_VERSION,
    ) -> dict[str, str]:
        headers = {"x-isu-date": isu_date(now)}
        if master_version is not None:
            headers["x-master-version"] = master_version
        if session_id is not None:
            headers["x-session"] = session_id
        return headers

    return _make


@pytest_asyncio.fixture
async def registered_user(client: AsyncClient, make_headers) -> dict:
    """Register a user through the API. Returns ids and the session."""
    response = await client.post(
        "/user",
        json={"viewerId": VIEWER_ID, "platformType": 1},
        headers=make_headers(),
    )
    assert response.status_code == 200, response.text
    data = response.json()
    return {
        "user_id": data["userId"],
        "viewer_id": data["viewerId"],
        "session_id": data["sessionId"],
        "body": data,
    }


@pytest_asyncio.fixture
async def plain_user(db_session: AsyncSession, ids: IdGenerator):
    """A bare user row: no device, cards or login processing."""
    user = User(
        id=await ids.generate(db_session),
        isu_coin=0,
        last_getreward_at=NOW,
        last_activated_at=NOW,
        registered_at=NOW,
        created_at=NOW,
        updated_at=NOW,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def game_user(db_session: AsyncSession, ids: IdGenerator):
    """A user registered through the service layer (device, starter deck, first login)."""
    from conquest.users.service import create_user

    registration = await create_user(db_session, ids, VIEWER_ID, 1, NOW, 2, 86400)
    await db_session.commit()
    return registration
