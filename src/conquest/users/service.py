"""User lifecycle and per-user game state: registration, login, deck and rewards."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select, update

from conquest.auth.pipeline import check_viewer_id, is_banned
from conquest.auth.sessions import TokenType, issue_one_time_token, rotate_session
from conquest.db.models import User, UserCard, UserDeck, UserDevice, UserItem
from conquest.errors import ForbiddenError, NotFoundError, ValidationError
from conquest.login.login_service import is_complete_today_login, login_process
from conquest.resources.grant_service import create_card, get_user

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from conquest.core.id_generator import IdGenerator
    from conquest.db.models import UserLoginBonus, UserPresent, UserSession

logger = structlog.get_logger()

DECK_CARD_NUMBER = 3
PLATFORM_TYPES = range(1, 4)


@dataclass
class Registration:
    user: User
    device: UserDevice
    cards: list[UserCard]
    deck: UserDeck
    session: UserSession
    login_bonuses: list[UserLoginBonus]
    presents: list[UserPresent]


@dataclass
class LoginResult:
    user: User
    session: UserSession
    login_bonuses: list[UserLoginBonus] | None = None
    presents: list[UserPresent] | None = None


@dataclass
class Inventory:
    user: User
    items: list[UserItem]
    cards: list[UserCard]
    one_time_token: str


@dataclass
class Home:
    user: User
    deck: UserDeck | None
    total_amount_per_sec: int
    past_time: int
    cards: list[UserCard] = field(default_factory=list)


async def create_user(
    db: AsyncSession,
    ids: IdGenerator,
    viewer_id: str,
    platform_type: int,
    now: int,
    initial_card_id: int,
    session_ttl_seconds: int,
) -> Registration:
    """Register a user with its device, starter deck and first login."""
    if not viewer_id or platform_type not in PLATFORM_TYPES:
        raise ValidationError

    user = User(
        id=await ids.generate(db),
        isu_coin=0,
        last_getreward_at=now,
        last_activated_at=now,
        registered_at=now,
        created_at=now,
        updated_at=now,
    )
    db.add(user)

    device = UserDevice(
        id=await ids.generate(db),
        user_id=user.id,
        platform_id=viewer_id,
        platform_type=platform_type,
        created_at=now,
        updated_at=now,
    )
    db.add(device)
    await db.flush()

    cards = [await create_card(db, ids, user.id, initial_card_id, now) for _ in range(DECK_CARD_NUMBER)]

    deck = UserDeck(
        id=await ids.generate(db),
        user_id=user.id,
        user_card_id_1=cards[0].id,
        user_card_id_2=cards[1].id,
        user_card_id_3=cards[2].id,
        created_at=now,
        updated_at=now,
    )
    db.add(deck)
    await db.flush()

    user, login_bonuses, presents = await login_process(db, ids, user.id, now)
    session = await rotate_session(db, ids, user.id, now, session_ttl_seconds)

    logger.info("user_created", user_id=user.id, platform_type=platform_type)
    return Registration(
        user=user,
        device=device,
        cards=cards,
        deck=deck,
        session=session,
        login_bonuses=login_bonuses,
        presents=presents,
    )


async def login(
    db: AsyncSession,
    ids: IdGenerator,
    user_id: int,
    viewer_id: str,
    now: int,
    session_ttl_seconds: int,
) -> LoginResult:
    """Issue a new session; run login processing once per JST day."""
    user = await get_user(db, user_id)
    if await is_banned(db, user.id):
        raise ForbiddenError
    await check_viewer_id(db, user.id, viewer_id)

    session = await rotate_session(db, ids, user.id, now, session_ttl_seconds)

    if is_complete_today_login(user.last_activated_at, now):
        user.updated_at = now
        user.last_activated_at = now
        await db.flush()
        return LoginResult(user=user, session=session)

    user, login_bonuses, presents = await login_process(db, ids, user.id, now)
    return LoginResult(user=user, session=session, login_bonuses=login_bonuses, presents=presents)


async def list_items(
    db: AsyncSession,
    ids: IdGenerator,
    user_id: int,
    now: int,
    token_ttl_seconds: int,
) -> Inventory:
    """Owned items and cards plus a fresh card-leveling token."""
    user = await get_user(db, user_id)

    items = await db.execute(select(UserItem).where(UserItem.user_id == user_id).order_by(UserItem.id))
    cards = await db.execute(select(UserCard).where(UserCard.user_id == user_id).order_by(UserCard.id))
    token = await issue_one_time_token(db, ids, user_id, TokenType.CARD_LEVELING, now, token_ttl_seconds)

    return Inventory(
        user=user,
        items=list(items.scalars().all()),
        cards=list(cards.scalars().all()),
        one_time_token=token.token,
    )


async def get_active_deck(db: AsyncSession, user_id: int) -> UserDeck | None:
    result = await db.execute(
        select(UserDeck).where(UserDeck.user_id == user_id, UserDeck.deleted_at.is_(None))
    )
    return result.scalars().first()


async def _deck_cards(db: AsyncSession, user_id: int, deck: UserDeck) -> list[UserCard]:
    card_ids = (deck.user_card_id_1, deck.user_card_id_2, deck.user_card_id_3)
    result = await db.execute(
        select(UserCard).where(UserCard.id.in_(card_ids), UserCard.user_id == user_id)
    )
    return list(result.scalars().all())


async def update_deck(
    db: AsyncSession,
    ids: IdGenerator,
    user_id: int,
    viewer_id: str,
    card_ids: list[int],
    now: int,
) -> UserDeck:
    """Replace the active deck with three distinct cards the user owns."""
    if len(card_ids) != DECK_CARD_NUMBER:
        raise ValidationError("invalid number of cards")

    await check_viewer_id(db, user_id, viewer_id)

    owned = await db.execute(
        select(UserCard.id).where(UserCard.id.in_(card_ids), UserCard.user_id == user_id)
    )
    if len(owned.all()) != DECK_CARD_NUMBER:
        raise ValidationError("invalid card ids")

    await db.execute(
        update(UserDeck)
        .where(UserDeck.user_id == user_id, UserDeck.deleted_at.is_(None))
        .values(updated_at=now, deleted_at=now)
        .execution_options(synchronize_session=False)
    )
    deck = UserDeck(
        id=await ids.generate(db),
        user_id=user_id,
        user_card_id_1=card_ids[0],
        user_card_id_2=card_ids[1],
        user_card_id_3=card_ids[2],
        created_at=now,
        updated_at=now,
    )
    db.add(deck)
    await db.flush()
    return deck


async def reward(db: AsyncSession, user_id: int, viewer_id: str, now: int) -> User:
    """Pay out coins produced by the deck since the last collection."""
    await check_viewer_id(db, user_id, viewer_id)
    user = await get_user(db, user_id)

    deck = await get_active_deck(db, user_id)
    if deck is None:
        raise NotFoundError("not found user deck")
    cards = await _deck_cards(db, user_id, deck)
    if len(cards) != DECK_CARD_NUMBER:
        raise ValidationError("invalid cards length")

    past_time = now - user.last_getreward_at
    earned = past_time * sum(card.amount_per_sec for card in cards)

    user.isu_coin += earned
    user.last_getreward_at = now
    user.updated_at = now
    await db.flush()

    logger.info("reward_collected", user_id=user_id, past_time=past_time, earned=earned)
    return user


async def home(db: AsyncSession, user_id: int, now: int) -> Home:
    deck = await get_active_deck(db, user_id)
    cards = await _deck_cards(db, user_id, deck) if deck is not None else []
    user = await get_user(db, user_id)

    return Home(
        user=user,
        deck=deck,
        total_amount_per_sec=sum(card.amount_per_sec for card in cards),
        past_time=now - user.last_getreward_at,
        cards=cards,
    )
