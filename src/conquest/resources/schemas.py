"""Pydantic views of user resources, serialized in the client's camelCase."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from conquest.db.models import UserDeck as UserDeckRow


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UserOut(CamelModel):
    id: int
    isu_coin: int
    last_getreward_at: int = Field(alias="lastGetRewardAt")
    last_activated_at: int
    registered_at: int
    created_at: int
    updated_at: int
    deleted_at: int | None = None


class UserDeviceOut(CamelModel):
    id: int
    user_id: int
    platform_id: str
    platform_type: int
    created_at: int
    updated_at: int
    deleted_at: int | None = None


class UserCardOut(CamelModel):
    id: int
    user_id: int
    card_id: int
    amount_per_sec: int
    level: int
    total_exp: int
    created_at: int
    updated_at: int
    deleted_at: int | None = None


class UserDeckOut(CamelModel):
    id: int
    user_id: int
    card_id1: int
    card_id2: int
    card_id3: int
    created_at: int
    updated_at: int
    deleted_at: int | None = None

    @classmethod
    def from_row(cls, deck: UserDeckRow) -> UserDeckOut:
        return cls(
            id=deck.id,
            user_id=deck.user_id,
            card_id1=deck.user_card_id_1,
            card_id2=deck.user_card_id_2,
            card_id3=deck.user_card_id_3,
            created_at=deck.created_at,
            updated_at=deck.updated_at,
            deleted_at=deck.deleted_at,
        )


class UserItemOut(CamelModel):
    id: int
    user_id: int
    item_type: int
    item_id: int
    amount: int
    created_at: int
    updated_at: int
    deleted_at: int | None = None


class UserLoginBonusOut(CamelModel):
    id: int
    user_id: int
    login_bonus_id: int
    last_reward_sequence: int
    loop_count: int
    created_at: int
    updated_at: int
    deleted_at: int | None = None


class UserPresentOut(CamelModel):
    id: int
    user_id: int
    sent_at: int
    item_type: int
    item_id: int
    amount: int
    present_message: str | None = None
    created_at: int
    updated_at: int
    deleted_at: int | None = None


class UserPresentAllReceivedHistoryOut(CamelModel):
    id: int
    user_id: int
    present_all_id: int
    received_at: int
    created_at: int
    updated_at: int
    deleted_at: int | None = None


class UpdatedResources(CamelModel):
    """Resources a mutation touched, echoed so the client can refresh its cache."""

    now: int
    user: UserOut | None = None
    user_device: UserDeviceOut | None = None
    user_cards: list[UserCardOut] | None = None
    user_decks: list[UserDeckOut] | None = None
    user_items: list[UserItemOut] | None = None
    user_login_bonuses: list[UserLoginBonusOut] | None = None
    user_presents: list[UserPresentOut] | None = None
