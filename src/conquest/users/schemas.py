"""Pydantic schemas for the user and game-state API."""

from __future__ import annotations

from pydantic import Field

from conquest.resources.schemas import (
    CamelModel,
    UpdatedResources,
    UserCardOut,
    UserDeckOut,
    UserItemOut,
    UserOut,
    UserPresentOut,
)


class CreateUserRequest(CamelModel):
    viewer_id: str
    platform_type: int


class CreateUserResponse(CamelModel):
    user_id: int
    viewer_id: str
    session_id: str
    created_at: int
    updated_resources: UpdatedResources


class LoginRequest(CamelModel):
    viewer_id: str
    user_id: int


class LoginResponse(CamelModel):
    viewer_id: str
    session_id: str
    updated_resources: UpdatedResources


class ViewerRequest(CamelModel):
    viewer_id: str


class ListItemResponse(CamelModel):
    one_time_token: str
    user: UserOut
    items: list[UserItemOut]
    cards: list[UserCardOut]


class ConsumeItem(CamelModel):
    id: int
    amount: int = Field(ge=0)


class AddExpToCardRequest(CamelModel):
    viewer_id: str
    one_time_token: str
    items: list[ConsumeItem]


class UpdateDeckRequest(CamelModel):
    viewer_id: str
    card_ids: list[int]


class UpdatedResourcesResponse(CamelModel):
    updated_resources: UpdatedResources


class HomeResponse(CamelModel):
    now: int
    user: UserOut
    deck: UserDeckOut | None = None
    total_amount_per_sec: int
    past_time: int


class ListPresentResponse(CamelModel):
    presents: list[UserPresentOut]
    is_next: bool


class ReceivePresentRequest(CamelModel):
    viewer_id: str
    present_ids: list[int]
