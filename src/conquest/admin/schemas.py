"""Pydantic schemas for the admin API."""

from __future__ import annotations

from conquest.resources.schemas import (
    CamelModel,
    UserCardOut,
    UserDeckOut,
    UserDeviceOut,
    UserItemOut,
    UserLoginBonusOut,
    UserOut,
    UserPresentAllReceivedHistoryOut,
    UserPresentOut,
)


class AdminLoginRequest(CamelModel):
    user_id: int
    password: str


class AdminSessionOut(CamelModel):
    id: int
    user_id: int
    session_id: str
    expired_at: int
    created_at: int
    updated_at: int
    deleted_at: int | None = None


class AdminLoginResponse(CamelModel):
    session: AdminSessionOut


class AdminUserResponse(CamelModel):
    user: UserOut
    user_devices: list[UserDeviceOut]
    user_cards: list[UserCardOut]
    user_decks: list[UserDeckOut]
    user_items: list[UserItemOut]
    user_login_bonuses: list[UserLoginBonusOut]
    user_presents: list[UserPresentOut]
    user_present_all_received_history: list[UserPresentAllReceivedHistoryOut]


class AdminBanUserResponse(CamelModel):
    user: UserOut
