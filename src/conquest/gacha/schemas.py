"""Pydantic schemas for the gacha API."""

from __future__ import annotations

from conquest.resources.schemas import CamelModel, UserPresentOut


class GachaMasterOut(CamelModel):
    id: int
    name: str
    start_at: int
    end_at: int
    display_order: int
    created_at: int


class GachaItemMasterOut(CamelModel):
    id: int
    gacha_id: int
    item_type: int
    item_id: int
    amount: int
    weight: int
    created_at: int


class GachaData(CamelModel):
    gacha: GachaMasterOut
    gacha_item_list: list[GachaItemMasterOut]


class ListGachaResponse(CamelModel):
    one_time_token: str
    gachas: list[GachaData]


class DrawGachaRequest(CamelModel):
    viewer_id: str
    one_time_token: str


class DrawGachaResponse(CamelModel):
    presents: list[UserPresentOut]
