"""Receive box router: /user/{user_id}/present/*."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from conquest.auth.dependencies import gameplay_admission
from conquest.auth.pipeline import AdmissionContext, check_viewer_id
from conquest.config import get_settings
from conquest.core.id_generator import IdGenerator, get_id_generator
from conquest.database import get_session
from conquest.presents.present_service import list_presents, receive_present
from conquest.resources.schemas import UpdatedResources, UserPresentOut
from conquest.users.schemas import ListPresentResponse, ReceivePresentRequest, UpdatedResourcesResponse

router = APIRouter(prefix="/user/{user_id}/present", tags=["Presents"])


@router.get("/index/{n}", response_model=ListPresentResponse)
async def get_present_list(
    user_id: int,
    n: int,
    ctx: AdmissionContext = Depends(gameplay_admission),
    db: AsyncSession = Depends(get_session),
):
    """One page of unreceived presents, newest first."""
    settings = get_settings()
    presents, is_next = await list_presents(db, user_id, n, settings.present_page_size)

    return ListPresentResponse(
        presents=[UserPresentOut.model_validate(p) for p in presents],
        is_next=is_next,
    )


@router.post("/receive", response_model=UpdatedResourcesResponse, response_model_exclude_none=True)
async def post_receive_present(
    user_id: int,
    body: ReceivePresentRequest,
    ctx: AdmissionContext = Depends(gameplay_admission),
    db: AsyncSession = Depends(get_session),
    ids: IdGenerator = Depends(get_id_generator),
):
    """Open presents and apply their payloads."""
    await check_viewer_id(db, user_id, body.viewer_id)
    presents = await receive_present(db, ids, user_id, body.present_ids, ctx.request_at)
    await db.commit()

    return UpdatedResourcesResponse(
        updated_resources=UpdatedResources(
            now=ctx.request_at,
            user_presents=[UserPresentOut.model_validate(p) for p in presents],
        )
    )
