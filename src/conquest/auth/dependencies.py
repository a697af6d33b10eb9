"""FastAPI dependencies that run the admission pipeline per route."""

from collections.abc import Sequence

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from conquest.auth.pipeline import (
    ADMIN_STAGES,
    ENTRY_STAGES,
    GAMEPLAY_STAGES,
    AdmissionContext,
    Stage,
    check_one_time_token,
    run_stages,
)
from conquest.auth.sessions import TokenType
from conquest.core.clock import parse_request_time
from conquest.database import get_session


def get_request_time(request: Request) -> int:
    """Request time in epoch seconds (``x-isu-date`` or server clock)."""
    return parse_request_time(request.headers.get("x-isu-date"))


def _path_user_id(request: Request) -> int | None:
    raw = request.path_params.get("user_id")
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


class Admission:
    """Dependency running a fixed list of admission stages for a route."""

    def __init__(self, stages: Sequence[Stage]) -> None:
        self.stages = tuple(stages)

    async def __call__(
        self,
        request: Request,
        db: AsyncSession = Depends(get_session),
    ) -> AdmissionContext:
        ctx = AdmissionContext(
            request_at=get_request_time(request),
            user_id=_path_user_id(request),
            session_id=request.headers.get("x-session"),
            master_version=request.headers.get("x-master-version"),
        )
        await run_stages(db, ctx, self.stages)
        return ctx


gameplay_admission = Admission(GAMEPLAY_STAGES)
entry_admission = Admission(ENTRY_STAGES)
admin_admission = Admission(ADMIN_STAGES)


class RequireOneTimeToken:
    """Consume the body's ``oneTimeToken`` of the given type after gameplay admission."""

    def __init__(self, token_type: TokenType) -> None:
        self.token_type = token_type

    async def __call__(
        self,
        request: Request,
        ctx: AdmissionContext = Depends(gameplay_admission),
        db: AsyncSession = Depends(get_session),
    ) -> AdmissionContext:
        try:
            body = await request.json()
        except ValueError:
            body = None
        token = body.get("oneTimeToken") if isinstance(body, dict) else None
        ctx.one_time_token = token if isinstance(token, str) else None
        ctx.token_type = self.token_type
        await run_stages(db, ctx, (check_one_time_token,))
        return ctx


gacha_token = RequireOneTimeToken(TokenType.GACHA_DRAW)
leveling_token = RequireOneTimeToken(TokenType.CARD_LEVELING)
