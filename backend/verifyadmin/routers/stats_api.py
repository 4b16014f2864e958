"""
Stats API — machine access to an app's own code issuance numbers.

GET /api/v1/stats/summary
  Authorization: Bearer <api key>
  → codes issued by the calling app over the last 1, 7 and 30 days.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from verifyadmin.auth.dependencies import ApiKeyContext, get_current_app
from verifyadmin.core.database import get_db_session
from verifyadmin.schemas.apikeys import StatsSummaryOut
from verifyadmin.services.stats import StatsQueryError, get_authorized_app_stats_summary

router = APIRouter(tags=["Stats"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Auth = Annotated[ApiKeyContext, Depends(get_current_app)]


@router.get(
    "/summary",
    response_model=StatsSummaryOut,
    summary="Codes issued by the calling app",
    description=(
        "Sums the calling app's daily issuance counters over trailing "
        "1, 7 and 30 day windows (UTC)."
    ),
)
async def get_stats_summary(session: DbSession, auth: Auth) -> StatsSummaryOut:
    try:
        summary = await get_authorized_app_stats_summary(session, auth.app, auth.realm)
    except StatsQueryError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Stats are temporarily unavailable.",
        )

    return StatsSummaryOut(
        authorized_app_id=auth.app.id,
        realm_id=auth.realm.id,
        **summary.model_dump(),
    )
