from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from toolbox.api.dependencies import CurrentUser
from toolbox.core.database import get_db
from toolbox.schemas.common import ApiResponse, ErrorResponse
from toolbox.schemas.dashboard import DashboardStatsResponse
from toolbox.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get(
    "/stats",
    response_model=ApiResponse[DashboardStatsResponse],
    responses={401: {"model": ErrorResponse}},
)
async def get_dashboard_stats(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse[DashboardStatsResponse]:
    """대시보드 요약 통계"""
    stats = await DashboardService(db).get_stats()
    return ApiResponse(data=stats)
