from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from toolbox.api.dependencies import CurrentUser
from toolbox.core.database import get_db
from toolbox.schemas.common import ApiResponse, ErrorResponse, PaginatedData
from toolbox.schemas.profile import ProfileResponse
from toolbox.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


def get_user_service(db: Annotated[AsyncSession, Depends(get_db)]) -> UserService:
    """UserService 의존성"""
    return UserService(db)


@router.get(
    "",
    response_model=ApiResponse[PaginatedData[ProfileResponse]],
    responses={401: {"model": ErrorResponse}},
)
async def list_users(
    current_user: CurrentUser,
    user_service: Annotated[UserService, Depends(get_user_service)],
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str | None = Query(default=None, description="이름/부서/역할 검색"),
    role: str | None = Query(default=None),
    department: str | None = Query(default=None),
) -> ApiResponse[PaginatedData[ProfileResponse]]:
    """사용자 디렉터리"""
    data = await user_service.list_users(
        page=page,
        limit=limit,
        search=search,
        role=role,
        department=department,
    )
    return ApiResponse(data=data)
