from fastapi import APIRouter
from fastapi.responses import JSONResponse

from toolbox.api.dependencies import CurrentUser
from toolbox.api.middleware import clear_session_cookies
from toolbox.schemas.auth import AuthUser
from toolbox.schemas.common import ApiResponse, ErrorResponse

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get(
    "/me",
    response_model=ApiResponse[AuthUser],
    responses={401: {"model": ErrorResponse}},
)
async def get_me(current_user: CurrentUser) -> ApiResponse[AuthUser]:
    """토큰의 인증 사용자 정보"""
    return ApiResponse(data=current_user)


@router.post("/logout", response_model=ApiResponse[None])
async def logout() -> JSONResponse:
    """세션 쿠키 삭제"""
    response = JSONResponse(
        content=ApiResponse[None](message="Logged out successfully").model_dump()
    )
    clear_session_cookies(response)
    return response
