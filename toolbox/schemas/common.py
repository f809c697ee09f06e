from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginationMeta(BaseModel):
    """페이지네이션 메타"""

    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")

    class Config:
        populate_by_name = True


class PaginatedData(BaseModel, Generic[T]):
    """목록 응답 (data + pagination)"""

    data: list[T]
    pagination: PaginationMeta


class ApiResponse(BaseModel, Generic[T]):
    """성공 응답 envelope"""

    success: bool = True
    data: T | None = None
    message: str | None = None


class ErrorResponse(BaseModel):
    """에러 응답 envelope"""

    success: bool = False
    error: str
    code: str
