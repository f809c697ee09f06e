import math

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from toolbox.models.profile import Profile
from toolbox.schemas.common import PaginatedData, PaginationMeta
from toolbox.schemas.profile import ProfileResponse


class UserService:
    """사용자 디렉터리 서비스"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_users(
        self,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        role: str | None = None,
        department: str | None = None,
    ) -> PaginatedData[ProfileResponse]:
        """사용자 목록 (이름순)"""
        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    Profile.name.ilike(pattern),
                    Profile.department.ilike(pattern),
                    Profile.role.ilike(pattern),
                )
            )
        if role:
            conditions.append(Profile.role == role)
        if department:
            conditions.append(Profile.department == department)

        count_query = select(func.count()).select_from(Profile).where(*conditions)
        total = (await self.db.execute(count_query)).scalar() or 0

        offset = (page - 1) * limit
        query = (
            select(Profile)
            .where(*conditions)
            .order_by(Profile.name.asc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(query)
        profiles = result.scalars().all()

        return PaginatedData[ProfileResponse](
            data=[ProfileResponse.model_validate(p) for p in profiles],
            pagination=PaginationMeta(
                page=page,
                limit=limit,
                total=total,
                total_pages=math.ceil(total / limit) if total > 0 else 0,
            ),
        )
