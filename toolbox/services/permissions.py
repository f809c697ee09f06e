"""역할/소유권 판별

엔드포인트마다 반복되는 세 가지 판별(작성자, 담당자/참여자, 관리자)을 모았습니다.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toolbox.models.profile import Profile, UserRole

PRIVILEGED_ROLES = frozenset({UserRole.ADMIN.value, UserRole.MANAGER.value})


def is_creator(row: Any, user_id: UUID) -> bool:
    """행 작성자인지 확인"""
    return row.created_by == user_id


def is_assignee(row: Any, user_id: UUID) -> bool:
    """작업 담당자인지 확인"""
    return row.assignee_id is not None and row.assignee_id == user_id


def is_participant(target_user_id: UUID, user_id: UUID) -> bool:
    """본인의 참여자 행에 대한 요청인지 확인"""
    return target_user_id == user_id


def is_admin_or_manager(profile: Profile | None) -> bool:
    """admin/manager 역할인지 확인 (프로필이 없으면 False)"""
    return profile is not None and profile.role in PRIVILEGED_ROLES


def is_admin(profile: Profile | None) -> bool:
    return profile is not None and profile.role == UserRole.ADMIN.value


async def get_profile(db: AsyncSession, user_id: UUID) -> Profile | None:
    """프로필 조회"""
    result = await db.execute(select(Profile).where(Profile.id == user_id))
    return result.scalar_one_or_none()
