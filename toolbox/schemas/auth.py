from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class AuthUser(BaseModel):
    """세션 토큰에서 꺼낸 인증 사용자"""

    id: UUID
    email: str | None = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)
