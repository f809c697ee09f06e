import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from toolbox.core.database import Base


class ActionItemPriority(str, Enum):
    """액션 아이템 우선순위"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ActionItemStatus(str, Enum):
    """액션 아이템 상태"""

    PENDING = "pending"
    COMPLETED = "completed"


class Notulensi(Base):
    """회의록(notulensi) 모델"""

    __tablename__ = "notulensi"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    meeting_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("meetings.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    decisions: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    next_meeting_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_by: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("profiles.id"),
        nullable=False,
    )
    approved_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("profiles.id"),
        nullable=True,
    )
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    is_draft: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # 관계
    meeting: Mapped["Meeting"] = relationship("Meeting", back_populates="notulensi")
    creator: Mapped["Profile"] = relationship("Profile", foreign_keys=[created_by])
    approver: Mapped["Profile"] = relationship("Profile", foreign_keys=[approved_by])
    action_items: Mapped[list["ActionItem"]] = relationship(
        "ActionItem",
        back_populates="notulensi",
        cascade="all, delete-orphan",
        order_by="ActionItem.created_at",
    )

    def __repr__(self) -> str:
        return f"<Notulensi {self.meeting_id}>"


class ActionItem(Base):
    """액션 아이템 모델"""

    __tablename__ = "action_items"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    notulensi_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("notulensi.id", ondelete="CASCADE"),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    assignee_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    priority: Mapped[str] = mapped_column(
        String(20),
        default=ActionItemPriority.MEDIUM.value,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=ActionItemStatus.PENDING.value,
        nullable=False,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # 관계
    notulensi: Mapped["Notulensi"] = relationship("Notulensi", back_populates="action_items")
    assignee: Mapped["Profile"] = relationship("Profile")

    def __repr__(self) -> str:
        return f"<ActionItem {self.description[:20]}>"


# 순환 import 방지
from toolbox.models.meeting import Meeting  # noqa: E402
from toolbox.models.profile import Profile  # noqa: E402
