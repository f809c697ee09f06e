import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    JSON,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from toolbox.core.database import Base


class MeetingStatus(str, Enum):
    """회의 상태"""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MeetingType(str, Enum):
    """회의 방식"""

    ONSITE = "onsite"
    VIRTUAL = "virtual"
    HYBRID = "hybrid"


class ParticipantStatus(str, Enum):
    """참여자 응답 상태"""

    INVITED = "invited"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    TENTATIVE = "tentative"


class CheckInMethod(str, Enum):
    """체크인 방식"""

    QR_CODE = "qr_code"
    MANUAL = "manual"
    AUTO = "auto"


class Meeting(Base):
    """회의 모델"""

    __tablename__ = "meetings"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    date_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        index=True,
        nullable=False,
    )
    duration: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=MeetingStatus.SCHEDULED.value,
        nullable=False,
    )
    location: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    meeting_type: Mapped[str] = mapped_column(
        String(20),
        default=MeetingType.ONSITE.value,
        nullable=False,
    )
    meeting_link: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )
    agenda: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    qr_code_url: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    qr_code_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_by: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("profiles.id"),
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
    creator: Mapped["Profile"] = relationship("Profile")
    participants: Mapped[list["MeetingParticipant"]] = relationship(
        "MeetingParticipant",
        back_populates="meeting",
        cascade="all, delete-orphan",
        order_by="MeetingParticipant.created_at",
    )
    attendance: Mapped[list["MeetingAttendance"]] = relationship(
        "MeetingAttendance",
        back_populates="meeting",
        cascade="all, delete-orphan",
        order_by="MeetingAttendance.checked_in_at",
    )
    notulensi: Mapped[list["Notulensi"]] = relationship(
        "Notulensi",
        back_populates="meeting",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Meeting {self.title}>"


class MeetingParticipant(Base):
    """회의 참여자 모델"""

    __tablename__ = "meeting_participants"
    __table_args__ = (UniqueConstraint("meeting_id", "user_id", name="uq_meeting_participant"),)

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    meeting_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("meetings.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=ParticipantStatus.INVITED.value,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # 관계
    meeting: Mapped["Meeting"] = relationship("Meeting", back_populates="participants")
    user: Mapped["Profile"] = relationship("Profile")

    def __repr__(self) -> str:
        return f"<MeetingParticipant {self.user_id} in {self.meeting_id}>"


class MeetingAttendance(Base):
    """회의 출석(체크인) 모델"""

    __tablename__ = "meeting_attendance"
    __table_args__ = (UniqueConstraint("meeting_id", "user_id", name="uq_meeting_attendance"),)

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    meeting_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("meetings.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    checked_in_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    check_in_method: Mapped[str] = mapped_column(
        String(20),
        default=CheckInMethod.MANUAL.value,
        nullable=False,
    )
    location_lat: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
    )
    location_lng: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
    )
    device_info: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # 관계
    meeting: Mapped["Meeting"] = relationship("Meeting", back_populates="attendance")
    user: Mapped["Profile"] = relationship("Profile")

    def __repr__(self) -> str:
        return f"<MeetingAttendance {self.user_id} in {self.meeting_id}>"


# 순환 import 방지
from toolbox.models.notulensi import Notulensi  # noqa: E402
from toolbox.models.profile import Profile  # noqa: E402
