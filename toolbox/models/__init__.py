from toolbox.models.meeting import (
    CheckInMethod,
    Meeting,
    MeetingAttendance,
    MeetingParticipant,
    MeetingStatus,
    MeetingType,
    ParticipantStatus,
)
from toolbox.models.notulensi import ActionItem, ActionItemPriority, ActionItemStatus, Notulensi
from toolbox.models.profile import Profile, UserRole
from toolbox.models.task import Task, TaskPriority, TaskStatus

__all__ = [
    "Profile",
    "UserRole",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "Meeting",
    "MeetingParticipant",
    "MeetingAttendance",
    "MeetingStatus",
    "MeetingType",
    "ParticipantStatus",
    "CheckInMethod",
    "Notulensi",
    "ActionItem",
    "ActionItemPriority",
    "ActionItemStatus",
]
