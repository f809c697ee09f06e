from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from toolbox.models.meeting import (
    Meeting,
    MeetingAttendance,
    MeetingParticipant,
    MeetingStatus,
    ParticipantStatus,
)
from toolbox.models.task import Task, TaskStatus
from toolbox.schemas.dashboard import DashboardStatsResponse
from toolbox.services.meeting_service import attendance_rate
from toolbox.utils.dates import utcnow


class DashboardService:
    """대시보드 통계 서비스"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_stats(self) -> DashboardStatsResponse:
        """작업/회의 요약 통계"""
        now = utcnow()

        status_rows = await self.db.execute(
            select(Task.status, func.count()).group_by(Task.status)
        )
        task_counts = {status: count for status, count in status_rows.all()}

        overdue_query = (
            select(func.count())
            .select_from(Task)
            .where(
                Task.due_date.is_not(None),
                Task.due_date < now,
                Task.status != TaskStatus.COMPLETED.value,
            )
        )
        overdue = (await self.db.execute(overdue_query)).scalar() or 0

        meeting_rows = await self.db.execute(
            select(Meeting.status, func.count()).group_by(Meeting.status)
        )
        meeting_counts = {status: count for status, count in meeting_rows.all()}

        upcoming_query = (
            select(func.count())
            .select_from(Meeting)
            .where(
                Meeting.status == MeetingStatus.SCHEDULED.value,
                Meeting.date_time >= now,
            )
        )
        upcoming = (await self.db.execute(upcoming_query)).scalar() or 0

        accepted_query = (
            select(func.count())
            .select_from(MeetingParticipant)
            .join(Meeting, Meeting.id == MeetingParticipant.meeting_id)
            .where(
                Meeting.status == MeetingStatus.COMPLETED.value,
                MeetingParticipant.status == ParticipantStatus.ACCEPTED.value,
            )
        )
        accepted = (await self.db.execute(accepted_query)).scalar() or 0

        attendees_query = (
            select(func.count())
            .select_from(MeetingAttendance)
            .join(Meeting, Meeting.id == MeetingAttendance.meeting_id)
            .where(Meeting.status == MeetingStatus.COMPLETED.value)
        )
        attendees = (await self.db.execute(attendees_query)).scalar() or 0

        return DashboardStatsResponse(
            total_tasks=sum(task_counts.values()),
            completed_tasks=task_counts.get(TaskStatus.COMPLETED.value, 0),
            pending_tasks=task_counts.get(TaskStatus.PENDING.value, 0),
            in_progress_tasks=task_counts.get(TaskStatus.IN_PROGRESS.value, 0),
            overdue_tasks=overdue,
            total_meetings=sum(meeting_counts.values()),
            upcoming_meetings=upcoming,
            completed_meetings=meeting_counts.get(MeetingStatus.COMPLETED.value, 0),
            average_attendance=min(attendance_rate(attendees, accepted), 100),
        )
