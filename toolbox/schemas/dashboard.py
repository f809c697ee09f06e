from pydantic import BaseModel, Field


class DashboardStatsResponse(BaseModel):
    """대시보드 통계"""

    total_tasks: int = Field(alias="totalTasks")
    completed_tasks: int = Field(alias="completedTasks")
    pending_tasks: int = Field(alias="pendingTasks")
    in_progress_tasks: int = Field(alias="inProgressTasks")
    overdue_tasks: int = Field(alias="overdueTasks")
    total_meetings: int = Field(alias="totalMeetings")
    upcoming_meetings: int = Field(alias="upcomingMeetings")
    completed_meetings: int = Field(alias="completedMeetings")
    average_attendance: int = Field(alias="averageAttendance")

    class Config:
        populate_by_name = True
