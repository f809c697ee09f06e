from fastapi import APIRouter

from toolbox.api.endpoints import (
    attendance,
    auth,
    dashboard,
    meetings,
    notulensi,
    participants,
    realtime,
    settings,
    tasks,
    users,
)

api_router = APIRouter(prefix="/api")

api_router.include_router(auth.router)
api_router.include_router(tasks.router)
api_router.include_router(meetings.router)
api_router.include_router(participants.router)
api_router.include_router(attendance.router)
api_router.include_router(notulensi.router)
api_router.include_router(users.router)
api_router.include_router(settings.router)
api_router.include_router(dashboard.router)

# 실시간 변경 스트림
api_router.include_router(realtime.router)
