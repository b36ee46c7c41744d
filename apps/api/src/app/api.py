from fastapi import APIRouter

from app.modules.announcements.router import router as announcements_router
from app.modules.attendance.router import router as attendance_router
from app.modules.auth.router import router as auth_router
from app.modules.classes.router import router as classes_router
from app.modules.dashboard.router import router as dashboard_router
from app.modules.notifications.router import router as notifications_router
from app.modules.schools.router import router as schools_router
from app.modules.users.router import (
    parents_router,
    staff_router,
    students_router,
    teachers_router,
)

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
api_router.include_router(schools_router, prefix="/schools", tags=["Schools"])

api_router.include_router(students_router, prefix="/students", tags=["Students"])
api_router.include_router(teachers_router, prefix="/teachers", tags=["Teachers"])
api_router.include_router(parents_router, prefix="/parents", tags=["Parents"])
api_router.include_router(staff_router, prefix="/staff", tags=["Staff"])

api_router.include_router(classes_router, prefix="/classes", tags=["Classes"])
api_router.include_router(attendance_router, prefix="/attendance", tags=["Attendance"])
api_router.include_router(announcements_router, prefix="/announcements", tags=["Announcements"])
api_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])
