"""
Attendance module - Daily per-class attendance marking.
"""

from app.modules.attendance.models import AttendanceRecord, AttendanceStatus

__all__ = ["AttendanceRecord", "AttendanceStatus"]
