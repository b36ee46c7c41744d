"""
Attendance Schemas
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from app.modules.attendance.models import AttendanceStatus


class AttendanceMark(BaseModel):
    """One row of the marking sheet. A null status means 'not set' and is skipped."""

    student_id: str
    status: AttendanceStatus | None = None
    notes: str | None = Field(None, max_length=500)


class AttendanceSaveRequest(BaseModel):
    class_id: str
    date: dt.date
    marks: list[AttendanceMark] = Field(..., min_length=1)


class AttendanceRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    class_id: str
    student_id: str
    date: dt.date
    status: AttendanceStatus
    notes: str | None = None
    marked_by: str
    marked_at: dt.datetime


class RosterEntry(BaseModel):
    student_id: str
    name: str
    admission_number: str | None = None
    status: AttendanceStatus | None = None
    notes: str | None = None


class AttendanceRosterResponse(BaseModel):
    class_id: str
    date: dt.date
    students: list[RosterEntry]
    stats: dict[str, int]


class AttendanceSaveResponse(BaseModel):
    class_id: str
    date: dt.date
    saved: int
    skipped: int
    records: list[AttendanceRecordResponse]
    stats: dict[str, int]


class StudentAttendanceResponse(BaseModel):
    student_id: str
    records: list[AttendanceRecordResponse]
    stats: dict[str, int]
