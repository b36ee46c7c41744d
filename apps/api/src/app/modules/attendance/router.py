"""
Attendance Router

- GET /attendance/roster                  - Roster, existing marks and counts for a class and date
- PUT /attendance                         - Save a marking sheet (upsert per student)
- GET /attendance/students/{student_id}   - A student's attendance history
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, get_current_user, require_roles
from app.core.database import get_db
from app.modules.attendance import service
from app.modules.attendance.schemas import (
    AttendanceRecordResponse,
    AttendanceRosterResponse,
    AttendanceSaveRequest,
    AttendanceSaveResponse,
    RosterEntry,
    StudentAttendanceResponse,
)
from app.modules.shared import ServiceError, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter()

can_mark = require_roles("school_admin", "sub_admin", "teacher")


@router.get("/roster", response_model=AttendanceRosterResponse)
async def get_roster(
    class_id: str = Query(...),
    on_date: date = Query(..., alias="date"),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(can_mark),
) -> AttendanceRosterResponse:
    try:
        roster = await service.get_roster(db, user.school_id, class_id, on_date)
    except ServiceError as e:
        raise to_http_exception(e) from e

    by_student = {r.student_id: r for r in roster.records}
    return AttendanceRosterResponse(
        class_id=roster.class_id,
        date=roster.date,
        students=[
            RosterEntry(
                student_id=s.id,
                name=s.full_name,
                admission_number=s.admission_number,
                status=by_student[s.id].status if s.id in by_student else None,
                notes=by_student[s.id].notes if s.id in by_student else None,
            )
            for s in roster.students
        ],
        stats=roster.stats,
    )


@router.put("", response_model=AttendanceSaveResponse)
async def save_attendance(
    data: AttendanceSaveRequest,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(can_mark),
) -> AttendanceSaveResponse:
    try:
        result = await service.save_attendance(db, user, data)
    except ServiceError as e:
        logger.warning(f"Attendance save rejected for class {data.class_id}: {e.message}")
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error saving attendance: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "INTERNAL_ERROR", "message": "An unexpected error occurred."},
        ) from e

    return AttendanceSaveResponse(
        class_id=data.class_id,
        date=data.date,
        saved=result.saved,
        skipped=result.skipped,
        records=[AttendanceRecordResponse.model_validate(r) for r in result.records],
        stats=result.stats,
    )


@router.get("/students/{student_id}", response_model=StudentAttendanceResponse)
async def get_student_history(
    student_id: str,
    start: date | None = Query(None),
    end: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> StudentAttendanceResponse:
    try:
        records, stats = await service.get_student_history(db, user, student_id, start, end)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return StudentAttendanceResponse(
        student_id=student_id,
        records=[AttendanceRecordResponse.model_validate(r) for r in records],
        stats=stats,
    )
