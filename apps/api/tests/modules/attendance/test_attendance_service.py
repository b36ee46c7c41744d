"""
Unit tests for attendance marking.

These tests cover:
- Upsert per (class, student, date)
- Skipping unmarked students
- Idempotent re-saves
- Future dates and students outside the roster
- History access for students and parents
"""

from contextlib import ExitStack
from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.modules.attendance.models import AttendanceRecord, AttendanceStatus
from app.modules.attendance.schemas import AttendanceMark, AttendanceSaveRequest
from app.modules.attendance.service import (
    FutureDateError,
    StudentNotInClassError,
    get_student_history,
    save_attendance,
    summarize,
)
from app.modules.shared import NotFoundError
from app.modules.users.models import UserRole

TODAY = date(2026, 3, 10)


def _record(student_id: str, status: AttendanceStatus, class_id: str = "c1") -> AttendanceRecord:
    return AttendanceRecord(
        id=f"r-{student_id}",
        school_id="s1",
        class_id=class_id,
        student_id=student_id,
        date=TODAY,
        status=status,
        notes=None,
        marked_by="t0",
        marked_at=datetime(2026, 3, 10, 8, tzinfo=UTC),
    )


class FakeAttendanceStore:
    """In-memory stand-in for the attendance repository module."""

    def __init__(self, records: list[AttendanceRecord] | None = None):
        self.records = list(records or [])

    async def list_for_class_date(self, db, school_id, class_id, on_date):
        return [r for r in self.records if r.class_id == class_id and r.date == on_date]

    def add_record(self, db, record):
        self.records.append(record)
        return record


@pytest.fixture
def roster(make_user):
    return [make_user(UserRole.STUDENT, class_id="c1") for _ in range(3)]


@pytest.fixture
def patched(roster):
    """Patch class and user lookups; call with a FakeAttendanceStore to install it."""
    with ExitStack() as stack:
        classes = stack.enter_context(patch("app.modules.attendance.service.ClassRepository"))
        users = stack.enter_context(patch("app.modules.attendance.service.UserRepository"))
        classes.get_in_school = AsyncMock(return_value=MagicMock(id="c1"))
        users.list_by_school = AsyncMock(return_value=roster)

        def use_store(store: FakeAttendanceStore) -> FakeAttendanceStore:
            stack.enter_context(patch("app.modules.attendance.service.repository", store))
            return store

        yield use_store


class TestSummarize:
    def test_counts_statuses_and_not_set(self):
        stats = summarize(
            ["a", "b", "c"],
            [_record("a", AttendanceStatus.PRESENT), _record("b", AttendanceStatus.LATE)],
        )
        assert stats["present"] == 1
        assert stats["late"] == 1
        assert stats["absent"] == 0
        assert stats["not_set"] == 1
        assert stats["total"] == 3


class TestSaveAttendance:
    @pytest.mark.asyncio
    async def test_inserts_marked_and_skips_unmarked(self, mock_db, teacher, roster, patched):
        store = FakeAttendanceStore()
        patched(store)
        data = AttendanceSaveRequest(
            class_id="c1",
            date=TODAY,
            marks=[
                AttendanceMark(student_id=roster[0].id, status=AttendanceStatus.PRESENT),
                AttendanceMark(student_id=roster[1].id, status=AttendanceStatus.ABSENT),
                AttendanceMark(student_id=roster[2].id, status=None),
            ],
        )

        result = await save_attendance(mock_db, teacher, data, today=TODAY)

        assert result.saved == 2
        assert result.skipped == 1
        assert {r.student_id for r in store.records} == {roster[0].id, roster[1].id}
        assert all(r.marked_by == teacher.id for r in store.records)
        assert result.stats["not_set"] == 1
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_existing_record_is_updated_in_place(self, mock_db, teacher, roster, patched):
        existing = _record(roster[0].id, AttendanceStatus.ABSENT)
        store = FakeAttendanceStore([existing])
        patched(store)
        data = AttendanceSaveRequest(
            class_id="c1",
            date=TODAY,
            marks=[AttendanceMark(student_id=roster[0].id, status=AttendanceStatus.LATE, notes="bus")],
        )

        await save_attendance(mock_db, teacher, data, today=TODAY)

        assert len(store.records) == 1
        assert existing.status == AttendanceStatus.LATE
        assert existing.notes == "bus"
        assert existing.marked_by == teacher.id

    @pytest.mark.asyncio
    async def test_saving_twice_keeps_one_record_per_student(self, mock_db, teacher, roster, patched):
        store = FakeAttendanceStore()
        patched(store)
        data = AttendanceSaveRequest(
            class_id="c1",
            date=TODAY,
            marks=[AttendanceMark(student_id=s.id, status=AttendanceStatus.PRESENT) for s in roster],
        )

        await save_attendance(mock_db, teacher, data, today=TODAY)
        await save_attendance(mock_db, teacher, data, today=TODAY)

        assert len(store.records) == 3

    @pytest.mark.asyncio
    async def test_future_date_is_rejected(self, mock_db, teacher):
        data = AttendanceSaveRequest(
            class_id="c1",
            date=date(2026, 3, 11),
            marks=[AttendanceMark(student_id="x", status=AttendanceStatus.PRESENT)],
        )
        with pytest.raises(FutureDateError):
            await save_attendance(mock_db, teacher, data, today=TODAY)
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_student_outside_roster_is_rejected(self, mock_db, teacher, patched):
        store = FakeAttendanceStore()
        patched(store)
        data = AttendanceSaveRequest(
            class_id="c1",
            date=TODAY,
            marks=[AttendanceMark(student_id="stranger", status=AttendanceStatus.PRESENT)],
        )

        with pytest.raises(StudentNotInClassError):
            await save_attendance(mock_db, teacher, data, today=TODAY)
        assert store.records == []


class TestStudentHistory:
    @pytest.mark.asyncio
    async def test_student_cannot_read_another_student(self, mock_db, make_actor):
        actor = make_actor("student")
        with pytest.raises(NotFoundError):
            await get_student_history(mock_db, actor, "someone-else")

    @pytest.mark.asyncio
    async def test_parent_reads_only_children(self, mock_db, make_actor, make_user):
        child = make_user(UserRole.STUDENT)
        parent_actor = make_actor("parent")
        parent_doc = make_user(UserRole.PARENT, id=parent_actor.id, children_ids=[child.id])

        with (
            patch("app.modules.attendance.service.UserRepository") as users,
            patch("app.modules.attendance.service.repository") as repo,
        ):
            users.get_in_school = AsyncMock(side_effect=[parent_doc, child, parent_doc])
            repo.list_for_student = AsyncMock(return_value=[_record(child.id, AttendanceStatus.PRESENT)])

            records, stats = await get_student_history(mock_db, parent_actor, child.id)
            assert len(records) == 1
            assert stats["present"] == 1

            with pytest.raises(NotFoundError):
                await get_student_history(mock_db, parent_actor, "not-my-child")
