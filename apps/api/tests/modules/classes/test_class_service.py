"""
Unit tests for class management.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import ValidationError

from app.modules.classes.schemas import ClassCreate, ClassUpdate
from app.modules.classes.service import ClassNotFoundError, create_class, deactivate_class
from app.modules.shared import ValidationFailedError
from app.modules.users.models import UserRole


class TestClassSchema:
    def test_defaults(self):
        data = ClassCreate(name="5A", grade="Grade 5")
        assert data.capacity == 30
        assert data.subjects == []

    def test_unknown_grade_is_rejected(self):
        with pytest.raises(ValidationError):
            ClassCreate(name="X", grade="Grade 13")

    @pytest.mark.parametrize("capacity", [0, 101])
    def test_capacity_bounds(self, capacity):
        with pytest.raises(ValidationError):
            ClassCreate(name="X", grade="Kindergarten", capacity=capacity)

    @pytest.mark.parametrize("field", ["name", "grade", "capacity", "subjects", "is_active"])
    def test_update_rejects_null_for_required_field(self, field):
        with pytest.raises(ValidationError):
            ClassUpdate.model_validate({field: None})

    def test_update_allows_clearing_optional_fields(self):
        data = ClassUpdate.model_validate({"room": None, "class_teacher_id": None})
        assert data.model_dump(exclude_unset=True) == {"room": None, "class_teacher_id": None}


class TestCreateClass:
    @pytest.mark.asyncio
    async def test_class_teacher_must_be_active_teacher(self, mock_db, admin, make_user):
        student = make_user(UserRole.STUDENT)
        data = ClassCreate(name="5A", grade="Grade 5", class_teacher_id=student.id)

        with patch("app.modules.classes.service.UserRepository") as users:
            users.get_in_school = AsyncMock(return_value=student)
            with pytest.raises(ValidationFailedError) as exc_info:
                await create_class(mock_db, admin, data)

        assert exc_info.value.error_code == "INVALID_CLASS_TEACHER"
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_creates_with_school_scope(self, mock_db, admin, make_user):
        teacher = make_user(UserRole.TEACHER)
        data = ClassCreate(name="5A", grade="Grade 5", class_teacher_id=teacher.id)
        created = MagicMock(id="c1", grade="Grade 5")

        with (
            patch("app.modules.classes.service.UserRepository") as users,
            patch("app.modules.classes.service.ClassRepository") as classes,
        ):
            users.get_in_school = AsyncMock(return_value=teacher)
            classes.create = AsyncMock(return_value=created)
            result = await create_class(mock_db, admin, data)

        assert result is created
        assert classes.create.call_args.kwargs["school_id"] == admin.school_id
        mock_db.commit.assert_awaited_once()


class TestDeactivateClass:
    @pytest.mark.asyncio
    async def test_missing_class(self, mock_db, admin):
        with patch("app.modules.classes.service.ClassRepository") as classes:
            classes.get_in_school = AsyncMock(return_value=None)
            with pytest.raises(ClassNotFoundError):
                await deactivate_class(mock_db, admin, "missing")

    @pytest.mark.asyncio
    async def test_soft_delete(self, mock_db, admin):
        school_class = MagicMock(id="c1")
        with patch("app.modules.classes.service.ClassRepository") as classes:
            classes.get_in_school = AsyncMock(return_value=school_class)
            classes.update = AsyncMock(return_value=school_class)
            await deactivate_class(mock_db, admin, "c1")

        classes.update.assert_awaited_once_with(mock_db, school_class, {"is_active": False})
