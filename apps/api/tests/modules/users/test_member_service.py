"""
Unit tests for member management.

These tests cover:
- Member creation in pending state with a temporary credential
- Role and email validation
- Profile merging on update
- Patch validation and class membership on update
- Deactivation (soft delete)
"""

from unittest.mock import AsyncMock, patch

import pytest
from pydantic import ValidationError

from app.core.events import event_bus
from app.modules.shared import NotFoundError
from app.modules.users.models import AuthStatus, UserRole
from app.modules.users.schemas import MemberCreate, MemberUpdate, ProfileData, ProfileUpdate
from app.modules.users.service import (
    MEMBER_GROUPS,
    EmailExistsError,
    InvalidRoleError,
    create_member,
    deactivate_member,
    list_members,
    merge_profile,
    update_member,
)

REPO = "app.modules.users.service.UserRepository"


class TestMergeProfile:
    def test_only_provided_keys_change(self):
        merged = merge_profile(
            {"first_name": "Jane", "last_name": "Doe", "phone": "123"},
            {"phone": "456"},
        )
        assert merged == {"first_name": "Jane", "last_name": "Doe", "phone": "456"}

    def test_address_is_merged_key_by_key(self):
        merged = merge_profile(
            {"address": {"street": "1 Main St", "city": "Springfield"}},
            {"address": {"city": "Shelbyville"}},
        )
        assert merged["address"] == {"street": "1 Main St", "city": "Shelbyville"}

    def test_empty_current_profile(self):
        assert merge_profile(None, {"first_name": "A"}) == {"first_name": "A"}


class TestCreateMember:
    @pytest.mark.asyncio
    async def test_creates_pending_user_with_temp_password(self, mock_db, admin, make_user):
        created = make_user(UserRole.TEACHER, auth_status=AuthStatus.PENDING, temp_password="Ab3$efgh")
        data = MemberCreate(
            email="Teacher@Lincoln.edu",
            profile=ProfileData(first_name="Terry", last_name="Teach"),
        )

        with (
            patch(REPO) as repo,
            patch("app.modules.users.service.generate_temp_password", return_value="Ab3$efgh"),
            patch.object(event_bus, "publish_created", AsyncMock()) as publish,
        ):
            repo.email_exists = AsyncMock(return_value=False)
            repo.create = AsyncMock(return_value=created)

            user = await create_member(mock_db, admin, MEMBER_GROUPS["teachers"], data)

        assert user is created
        kwargs = repo.create.call_args.kwargs
        assert kwargs["email"] == "teacher@lincoln.edu"
        assert kwargs["role"] == UserRole.TEACHER
        assert kwargs["school_id"] == admin.school_id
        assert kwargs["auth_status"] == AuthStatus.PENDING
        assert kwargs["temp_password"] == "Ab3$efgh"
        mock_db.commit.assert_awaited_once()
        publish.assert_awaited_once_with("users", created.id)

    @pytest.mark.asyncio
    async def test_staff_default_role_is_receptionist(self, mock_db, admin, make_user):
        data = MemberCreate(email="desk@lincoln.edu", profile=ProfileData(first_name="D", last_name="K"))

        with patch(REPO) as repo:
            repo.email_exists = AsyncMock(return_value=False)
            repo.create = AsyncMock(return_value=make_user(UserRole.RECEPTIONIST))
            await create_member(mock_db, admin, MEMBER_GROUPS["staff"], data)

        assert repo.create.call_args.kwargs["role"] == UserRole.RECEPTIONIST

    @pytest.mark.asyncio
    async def test_role_outside_group_is_rejected(self, mock_db, admin):
        data = MemberCreate(
            email="x@lincoln.edu",
            profile=ProfileData(first_name="X", last_name="Y"),
            role=UserRole.SCHOOL_ADMIN,
        )
        with pytest.raises(InvalidRoleError):
            await create_member(mock_db, admin, MEMBER_GROUPS["students"], data)
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_email_is_rejected(self, mock_db, admin):
        data = MemberCreate(email="dup@lincoln.edu", profile=ProfileData(first_name="D", last_name="U"))

        with patch(REPO) as repo:
            repo.email_exists = AsyncMock(return_value=True)
            repo.create = AsyncMock()
            with pytest.raises(EmailExistsError) as exc_info:
                await create_member(mock_db, admin, MEMBER_GROUPS["students"], data)

        assert exc_info.value.status_code == 409
        repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_write_failure_rolls_back(self, mock_db, admin):
        data = MemberCreate(email="s@lincoln.edu", profile=ProfileData(first_name="S", last_name="T"))

        with patch(REPO) as repo:
            repo.email_exists = AsyncMock(return_value=False)
            repo.create = AsyncMock(side_effect=RuntimeError("insert failed"))
            with pytest.raises(RuntimeError):
                await create_member(mock_db, admin, MEMBER_GROUPS["students"], data)

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_awaited()


class TestListAndUpdate:
    @pytest.mark.asyncio
    async def test_list_passes_group_roles(self, mock_db, admin, make_user):
        with patch(REPO) as repo:
            repo.list_by_school = AsyncMock(return_value=[make_user()])
            members = await list_members(mock_db, admin.school_id, MEMBER_GROUPS["staff"])

        assert len(members) == 1
        call = repo.list_by_school.call_args
        assert set(call.kwargs["roles"]) == {
            UserRole.SUB_ADMIN,
            UserRole.RECEPTIONIST,
            UserRole.ACCOUNTANT,
            UserRole.LIBRARIAN,
        }
        assert call.kwargs["include_inactive"] is False

    @pytest.mark.asyncio
    async def test_update_merges_profile(self, mock_db, admin, make_user):
        student = make_user(profile={"first_name": "Jane", "last_name": "Doe", "phone": "1"})

        with patch(REPO) as repo:
            repo.get_in_school = AsyncMock(return_value=student)
            repo.update = AsyncMock(side_effect=lambda db, user, changes: user)
            await update_member(
                mock_db,
                admin,
                MEMBER_GROUPS["students"],
                student.id,
                MemberUpdate(profile=ProfileUpdate(phone="2")),
            )

        changes = repo.update.call_args.args[2]
        assert changes["profile"] == {"first_name": "Jane", "last_name": "Doe", "phone": "2"}
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_member_of_other_group_is_not_found(self, mock_db, admin, make_user):
        parent = make_user(UserRole.PARENT)

        with patch(REPO) as repo:
            repo.get_in_school = AsyncMock(return_value=parent)
            with pytest.raises(NotFoundError):
                await update_member(
                    mock_db, admin, MEMBER_GROUPS["students"], parent.id, MemberUpdate()
                )


    @pytest.mark.parametrize("field", ["email", "role", "is_active", "parent_ids", "children_ids"])
    def test_null_for_required_field_is_rejected(self, field):
        with pytest.raises(ValidationError):
            MemberUpdate.model_validate({field: None})

    def test_null_clears_optional_field(self):
        data = MemberUpdate.model_validate({"class_id": None, "employee_id": None})
        assert data.model_dump(exclude_unset=True) == {"class_id": None, "employee_id": None}

    @pytest.mark.asyncio
    async def test_class_is_not_assigned_to_staff(self, mock_db, admin, make_user):
        receptionist = make_user(UserRole.RECEPTIONIST)

        with (
            patch(REPO) as repo,
            patch("app.modules.users.service.ClassRepository") as classes,
        ):
            repo.get_in_school = AsyncMock(return_value=receptionist)
            repo.update = AsyncMock(side_effect=lambda db, user, changes: user)
            classes.get_in_school = AsyncMock()
            await update_member(
                mock_db, admin, MEMBER_GROUPS["staff"], receptionist.id, MemberUpdate(class_id="c1")
            )

        assert repo.update.call_args.args[2]["class_id"] is None
        classes.get_in_school.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_student_class_is_validated(self, mock_db, admin, make_user):
        student = make_user()

        with (
            patch(REPO) as repo,
            patch("app.modules.users.service.ClassRepository") as classes,
        ):
            repo.get_in_school = AsyncMock(return_value=student)
            classes.get_in_school = AsyncMock(return_value=None)
            with pytest.raises(NotFoundError):
                await update_member(
                    mock_db, admin, MEMBER_GROUPS["students"], student.id, MemberUpdate(class_id="gone")
                )

        mock_db.commit.assert_not_awaited()

class TestDeactivateMember:
    @pytest.mark.asyncio
    async def test_deactivate_sets_inactive_and_keeps_row(self, mock_db, admin, make_user):
        student = make_user()

        with (
            patch(REPO) as repo,
            patch.object(event_bus, "publish_updated", AsyncMock()) as publish,
        ):
            repo.get_in_school = AsyncMock(return_value=student)
            repo.update = AsyncMock(side_effect=lambda db, user, changes: user)
            await deactivate_member(mock_db, admin, MEMBER_GROUPS["students"], student.id)

        repo.update.assert_awaited_once_with(mock_db, student, {"is_active": False})
        mock_db.delete.assert_not_called()
        publish.assert_awaited_once_with("users", student.id)
