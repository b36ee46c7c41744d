"""
Tests for the user-creation and announcement creation handlers.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core.email import EmailResult
from app.modules.announcements.models import Announcement, AnnouncementPriority, AnnouncementStatus
from app.modules.notifications import triggers
from app.modules.notifications.models import EmailLog, EmailType
from app.modules.users.models import AuthStatus, UserRole

MODULE = "app.modules.notifications.triggers"


def _apply_update(db, doc, changes):
    for key, value in changes.items():
        setattr(doc, key, value)
    return doc


@pytest.fixture
def patched_triggers(session_factory, school):
    with (
        patch(f"{MODULE}.async_session_maker", session_factory),
        patch(f"{MODULE}.UserRepository") as users,
        patch(f"{MODULE}.SchoolRepository") as schools,
        patch(f"{MODULE}.AuthAccountRepository") as accounts,
        patch(f"{MODULE}.AnnouncementRepository") as announcements,
        patch(f"{MODULE}.send_email", AsyncMock(return_value=EmailResult(True, "m-1"))) as send,
    ):
        users.update = AsyncMock(side_effect=_apply_update)
        users.get_many = AsyncMock(return_value=[])
        schools.get_by_id = AsyncMock(return_value=school)
        accounts.create = AsyncMock()
        announcements.update = AsyncMock(side_effect=_apply_update)
        yield MagicMock(
            users=users,
            schools=schools,
            accounts=accounts,
            announcements=announcements,
            send=send,
        )


def _logs(mock_db) -> list[EmailLog]:
    return [c.args[0] for c in mock_db.add.call_args_list if isinstance(c.args[0], EmailLog)]


class TestHandleNewUserCreation:
    @pytest.mark.asyncio
    async def test_pending_user_is_provisioned_and_welcomed(self, mock_db, make_user, patched_triggers):
        user = make_user(UserRole.TEACHER, auth_status=AuthStatus.PENDING, temp_password="Tmp12345")
        patched_triggers.users.get_by_id = AsyncMock(return_value=user)

        result = await triggers.handle_new_user_creation(user.id)

        assert result == {"user_id": user.id, "status": "provisioned", "email_sent": True}
        patched_triggers.accounts.create.assert_awaited_once()
        assert patched_triggers.accounts.create.call_args.kwargs["password"] == "Tmp12345"
        assert user.auth_status == AuthStatus.COMPLETE
        assert user.temp_password is None
        assert user.temp_password_sent is True

        # the welcome email still carries the credential that was cleared
        html = patched_triggers.send.call_args.args[2]
        assert "Tmp12345" in html

        logs = _logs(mock_db)
        assert len(logs) == 1
        assert logs[0].type == EmailType.WELCOME
        assert logs[0].success is True

    @pytest.mark.asyncio
    async def test_complete_user_is_skipped(self, make_user, patched_triggers):
        user = make_user(auth_status=AuthStatus.COMPLETE)
        patched_triggers.users.get_by_id = AsyncMock(return_value=user)

        result = await triggers.handle_new_user_creation(user.id)

        assert result["status"] == "skipped"
        patched_triggers.accounts.create.assert_not_awaited()
        patched_triggers.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_provisioning_failure_marks_error_and_clears_credential(
        self, mock_db, make_user, patched_triggers
    ):
        user = make_user(auth_status=AuthStatus.PENDING, temp_password="Tmp12345")
        patched_triggers.users.get_by_id = AsyncMock(return_value=user)
        patched_triggers.accounts.create = AsyncMock(side_effect=RuntimeError("email already registered"))

        result = await triggers.handle_new_user_creation(user.id)

        assert result["status"] == "error"
        mock_db.rollback.assert_awaited_once()
        assert user.auth_status == AuthStatus.ERROR
        assert user.error_log == "email already registered"
        assert user.temp_password is None
        patched_triggers.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_welcome_email_is_logged(self, mock_db, make_user, patched_triggers):
        user = make_user(UserRole.PARENT, auth_status=AuthStatus.PENDING, temp_password="Tmp12345")
        patched_triggers.users.get_by_id = AsyncMock(return_value=user)
        patched_triggers.send.return_value = EmailResult(success=False, error="relay down")

        result = await triggers.handle_new_user_creation(user.id)

        assert result["email_sent"] is False
        assert user.auth_status == AuthStatus.COMPLETE
        assert user.temp_password_sent is False
        assert _logs(mock_db)[0].error == "relay down"

    @pytest.mark.asyncio
    async def test_missing_school_is_logged_as_failed_welcome(self, mock_db, make_user, patched_triggers):
        user = make_user(UserRole.TEACHER, auth_status=AuthStatus.PENDING, temp_password="Tmp12345")
        patched_triggers.users.get_by_id = AsyncMock(return_value=user)
        patched_triggers.schools.get_by_id = AsyncMock(return_value=None)

        result = await triggers.handle_new_user_creation(user.id)

        assert result["email_sent"] is False
        patched_triggers.send.assert_not_awaited()
        logs = _logs(mock_db)
        assert len(logs) == 1
        assert logs[0].type == EmailType.WELCOME
        assert logs[0].success is False
        assert logs[0].error == "school not found"


class TestSendAnnouncementEmails:
    @pytest.fixture
    def announcement_doc(self, school_id):
        now = datetime.now(UTC)
        return Announcement(
            id="a1",
            school_id=school_id,
            author_id="t1",
            author_name="Terry",
            title="Sports Day",
            content="Friday",
            target_audience=["students"],
            priority=AnnouncementPriority.MEDIUM,
            status=AnnouncementStatus.PUBLISHED,
            publish_date=now,
            expiry_date=None,
            attachments=[],
            email_stats=None,
            created_at=now,
            updated_at=now,
        )

    @pytest.mark.asyncio
    async def test_stats_count_successes_and_failures(
        self, mock_db, make_user, patched_triggers, announcement_doc
    ):
        recipients = [make_user(UserRole.STUDENT) for _ in range(3)]
        patched_triggers.announcements.get_by_id = AsyncMock(return_value=announcement_doc)
        patched_triggers.users.list_by_school = AsyncMock(return_value=recipients)
        patched_triggers.send.side_effect = [
            EmailResult(True, "m1"),
            EmailResult(False, error="bounced"),
            EmailResult(True, "m3"),
        ]

        stats = await triggers.send_announcement_emails("a1")

        assert stats["total_sent"] == 3
        assert stats["successful"] == 2
        assert stats["failed"] == 1
        assert announcement_doc.email_stats == stats
        assert patched_triggers.users.list_by_school.call_args.kwargs["roles"] == [UserRole.STUDENT]
        assert len(_logs(mock_db)) == 3

    @pytest.mark.asyncio
    async def test_one_crashing_send_does_not_block_others(
        self, make_user, patched_triggers, announcement_doc
    ):
        recipients = [make_user(UserRole.STUDENT) for _ in range(2)]
        patched_triggers.announcements.get_by_id = AsyncMock(return_value=announcement_doc)
        patched_triggers.users.list_by_school = AsyncMock(return_value=recipients)
        patched_triggers.send.side_effect = [RuntimeError("boom"), EmailResult(True, "m2")]

        stats = await triggers.send_announcement_emails("a1")

        assert stats["successful"] == 1
        assert stats["failed"] == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [AnnouncementStatus.DRAFT, AnnouncementStatus.ARCHIVED])
    async def test_unpublished_announcement_is_not_emailed(
        self, mock_db, make_user, patched_triggers, announcement_doc, status
    ):
        announcement_doc.status = status
        patched_triggers.announcements.get_by_id = AsyncMock(return_value=announcement_doc)
        patched_triggers.users.list_by_school = AsyncMock(return_value=[make_user(UserRole.STUDENT)])

        result = await triggers.send_announcement_emails("a1")

        assert result["status"] == "skipped"
        patched_triggers.send.assert_not_awaited()
        assert announcement_doc.email_stats is None
        assert _logs(mock_db) == []

    @pytest.mark.asyncio
    async def test_unknown_audience_reaches_nobody(self, patched_triggers, announcement_doc):
        announcement_doc.target_audience = ["aliens"]
        patched_triggers.announcements.get_by_id = AsyncMock(return_value=announcement_doc)
        patched_triggers.users.list_by_school = AsyncMock()

        stats = await triggers.send_announcement_emails("a1")

        assert stats["total_sent"] == 0
        patched_triggers.users.list_by_school.assert_not_awaited()


class TestRegistration:
    def test_handlers_are_attached_to_collections(self, isolated_event_bus):
        triggers.register_notification_triggers()

        handlers = isolated_event_bus._create_handlers
        assert handlers["users"] == [triggers.handle_new_user_creation]
        assert handlers["announcements"] == [triggers.send_announcement_emails]
