"""
Unit tests for password reset and bulk notification emails.
"""

from unittest.mock import AsyncMock, patch

import pytest

from app.core.email import EmailResult
from app.modules.notifications.models import EmailLog, EmailType
from app.modules.notifications.schemas import BulkNotificationRequest, BulkRecipient
from app.modules.notifications.service import (
    PermissionDeniedError,
    send_bulk_notification,
    send_password_reset_email,
)
from app.modules.shared import NotFoundError

MODULE = "app.modules.notifications.service"


def _request(school_id: str, count: int = 2) -> BulkNotificationRequest:
    return BulkNotificationRequest(
        recipients=[BulkRecipient(email=f"p{i}@family.com", name=f"Parent {i}") for i in range(count)],
        subject="School closed",
        content="Snow day tomorrow.",
        school_id=school_id,
    )


class TestBulkNotification:
    @pytest.mark.asyncio
    async def test_teacher_is_rejected_before_any_send(self, mock_db, teacher, school_id):
        with (
            patch("app.modules.notifications.triggers.send_email", AsyncMock()) as send,
            patch(f"{MODULE}.SchoolRepository") as schools,
        ):
            with pytest.raises(PermissionDeniedError) as exc_info:
                await send_bulk_notification(mock_db, teacher, _request(school_id))

        assert exc_info.value.status_code == 403
        send.assert_not_awaited()
        schools.get_by_id.assert_not_called()
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_admin_of_other_school_is_rejected(self, mock_db, admin):
        with patch("app.modules.notifications.triggers.send_email", AsyncMock()) as send:
            with pytest.raises(PermissionDeniedError):
                await send_bulk_notification(mock_db, admin, _request("another-school"))
        send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_admin_sends_and_logs_each_recipient(self, mock_db, admin, school):
        with (
            patch(
                "app.modules.notifications.triggers.send_email",
                AsyncMock(side_effect=[EmailResult(True, "m1"), EmailResult(False, error="bounced")]),
            ),
            patch(f"{MODULE}.SchoolRepository") as schools,
        ):
            schools.get_by_id = AsyncMock(return_value=school)
            result = await send_bulk_notification(mock_db, admin, _request(school.id))

        assert (result.total_sent, result.successful, result.failed) == (2, 1, 1)
        logs = [c.args[0] for c in mock_db.add.call_args_list if isinstance(c.args[0], EmailLog)]
        assert [log.type for log in logs] == [EmailType.BULK_NOTIFICATION] * 2
        assert all(log.sent_by == admin.id for log in logs)
        mock_db.commit.assert_awaited_once()


class TestPasswordReset:
    @pytest.mark.asyncio
    async def test_unknown_email(self, mock_db, admin):
        with patch(f"{MODULE}.UserRepository") as users:
            users.get_by_email = AsyncMock(return_value=None)
            with pytest.raises(NotFoundError):
                await send_password_reset_email(mock_db, admin, "nobody@x.test", "https://r")

    @pytest.mark.asyncio
    async def test_sends_and_logs(self, mock_db, admin, make_user):
        user = make_user()
        with (
            patch(f"{MODULE}.UserRepository") as users,
            patch(f"{MODULE}.send_email", AsyncMock(return_value=EmailResult(True, "m1"))) as send,
        ):
            users.get_by_email = AsyncMock(return_value=user)
            delivered = await send_password_reset_email(mock_db, admin, user.email, "https://r/x")

        assert delivered is True
        assert send.call_args.args[0] == user.email
        assert send.call_args.args[1] == "Password Reset Request - School Management System"
        log = mock_db.add.call_args.args[0]
        assert log.type == EmailType.PASSWORD_RESET
