"""
Tests for email template rendering.
"""

from datetime import UTC, datetime
from types import SimpleNamespace

import pytest

from app.modules.notifications import templates
from app.modules.users.models import UserRole


@pytest.fixture
def announcement_doc():
    return SimpleNamespace(
        title="Sports Day",
        content="Bring water.\nWear trainers.",
        priority="high",
        publish_date=datetime(2026, 5, 4, tzinfo=UTC),
        created_at=datetime(2026, 5, 1, tzinfo=UTC),
        attachments=[{"name": "map.pdf", "url": "https://files.test/map.pdf"}],
    )


class TestWelcomeTemplates:
    def test_school_admin(self, make_user, school):
        user = make_user(UserRole.SCHOOL_ADMIN, email="admin@lincoln.edu")
        email = templates.welcome_school_admin(user, school, "Tmp12345")

        assert email.subject == "Welcome to Lincoln High - School Management System"
        assert "School Administrator" in email.html
        assert "Tmp12345" in email.html
        assert "/auth/login" in email.html

    def test_teacher_without_employee_id(self, make_user, school):
        email = templates.welcome_teacher(make_user(UserRole.TEACHER), school)
        assert email.subject == "Welcome to Lincoln High - Teacher Portal"
        assert "Will be assigned" in email.html
        assert "Temporary Password" not in email.html

    def test_student_lists_parent_emails(self, make_user, school):
        email = templates.welcome_student(
            make_user(UserRole.STUDENT), school, parent_emails=["mum@home.test"]
        )
        assert email.subject == "Welcome to Lincoln High - Student Portal"
        assert "mum@home.test" in email.html

    def test_parent_lists_children(self, make_user, school):
        email = templates.welcome_parent(
            make_user(UserRole.PARENT), school, children_names=["Sam Doe"]
        )
        assert "Sam Doe" in email.html

    @pytest.mark.parametrize(
        ("role", "expected"),
        [
            ("school_admin", templates.welcome_school_admin),
            ("teacher", templates.welcome_teacher),
            ("student", templates.welcome_student),
            ("parent", templates.welcome_parent),
            ("receptionist", templates.welcome_teacher),
            ("sub_admin", templates.welcome_teacher),
        ],
    )
    def test_template_selection(self, role, expected):
        assert templates.welcome_template_for(role) is expected

    def test_user_values_are_escaped(self, make_user, school):
        user = make_user(UserRole.TEACHER, profile={"first_name": "<b>X</b>", "last_name": "Y"})
        email = templates.welcome_teacher(user, school)
        assert "<b>X</b>" not in email.html
        assert "&lt;b&gt;X&lt;/b&gt;" in email.html


class TestOtherTemplates:
    def test_password_reset(self, make_user):
        email = templates.password_reset(make_user(), "https://app.test/reset?t=abc")
        assert email.subject == "Password Reset Request - School Management System"
        assert "https://app.test/reset?t=abc" in email.html
        assert "1 hour" in email.html

    def test_announcement(self, school, announcement_doc):
        email = templates.announcement(announcement_doc, school, "Jane Doe")
        assert email.subject == "Lincoln High - Sports Day"
        assert "Bring water.<br>Wear trainers." in email.html
        assert "High" in email.html
        assert "map.pdf" in email.html
        assert "This announcement was sent to: Jane Doe" in email.html

    def test_bulk_notification(self, school):
        email = templates.bulk_notification("Closure", "School closed", school, "Pat")
        assert email.subject == "Closure"
        assert "Dear Pat" in email.html
        assert "Important Notification" in email.html
