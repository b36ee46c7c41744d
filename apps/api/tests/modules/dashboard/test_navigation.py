"""
Tests for role-based dashboard navigation.
"""

import pytest

from app.modules.dashboard.navigation import NAV_ITEMS, navigation_for


def _labels(role):
    return [item.label for item in navigation_for(role)]


class TestNavigation:
    def test_school_admin_sees_everything(self):
        assert len(navigation_for("school_admin")) == len(NAV_ITEMS)

    def test_teacher(self):
        labels = _labels("teacher")
        assert "Attendance" in labels
        assert "Students" in labels
        assert "Teachers" not in labels
        assert "Settings" not in labels

    def test_parent(self):
        assert _labels("parent") == ["Overview", "Announcements", "Messages", "Billing"]

    def test_student(self):
        assert _labels("student") == ["Overview", "Announcements", "Messages"]

    def test_sub_admin_has_no_role_or_school_settings(self):
        labels = _labels("sub_admin")
        assert "Bulk Import" in labels
        assert "Roles & Permissions" not in labels
        assert "Settings" not in labels

    @pytest.mark.parametrize("role", [None, "", "receptionist", "unknown"])
    def test_roles_without_navigation(self, role):
        assert navigation_for(role) == []

    def test_order_follows_table(self):
        hrefs = [item.href for item in navigation_for("teacher")]
        table_order = [item.href for item in NAV_ITEMS if item.href in hrefs]
        assert hrefs == table_order
