"""
Dashboard Navigation

Role-keyed lookup table for the dashboard sidebar. Items are returned in
table order; an unknown role gets no items.
"""

from dataclasses import dataclass

SCHOOL_ADMIN = "school_admin"
SUB_ADMIN = "sub_admin"
TEACHER = "teacher"
STUDENT = "student"
PARENT = "parent"

# Sub-admins see everything an administrator sees except role and school settings.
_ADMINS = (SCHOOL_ADMIN, SUB_ADMIN)
_EVERYONE = (*_ADMINS, TEACHER, STUDENT, PARENT)


@dataclass(frozen=True)
class NavItem:
    href: str
    icon: str
    label: str
    roles: tuple[str, ...]


NAV_ITEMS: tuple[NavItem, ...] = (
    NavItem("/dashboard", "home", "Overview", _EVERYONE),
    NavItem("/dashboard/students", "users", "Students", (*_ADMINS, TEACHER)),
    NavItem("/dashboard/teachers", "graduation-cap", "Teachers", _ADMINS),
    NavItem("/dashboard/parents", "user-check", "Parents", (*_ADMINS, TEACHER)),
    NavItem("/dashboard/staff", "users", "Staff", _ADMINS),
    NavItem("/dashboard/classes", "clipboard-list", "Classes", (*_ADMINS, TEACHER)),
    NavItem("/dashboard/subjects", "book", "Subjects", (*_ADMINS, TEACHER)),
    NavItem("/dashboard/attendance", "calendar", "Attendance", (*_ADMINS, TEACHER)),
    NavItem("/dashboard/announcements", "megaphone", "Announcements", _EVERYONE),
    NavItem("/dashboard/messages", "message-square", "Messages", _EVERYONE),
    NavItem("/dashboard/billing", "dollar-sign", "Billing", (*_ADMINS, PARENT)),
    NavItem("/dashboard/reports", "file-text", "Reports", (*_ADMINS, TEACHER)),
    NavItem("/dashboard/analytics", "bar-chart", "Analytics", _ADMINS),
    NavItem("/dashboard/import", "upload-cloud", "Bulk Import", _ADMINS),
    NavItem("/dashboard/roles", "shield", "Roles & Permissions", (SCHOOL_ADMIN,)),
    NavItem("/dashboard/settings", "settings", "Settings", (SCHOOL_ADMIN,)),
)


def navigation_for(role: str | None) -> list[NavItem]:
    if not role:
        return []
    return [item for item in NAV_ITEMS if role in item.roles]
