"""
Announcement audience resolution.

Announcements are addressed to dashboard groups ("students", "teachers",
"parents", "staff") or directly to role names. An empty audience, or one
containing "all", addresses every active member of the school.
"""

from collections.abc import Iterable

from app.modules.users.models import ADMIN_ROLES, STAFF_ROLES, UserRole

ALL_AUDIENCE = "all"

AUDIENCE_GROUPS: dict[str, tuple[UserRole, ...]] = {
    "students": (UserRole.STUDENT,),
    "teachers": (UserRole.TEACHER,),
    "parents": (UserRole.PARENT,),
    "staff": STAFF_ROLES,
    "admins": ADMIN_ROLES,
}

VALID_AUDIENCE_VALUES: frozenset[str] = frozenset(
    [ALL_AUDIENCE, *AUDIENCE_GROUPS, *(role.value for role in UserRole)]
)


def resolve_audience_roles(target_audience: Iterable[str] | None) -> set[UserRole] | None:
    """
    Map an announcement's audience to the set of roles it reaches.

    Returns:
        None when the announcement is for everyone, otherwise the roles addressed.
        Unknown names are ignored.
    """
    audience = [a.strip().lower() for a in (target_audience or []) if a and a.strip()]
    if not audience or ALL_AUDIENCE in audience:
        return None

    roles: set[UserRole] = set()
    for name in audience:
        if name in AUDIENCE_GROUPS:
            roles.update(AUDIENCE_GROUPS[name])
        elif name in UserRole._value2member_map_:
            roles.add(UserRole(name))
    return roles


def is_in_audience(role: UserRole | str, target_audience: Iterable[str] | None) -> bool:
    roles = resolve_audience_roles(target_audience)
    return roles is None or UserRole(role) in roles
