"""
Users module - Tenant members (students, teachers, parents, staff).
"""

from app.modules.users.models import AuthStatus, User, UserRole
from app.modules.users.repository import UserRepository

__all__ = ["AuthStatus", "User", "UserRole", "UserRepository"]
