"""Authentication module - identities, sign-in/up, live session context."""

from app.modules.auth.models import AuthAccount
from app.modules.auth.repository import AuthAccountRepository

__all__ = ["AuthAccount", "AuthAccountRepository"]
