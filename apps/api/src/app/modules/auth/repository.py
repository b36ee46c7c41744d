"""
Auth Account Repository
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import hash_password
from app.modules.auth.models import AuthAccount
from app.modules.shared import utcnow

logger = logging.getLogger(__name__)


class AuthAccountRepository:
    """Repository for sign-in identities."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        account_id: str,
        email: str,
        password: str,
        display_name: str | None = None,
    ) -> AuthAccount:
        """
        Create an identity with a bcrypt-hashed password.

        Args:
            db: Database session
            account_id: Id shared with the user document
            email: Sign-in email (stored lower-case)
            password: Plaintext password, hashed before storage
            display_name: "First Last"
        """
        account = AuthAccount(
            id=account_id,
            email=email.lower(),
            password_hash=hash_password(password),
            display_name=display_name,
            disabled=False,
        )

        db.add(account)
        await db.flush()

        logger.info(f"Created auth account: {account.id}")
        return account

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> AuthAccount | None:
        result = await db.execute(select(AuthAccount).where(AuthAccount.email == email.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_id(db: AsyncSession, account_id: str) -> AuthAccount | None:
        return await db.get(AuthAccount, str(account_id))

    @staticmethod
    async def record_sign_in(db: AsyncSession, account: AuthAccount) -> None:
        account.last_sign_in_at = utcnow()
        await db.flush()

    @staticmethod
    async def set_display_name(db: AsyncSession, account: AuthAccount, display_name: str) -> None:
        account.display_name = display_name
        await db.flush()
