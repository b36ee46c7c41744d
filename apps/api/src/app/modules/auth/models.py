"""
Auth Account Models

The sign-in identity. Its id is shared with the user document it
authenticates, so identity id and user id are interchangeable.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.modules.shared import BaseModel


class AuthAccount(BaseModel):
    """Email/password identity."""

    __tablename__ = "auth_accounts"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    disabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_sign_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<AuthAccount(id={self.id}, email={self.email})>"
