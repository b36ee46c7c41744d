"""
Seed Demo School

Registers a demo school and its administrator through the normal sign-up
path, so the identity, user document and school are created together.

Usage:
    cd apps/api
    SEED_ADMIN_PASSWORD=... python scripts/seed_demo_school.py
"""

import asyncio
import os
import sys
from pathlib import Path

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from app.core.database import async_session_maker, close_db  # noqa: E402
from app.modules.auth.schemas import RegisterRequest  # noqa: E402
from app.modules.auth.service import AccountCreationError, sign_up  # noqa: E402
from app.modules.users.repository import UserRepository  # noqa: E402


async def seed_demo_school() -> None:
    """Create the demo school if its administrator doesn't exist yet."""
    email = os.environ.get("SEED_ADMIN_EMAIL", "admin@lincoln-high.example.com")
    password = os.environ.get("SEED_ADMIN_PASSWORD", "change-me-now")

    async with async_session_maker() as db:
        existing = await UserRepository.get_by_email(db, email)
        if existing:
            print(f"Demo administrator already exists: {email}")
            print(f"  School ID: {existing.school_id}")
            return

        try:
            result = await sign_up(
                db,
                RegisterRequest(
                    first_name="Alex",
                    last_name="Morgan",
                    email=email,
                    phone=None,
                    school_name="Lincoln High",
                    password=password,
                    confirm_password=password,
                ),
            )
        except AccountCreationError as e:
            print(f"Seeding failed: {e.message}")
            return

        print("Demo school created successfully!")
        print(f"  School: {result.school.name}")
        print(f"  Admin: {result.user.email}")
        print(f"  ID: {result.user.id}")


async def main() -> None:
    try:
        await seed_demo_school()
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
