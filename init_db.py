# init_db.py
import argparse
import asyncio
import os

from medlink.core.security import hash_password
from medlink.db.sql import AsyncSessionLocal, engine, init_db
from medlink.modules.users import repository as users_repo
from medlink.modules.users.models import UserRole


async def seed_admin(email: str, password: str) -> None:
    async with AsyncSessionLocal() as session:
        if await users_repo.get_by_email(session, email):
            print(f"Admin {email} already exists, skipping")
            return
        await users_repo.create_user(
            session,
            email=email,
            password_hash=hash_password(password),
            first_name="System",
            last_name="Admin",
            role=UserRole.ADMIN,
        )
        await session.commit()
    print(f"Admin {email} created")


async def main(drop: bool, admin_email: str | None, admin_password: str | None) -> None:
    await init_db(drop=drop)
    print("Database schema recreated successfully!" if drop else "Database schema ready")

    if admin_email:
        if not admin_password:
            raise SystemExit("MEDLINK_ADMIN_PASSWORD (or --admin-password) is required to seed an admin")
        await seed_admin(admin_email.strip().lower(), admin_password)

    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create MedLink tables and optionally seed an admin")
    parser.add_argument("--drop", action="store_true", help="drop all tables first")
    parser.add_argument("--admin-email", default=os.getenv("MEDLINK_ADMIN_EMAIL"))
    parser.add_argument("--admin-password", default=os.getenv("MEDLINK_ADMIN_PASSWORD"))
    args = parser.parse_args()

    asyncio.run(main(args.drop, args.admin_email, args.admin_password))
