from __future__ import annotations

import argparse
import asyncio
import getpass

from sqlalchemy import select

from eatoff.core.database import AsyncSessionLocal, init_db
from eatoff.models.admin_user import AdminUser
from eatoff.services.auth import ADMIN_ROLES, hash_password


async def create_staff_user(email: str, password: str, role: str, name: str | None = None) -> AdminUser:
    await init_db()
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(AdminUser).where(AdminUser.email == email))
        if result.scalars().first():
            raise ValueError(f"Staff user already exists: {email}")

        staff = AdminUser(
            email=email,
            name=name,
            hashed_password=hash_password(password),
            role=role,
            is_active=True,
        )
        session.add(staff)
        await session.commit()
        await session.refresh(staff)
    return staff


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a support staff account.")
    parser.add_argument("--email", required=True, help="Login email.")
    parser.add_argument("--name", help="Display name shown to agents.")
    parser.add_argument("--password", help="Password (prompted if omitted).")
    parser.add_argument(
        "--role",
        default="admin",
        choices=list(ADMIN_ROLES),
        help="admin can edit the knowledge base; agent works tickets only.",
    )
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    email = args.email.strip().lower()
    password = args.password or getpass.getpass("Password: ")
    if not password.strip():
        raise SystemExit("Password is required")

    try:
        staff = asyncio.run(
            create_staff_user(email=email, password=password, role=args.role, name=args.name)
        )
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    print(f"Created {staff.role} account: {staff.email} (id={staff.id})")


if __name__ == "__main__":
    main()
