#!/usr/bin/env python
"""Seed an admin user for the back office.

Usage:
    python scripts/seed_admin.py --email admin@example.com --password "secure_password123"
"""

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

from lookbook.core.password import hash_password
from lookbook.persistence.database import AsyncSessionLocal
from lookbook.persistence.repositories.admin_user_repository import AdminUserRepository


async def seed_admin(email: str, password: str, name: str | None = None) -> int:
    """Create the admin user unless the email is already registered."""
    email = email.strip().lower()
    if len(password) < 8:
        print("Password must be at least 8 characters long.")
        return 1

    async with AsyncSessionLocal() as session:
        repo = AdminUserRepository(session)
        existing = await repo.get_by_email(email)
        if existing:
            print(f"Admin user already exists: {email}")
            return 0

        admin = await repo.create(
            email=email,
            name=name,
            hashed_password=hash_password(password),
            role="admin",
        )
        print(f"Created admin user: {admin.email} (ID: {admin.id})")
        return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a back-office admin user")
    parser.add_argument("--email", required=True, help="Admin email address")
    parser.add_argument("--password", required=True, help="Admin password (min 8 characters)")
    parser.add_argument("--name", default=None, help="Display name")
    args = parser.parse_args()
    return asyncio.run(seed_admin(args.email, args.password, args.name))


if __name__ == "__main__":
    sys.exit(main())
