#!/usr/bin/env python3
"""
Create or promote board admins.

Usage:
  python scripts/seed_admin.py                      # every BOOTSTRAP_ADMIN_EMAILS entry
  python scripts/seed_admin.py lead@univ.edu "Ada"  # one email, optional full name

Reads DATABASE_URL and BOOTSTRAP_ADMIN_EMAILS from the environment or .env.
Safe to re-run: existing users are promoted, never duplicated.
"""
import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.config import settings
from app.core.exceptions import AppError
from app.core.logging import setup_logging
from app.database import AsyncSessionLocal, close_db
from app.services.user_service import UserService


async def seed(targets):
    failures = 0
    async with AsyncSessionLocal() as db:
        for email, full_name in targets:
            try:
                user = await UserService.upsert_admin(db, email, full_name)
            except AppError as exc:
                failures += 1
                print(f"FAILED: {email}: {exc.message}")
            else:
                print(f"OK: {user.email} is {user.role.value}")
    await close_db()
    return failures


def main():
    setup_logging()
    if len(sys.argv) > 1:
        targets = [(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None)]
    else:
        targets = [(email, None) for email in settings.BOOTSTRAP_ADMIN_EMAILS]

    if not targets:
        print("ERROR: pass an email or set BOOTSTRAP_ADMIN_EMAILS.")
        sys.exit(1)

    if asyncio.run(seed(targets)):
        sys.exit(1)


if __name__ == "__main__":
    main()
