#!/usr/bin/env python3
"""
Create (or promote) the admin account used for the approval dashboard.

Run from project root:
  python scripts/create_admin.py --email admin@example.com --password 's3cret!'

Falls back to ADMIN_EMAIL / ADMIN_PASSWORD from the environment (.env).
Idempotent: an existing account with that email is promoted to admin.
"""
import argparse
import sys
from pathlib import Path

# Run from project root; ensure rishta is importable
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv(project_root / ".env")

from rishta.core.config import settings
from rishta.db.base import Base
from rishta.db.session import SessionLocal, engine
from rishta.services.accounts import ensure_admin_account


def main() -> int:
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("--email", default=settings.ADMIN_EMAIL)
    parser.add_argument("--password", default=settings.ADMIN_PASSWORD)
    parser.add_argument("--name", default="System Admin")
    args = parser.parse_args()

    if not args.email or not args.password:
        print("❌ Provide --email and --password (or set ADMIN_EMAIL / ADMIN_PASSWORD)")
        return 1

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        account = ensure_admin_account(db, args.email, args.password, name=args.name)
        print(f"✅ Admin account ready: id={account.id}, email={account.email}")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
