#!/usr/bin/env python3
"""
Grant or revoke the admin role for an existing user.

Usage:
    python3 manage_users.py promote <userName>
    python3 manage_users.py demote <userName>

Reads DATABASE_URL and SECRET_KEY from the environment or backend/.env.
"""

import argparse
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent / "backend"))

from app.core.database import SessionLocal  # noqa: E402
from app.models.user import ADMIN_ROLE, USER_ROLE  # noqa: E402
from app.services.accounts import AccountError, set_user_role  # noqa: E402


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("action", choices=["promote", "demote"])
    parser.add_argument("user_name")
    args = parser.parse_args(argv)

    role = ADMIN_ROLE if args.action == "promote" else USER_ROLE

    db = SessionLocal()
    try:
        user = set_user_role(db, args.user_name, role)
    except AccountError as e:
        print(f"❌ {e}")
        return 1
    finally:
        db.close()

    print(f"✅ {user.user_name} (id {user.id}) is now '{user.role}'")
    return 0


if __name__ == "__main__":
    sys.exit(main())
