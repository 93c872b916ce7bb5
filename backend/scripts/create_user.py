"""
Create Dashboard User
=====================
Creates a dashboard user with a temporary password, or deactivates one.

Usage (from project root, with DATABASE_URL set):
    python backend/scripts/create_user.py --email agent@clinic.it
    python backend/scripts/create_user.py --email maria.rossi@clinic.it --full-name "Maria Rossi"
    python backend/scripts/create_user.py --email agent@clinic.it --deactivate

Flags:
    --email       EMAIL   (required) The user's email address
    --full-name   NAME    (optional) Display name. If omitted, derived from email.
    --password    PW      (optional) Password. If omitted, a random one is generated.
    --init-db             Create missing tables first (development only)
    --deactivate          Deactivate the user instead of creating it
"""

import argparse
import os
import secrets
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), ".."))

from clinicacrm.core.database import SessionLocal, init_db  # noqa: E402
from clinicacrm.core.security import hash_password  # noqa: E402
from clinicacrm.models.user import User  # noqa: E402


def generate_temp_password() -> str:
    """Generate a readable temporary password (12 chars URL-safe)."""
    return secrets.token_urlsafe(9)


def parse_name_from_email(email: str) -> str:
    """
    Derive a display name from the email local part.
    Examples:
        agent@clinic.it        -> "Agent"
        maria.rossi@clinic.it  -> "Maria Rossi"
    """
    local = email.split("@")[0]
    return " ".join(part.capitalize() for part in local.replace("_", ".").split(".") if part)


def main():
    parser = argparse.ArgumentParser(description="Create or deactivate a dashboard user")
    parser.add_argument("--email", required=True, help="User email address")
    parser.add_argument("--full-name", default=None, help="Display name")
    parser.add_argument("--password", default=None, help="Password (generated if omitted)")
    parser.add_argument("--init-db", action="store_true", help="Create missing tables first")
    parser.add_argument("--deactivate", action="store_true", help="Deactivate instead of create")
    args = parser.parse_args()

    email = args.email.strip().lower()
    if "@" not in email:
        print(f"  [FAIL] Invalid email: {email}")
        sys.exit(1)

    if args.init_db:
        init_db()
        print("  [OK] Tables created")

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email).first()

        if args.deactivate:
            if not user:
                print(f"  [FAIL] No user with email {email}")
                sys.exit(1)
            user.is_active = False
            db.commit()
            print(f"  [OK] User {email} deactivated")
            return

        if user:
            print(f"  [FAIL] User {email} already exists (ID: {user.id})")
            sys.exit(1)

        password = args.password or generate_temp_password()
        full_name = args.full_name.strip() if args.full_name else parse_name_from_email(email)

        user = User(
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            is_active=True,
        )
        db.add(user)
        db.commit()
    finally:
        db.close()

    print("=" * 60)
    print("  USER CREATED")
    print("=" * 60)
    print(f"  ID:        {user.id}")
    print(f"  Email:     {email}")
    print(f"  Name:      {full_name}")
    if not args.password:
        print(f"  Temp PW:   {password}")
    print()


if __name__ == "__main__":
    main()
