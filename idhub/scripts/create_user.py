"""
Create a profile (e.g. first administrator). Run from project root:
  python -m idhub.scripts.create_user EMAIL PASSWORD [role]
Example:
  python -m idhub.scripts.create_user admin@example.com your-secure-password ADMINISTRATOR
"""
import argparse
import logging
import sys

from pydantic import ValidationError as SchemaValidationError

from idhub.core.acs import GrandAccessACS
from idhub.core.database import SessionLocal
from idhub.core.errors import ConflictError
from idhub.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from idhub.models.enums import UserRole
from idhub.schemas.profile import ProfileCreate
from idhub.services.profiles import create_profile

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)

ASSIGNABLE_ROLES = [r.value for r in UserRole if r not in (UserRole.ANONYMOUS, UserRole.DELETED)]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an IdHub profile with a confirmed email.")
    parser.add_argument("email", help="Email; also used as the username")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role", nargs="?", default=UserRole.ADMINISTRATOR.value, choices=ASSIGNABLE_ROLES
    )
    args = parser.parse_args(argv)

    email = args.email.strip()
    try:
        profile = ProfileCreate(
            username=email,
            email=email,
            password=args.password,
            role=UserRole(args.role),
            email_confirmed=True,
        )
    except SchemaValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user_uid = create_profile(db, profile, GrandAccessACS())
    except ConflictError:
        print(f"User '{email}' already exists.", file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{email}' ({user_uid}) with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
