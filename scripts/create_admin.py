import argparse
import getpass
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from complaint_portal.auth.passwords import MAX_PASSWORD_BYTES, hash_password  # noqa: E402
from complaint_portal.core.config import load_settings  # noqa: E402
from complaint_portal.core.errors import DuplicateUser  # noqa: E402
from complaint_portal.database import build_engine, build_session_factory, ensure_schema  # noqa: E402
from complaint_portal.models.user import Role, User  # noqa: E402
from complaint_portal.stores.users import UserStore  # noqa: E402

MIN_PASSWORD_LENGTH = 12


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a Student Complaint Portal admin account")
    parser.add_argument("email", help="Unique email address for login")
    parser.add_argument("username", help="Unique username")
    parser.add_argument("name", help="Display name for the admin")
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy database URL (defaults to DATABASE_URL from the environment or .env)",
    )
    return parser.parse_args(argv)


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        if len(password) < MIN_PASSWORD_LENGTH:
            print(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.", file=sys.stderr)
            continue
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            print(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def create_admin(session_factory, email: str, username: str, name: str, password: str, rounds: int = 12) -> User:
    db = session_factory()
    try:
        return UserStore(db).create_user(
            User(
                email=email.strip().lower(),
                username=username.strip(),
                name=name.strip(),
                hashed_password=hash_password(password, rounds=rounds),
                role=Role.ADMIN.value,
            )
        )
    finally:
        db.close()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    password = prompt_for_password()

    engine = build_engine(args.database_url or settings.database_url)
    ensure_schema(engine)

    try:
        user = create_admin(
            build_session_factory(engine),
            args.email,
            args.username,
            args.name,
            password,
            rounds=settings.bcrypt_rounds,
        )
    except DuplicateUser as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Created admin {user.id}: {user.name} <{user.email}>")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
