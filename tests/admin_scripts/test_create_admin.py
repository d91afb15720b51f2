import pytest

from complaint_portal.auth.passwords import verify_password
from complaint_portal.core.errors import DuplicateUser
from complaint_portal.database import build_engine, build_session_factory, ensure_schema
from complaint_portal.models.user import Role, User
from scripts import create_admin


@pytest.fixture
def session_factory():
    engine = build_engine('sqlite://')
    ensure_schema(engine)
    yield build_session_factory(engine)
    engine.dispose()


def test_create_admin_stores_admin_role_and_hashed_password(session_factory) -> None:
    user = create_admin.create_admin(session_factory, ' Admin@X.com ', 'admin', 'Site Admin', 'long-enough-password', rounds=4)

    db = session_factory()
    try:
        stored = db.get(User, user.id)
    finally:
        db.close()
    assert stored.role == Role.ADMIN.value
    assert stored.email == 'admin@x.com'
    assert verify_password('long-enough-password', stored.hashed_password)


def test_create_admin_rejects_duplicate_email(session_factory) -> None:
    create_admin.create_admin(session_factory, 'admin@x.com', 'admin', 'Admin', 'long-enough-password', rounds=4)

    with pytest.raises(DuplicateUser):
        create_admin.create_admin(session_factory, 'admin@x.com', 'admin2', 'Admin', 'long-enough-password', rounds=4)


def test_main_creates_admin_from_cli_arguments(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setattr(create_admin, 'prompt_for_password', lambda: 'long-enough-password')
    monkeypatch.setenv('BCRYPT_ROUNDS', '4')

    exit_code = create_admin.main(['admin@x.com', 'admin', 'Site Admin', '--database-url', 'sqlite://'])

    assert exit_code == 0
    assert 'Created admin' in capsys.readouterr().out


def test_prompt_for_password_rejects_short_passwords(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(create_admin.getpass, 'getpass', lambda _prompt: 'short')

    with pytest.raises(SystemExit):
        create_admin.prompt_for_password()
