import base64
import json
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from complaint_portal.auth import jwt_handler
from complaint_portal.auth.passwords import hash_password
from complaint_portal.core.config import Settings
from complaint_portal.core.errors import NotificationError
from complaint_portal.database import Base, build_engine, build_session_factory, ensure_schema
from complaint_portal.main import create_app
from complaint_portal.models.user import Role, User


class FakePublisher:
    """Records published messages instead of talking to Redis."""

    def __init__(self):
        self.messages: list[tuple[str, str]] = []
        self.fail = False
        self.closed = False

    def publish(self, queue_name: str, payload: str) -> None:
        if self.fail:
            raise NotificationError(queue_name, RuntimeError('queue unavailable'))
        self.messages.append((queue_name, payload))

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url='sqlite://',
        jwt_secret_key='test-secret-key-for-the-complaint-portal-suite',
        bcrypt_rounds=4,
    )


@pytest.fixture
def db_session(settings: Settings):
    engine = build_engine(settings.database_url)
    ensure_schema(engine)
    db = build_session_factory(engine)()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def app(settings: Settings, publisher: FakePublisher):
    return create_app(settings, publisher=publisher)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(app, client, settings: Settings):
    """Insert a user directly and return it with a bearer token."""

    def _make_user(email: str, username: str, role: Role = Role.STUDENT, password: str = 'password-1'):
        db = app.state.session_factory()
        try:
            user = User(
                email=email,
                username=username,
                name=username.title(),
                hashed_password=hash_password(password, rounds=settings.bcrypt_rounds),
                role=role.value,
            )
            db.add(user)
            db.commit()
        finally:
            db.close()
        token = jwt_handler.create_access_token(user.id, user.email, role, settings)
        return user, token

    return _make_user


@pytest.fixture
def bearer():
    def _bearer(token: str) -> dict[str, str]:
        return {'Authorization': f'Bearer {token}'}

    return _bearer


@pytest.fixture
def forge_token():
    """Hand-build an admin token under an arbitrary header algorithm."""

    def segment(data: bytes) -> str:
        return base64.urlsafe_b64encode(data).rstrip(b'=').decode('ascii')

    def _forge_token(algorithm: str, signature: bytes = b'') -> str:
        now = int(datetime.now(timezone.utc).timestamp())
        header = {'alg': algorithm, 'typ': 'JWT'}
        payload = {'userId': 'user-1', 'email': 'a@x.com', 'role': 'admin', 'iat': now, 'exp': now + 3600}
        return '.'.join(
            [
                segment(json.dumps(header).encode('utf-8')),
                segment(json.dumps(payload).encode('utf-8')),
                segment(signature),
            ]
        )

    return _forge_token
