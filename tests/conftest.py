import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from resume_builder.app.api.dependencies import get_auth_provider
from resume_builder.app.api.routes.route_logic.auth_provider import (
    CodeSender,
    DatabaseAuthProvider,
)
from resume_builder.app.api.routes.route_logic.resume_workspace import (
    WorkspaceRegistry,
    get_workspace_registry,
)
from resume_builder.app.core.config import Settings, get_settings
from resume_builder.app.core.security import get_password_hash
from resume_builder.app.database.database import get_db
from resume_builder.app.main import create_app
from resume_builder.app.models import Base
from resume_builder.app.models.user import User, UserData

VALID_PASSWORD = "Str0ng!Pass"


class RecordingCodeSender(CodeSender):
    """Keeps sent one-time codes so tests can read them back."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    def send(self, email: str, code: str) -> None:
        self.sent.append((email, code))

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


@pytest.fixture
def settings() -> Settings:
    """Settings built from defaults only."""
    get_settings.cache_clear()
    return get_settings()


@pytest.fixture
def engine():
    """An in-memory SQLite database shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def code_sender() -> RecordingCodeSender:
    return RecordingCodeSender()


@pytest.fixture
def registry() -> WorkspaceRegistry:
    return WorkspaceRegistry()


@pytest.fixture
def verified_user(db_session) -> User:
    """A verified account that can sign in with VALID_PASSWORD."""
    user = User(
        data=UserData(
            email="jane@example.com",
            hashed_password=get_password_hash(VALID_PASSWORD),
            full_name="Jane Doe",
            is_verified=True,
        ),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def app(settings, session_factory, code_sender, registry) -> FastAPI:
    """Fixture to create a new app for each test, wired to the test database."""
    _app = create_app()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    def override_get_auth_provider():
        db = session_factory()
        try:
            yield DatabaseAuthProvider(db=db, settings=settings, sender=code_sender)
        finally:
            db.close()

    _app.dependency_overrides[get_db] = override_get_db
    _app.dependency_overrides[get_auth_provider] = override_get_auth_provider
    _app.dependency_overrides[get_workspace_registry] = lambda: registry
    yield _app
    _app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Fixture to create a test client for each test."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def signed_in_client(client, verified_user) -> TestClient:
    """A client holding the session cookie of `verified_user`."""
    response = client.post(
        "/api/auth/sign-in",
        json={"email": verified_user.email, "password": VALID_PASSWORD},
    )
    assert response.status_code == 200
    return client
