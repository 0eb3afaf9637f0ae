import os

# Keep app import from creating a database file next to the tests
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from competition_engine.database import get_session  # noqa: E402
from competition_engine.main import app  # noqa: E402
from competition_engine.models.event import Event  # noqa: E402
from competition_engine.models.registration import Registration  # noqa: E402
from competition_engine.repository import EngineRepository  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share the same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models MUST be imported before create_all() (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables are dropped after every test so each test starts empty
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on freshly created tables"""
    # Import all models to ensure they're registered BEFORE create_all
    from competition_engine.models.event import Event  # noqa: F401
    from competition_engine.models.group import Group  # noqa: F401
    from competition_engine.models.match import Match  # noqa: F401
    from competition_engine.models.match_set import MatchSet  # noqa: F401
    from competition_engine.models.registration import Registration  # noqa: F401
    from competition_engine.models.structure_generation import StructureGeneration  # noqa: F401

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="repo")
def repo_fixture(session: Session) -> EngineRepository:
    return EngineRepository(session)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place for the entire
    duration so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_event(session: Session):
    """Factory: make_event(format="groups", best_of=1, **fields) -> Event"""

    def _make(format: str = "groups", best_of: int = 1, **fields) -> Event:
        event = Event(name=fields.pop("name", f"{format} event"), format=format, best_of=best_of, **fields)
        session.add(event)
        session.commit()
        session.refresh(event)
        return event

    return _make


@pytest.fixture
def make_registrations(session: Session):
    """Factory: make_registrations(event_id, count) -> list of registration ids, ascending"""

    def _make(event_id: int, count: int) -> list:
        registrations = [
            Registration(event_id=event_id, player_ids=[100 + i], display_name=f"Player {i + 1}")
            for i in range(count)
        ]
        session.add_all(registrations)
        session.commit()
        return [r.id for r in sorted(registrations, key=lambda r: r.id)]

    return _make
