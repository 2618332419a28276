"""Pytest configuration and shared fixtures.

Every test gets a fresh in-memory SQLite database and a blob store in a
temporary directory.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import skportal.db.models  # noqa: F401  registers the tables
from skportal.core.security import create_access_token
from skportal.core.structure import default_catalog
from skportal.db.base import Base
from skportal.db.session import enable_sqlite_savepoints
from skportal.services.storage import LocalBlobStore


@pytest.fixture
def engine():
    """In-memory database shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    """Database session for service-level tests."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(str(tmp_path / "storage"))


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def client(session_factory, blob_store, catalog):
    """API client wired to the test database and blob store."""
    from skportal.api.deps import get_blob_store, get_catalog, get_db
    from skportal.api.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_catalog] = lambda: catalog

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build bearer headers for a profile id."""
    def _headers(profile_id):
        return {"Authorization": f"Bearer {create_access_token(profile_id)}"}
    return _headers


@pytest.fixture
def actors(session_factory):
    """Committed profiles for API tests, by name -> profile id."""
    from skportal.core.approval.states import ActorRole
    from tests.factories import create_profile, create_reviewers

    session = session_factory()
    try:
        profiles = {
            "filer": create_profile(session, full_name="DPD Jawa Barat", region="Jawa Barat"),
            "other_filer": create_profile(session, full_name="DPD Bali", region="Bali"),
        }
        reviewers = create_reviewers(session)
        profiles["verifier"] = reviewers[ActorRole.VERIFIER]
        profiles["tier1"] = reviewers[ActorRole.TIER1_APPROVER]
        profiles["tier2"] = reviewers[ActorRole.TIER2_APPROVER]
        ids = {name: profile.id for name, profile in profiles.items()}
        session.commit()
    finally:
        session.close()
    return ids


@pytest.fixture
def headers_for(actors, auth_headers):
    """Bearer headers by actor name."""
    return lambda name: auth_headers(actors[name])
