"""Pytest configuration and fixtures for kiosk tests.

Test isolation strategy:
- Each test gets a fresh in-memory SQLite database (StaticPool, one shared
  connection), or TEST_DATABASE_URL when set, with tables created from the models
- The app's get_db dependency is overridden to use that engine
- Assets go to an in-memory FakeAssetHost
- admin_client carries a valid admin session token; client carries none
"""

import os
import sys
from collections.abc import Generator
from pathlib import Path

# Settings are read lazily, but must be in place before the first get_settings()
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("KIOSK_ENV", "test")
os.environ.setdefault("KIOSK_ADMIN_EMAIL", "admin@kiosk.test")
os.environ.setdefault("KIOSK_ADMIN_PASSWORD", "correct-horse-battery")

# Add repo root to sys.path for importing top-level packages (e.g., apps)
_repo_root = Path(__file__).parent.parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from kiosk.app import add_request_id_middleware, create_app
from kiosk.auth.authenticator import AdminCredentialAuthenticator
from kiosk.config import clear_settings_cache
from kiosk.db.engine import create_db_engine
from kiosk.db.models import Base
from kiosk.db.session import create_session_factory, get_db
from kiosk.storage import FakeAssetHost
from tests.helpers import ADMIN_EMAIL, ADMIN_PASSWORD, TEST_SESSION_SECRET, auth_headers


def get_test_database_url() -> str | None:
    return os.environ.get("TEST_DATABASE_URL")


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """Re-read settings for every test so monkeypatched env vars take effect."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Create an engine with the full schema for a single test.

    SQLite foreign keys are left unenforced (the driver default).
    """
    url = get_test_database_url()
    if url:
        engine = create_db_engine(url)
    else:
        engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def db_session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Provide a session on the test engine for direct setup and assertions."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def asset_host() -> FakeAssetHost:
    return FakeAssetHost()


@pytest.fixture
def authenticator() -> AdminCredentialAuthenticator:
    return AdminCredentialAuthenticator(
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        secret=TEST_SESSION_SECRET,
        ttl_s=3600,
    )


@pytest.fixture
def app(
    session_factory: sessionmaker[Session],
    asset_host: FakeAssetHost,
    authenticator: AdminCredentialAuthenticator,
) -> FastAPI:
    """Provide the full app (auth + request-id middleware) bound to the test engine."""
    app = create_app(authenticator=authenticator, asset_host=asset_host)

    def override_get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    add_request_id_middleware(app, log_requests=False)
    return app


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Provide a test client without a session token (kiosk screen view)."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin_client(
    app: FastAPI, authenticator: AdminCredentialAuthenticator
) -> Generator[TestClient, None, None]:
    """Provide a test client that sends a valid admin session token."""
    with TestClient(app) as client:
        client.headers.update(auth_headers(authenticator))
        yield client
