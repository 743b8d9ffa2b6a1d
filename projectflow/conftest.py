# projectflow/conftest.py
import os

import pytest

# Must be set before projectflow.main is imported.
os.environ.setdefault("SKIP_ENV_VALIDATION", "1")
os.environ.setdefault("ENV", "test")


@pytest.fixture(scope="function", autouse=True)
def sqlite_db(tmp_path):
    """
    Give each test its own SQLite database.

    The engine is module state in projectflow.core.database, so it is
    rebuilt here and disposed afterwards.
    """
    from projectflow.core.database import create_all_tables, dispose_engine, init_engine

    init_engine(f"sqlite:///{tmp_path / 'projectflow.db'}")
    create_all_tables()
    yield
    dispose_engine()


@pytest.fixture(autouse=True)
def header_identity(monkeypatch):
    """Tests identify callers with X-User-Id unless they patch a Clerk secret in."""
    from projectflow.core.config import settings

    monkeypatch.setattr(settings, "CLERK_SECRET_KEY", None)
    monkeypatch.setattr(settings, "CLERK_ISSUER", None)
    monkeypatch.setattr(settings, "ADMIN_API_KEY", None)


@pytest.fixture
def fake_llm():
    from projectflow.tests.fakes import FakeCompletionClient

    return FakeCompletionClient()


@pytest.fixture
def fake_email():
    from projectflow.tests.fakes import FakeEmailClient

    return FakeEmailClient()


@pytest.fixture
def client(fake_llm, fake_email):
    """TestClient with the completion and email clients replaced by fakes."""
    from fastapi.testclient import TestClient

    from projectflow.features.ai.completion import get_completion_client
    from projectflow.features.notifications.email import get_email_client, get_optional_email_client
    from projectflow.main import app

    app.dependency_overrides[get_completion_client] = lambda: fake_llm
    app.dependency_overrides[get_email_client] = lambda: fake_email
    app.dependency_overrides[get_optional_email_client] = lambda: fake_email
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()