"""Fixtures for exercising the HTTP routes against a temporary database."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from petflix.infrastructure.database import get_db
from petflix.infrastructure.security import create_access_token


@pytest.fixture()
def client(session_factory):
    """Return a test client whose requests use the temporary database."""

    from main import create_app

    app = create_app()

    def _get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    # the lifespan is not entered so no background job starts
    return TestClient(app)


@pytest.fixture()
def auth_headers():
    def _headers(user) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers
