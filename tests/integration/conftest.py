"""Fixtures for API tests."""

import pytest
from fastapi.testclient import TestClient

from studio.main import create_app


@pytest.fixture
def app(settings, memory_store):
    """Application wired to the in-memory project store."""
    return create_app(settings=settings, store=memory_store)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def project(client):
    """A stored project with a two-item list."""
    response = client.post(
        "/projects",
        json={
            "html": "<h1>{{title}}</h1><ul><li>{{a}}</li><li>{{b}}</li></ul>",
            "state": {"title": "Menu", "a": "Bread", "b": "Cake"},
        },
    )
    assert response.status_code == 201
    return response.json()
