"""Pytest fixtures for the tenant API.

Each test gets a fresh application bound to an in-memory SQLite database
(Flask-SQLAlchemy shares one connection for ``:memory:``), so data changes
never leak between cases.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from typing import Any

import pytest
from flask import Flask

from tenantapi.core.config import TestingConfig
from tenantapi.core.extensions import db as _db
from tenantapi.factory import create_app


@pytest.fixture()
def app() -> Generator[Flask, None, None]:
    """Create a Flask application configured for testing.

    Yields
    ------
    flask.Flask
        Application with :class:`TestingConfig` applied and the schema created.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestingConfig, instance_relative_config=False)
    application.logger.setLevel("WARNING")
    with application.app_context():
        _db.create_all()
        yield application
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def db(app: Flask):
    """Return the database extension bound to the testing application."""
    return _db


@pytest.fixture()
def session(db):
    """Return the Flask-scoped session used by the application code."""
    return db.session


@pytest.fixture()
def client(app: Flask):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to the application session ---------------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper when a test uses the database."""
    if "app" not in request.fixturenames:
        yield
        return
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(request.getfixturevalue("session"))
    yield
    SQLAlchemySession.set(None)


@pytest.fixture()
def login(client) -> Callable[..., dict[str, Any]]:
    """Return a helper logging a user in through the API.

    The helper returns the JSON body of ``POST /api/v1/auth/login``.
    """

    def _login(email: str, password: str = "Passw0rd!") -> dict[str, Any]:
        resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()

    return _login


@pytest.fixture()
def auth_header(login) -> Callable[..., dict[str, str]]:
    """Return a helper building a bearer header for ``email``."""

    def _header(email: str, password: str = "Passw0rd!") -> dict[str, str]:
        return {"Authorization": f"Bearer {login(email, password)['token']}"}

    return _header
