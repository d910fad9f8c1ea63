"""Integration tests for the ``flask seed demo`` command."""

from __future__ import annotations

from tenantapi.models import Order, Organization, User


def test_seed_demo_creates_two_tenants(app, session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["seed", "demo"])

    assert result.exit_code == 0, result.output
    assert "Seed summary:" in result.output
    session.expire_all()
    assert {o.name for o in session.query(Organization).all()} == {"Corp A", "Corp B"}
    assert session.query(User).count() == 4
    assert session.query(Order).count() == 8
    user = session.query(User).filter_by(email="user1@corpa.com").one()
    assert user.verify_password("demo1234")


def test_seed_demo_is_idempotent(app, session):
    runner = app.test_cli_runner()
    runner.invoke(args=["seed", "demo"])
    result = runner.invoke(args=["seed", "demo"])

    assert result.exit_code == 0, result.output
    session.expire_all()
    assert session.query(Organization).count() == 2
    assert session.query(Order).count() == 8


def test_seed_refuses_production(app):
    app.config["APP_ENV"] = "production"
    result = app.test_cli_runner().invoke(args=["seed", "demo"])
    assert result.exit_code != 0
    assert "non-production" in result.output
