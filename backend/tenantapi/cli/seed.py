"""Flask CLI commands for demo database seeding."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import select
from sqlalchemy.orm import Session

from tenantapi.core.extensions import db
from tenantapi.models import Order, Organization, User

LOGGER = logging.getLogger(__name__)

DEMO_PASSWORD = "demo1234"
USERS_PER_ORGANIZATION = 2
ORDERS_PER_USER = 2

ORGANIZATION_FIXTURES: list[dict[str, Any]] = [
    {"name": "Corp A", "industry": "Finance", "date_founded": date(2000, 1, 1), "domain": "corpa.com"},
    {
        "name": "Corp B",
        "industry": "Technology",
        "date_founded": date(2010, 1, 1),
        "domain": "corpb.com",
    },
]


def _ensure_non_production() -> None:
    """Abort seeding when running in production."""
    config = current_app.config
    app_env = str(config.get("APP_ENV", "")).lower()
    if app_env == "production" or (
        not config.get("DEBUG") and not config.get("TESTING") and config.get("ENV") == "production"
    ):
        raise click.UsageError("The 'flask seed' commands are restricted to non-production environments.")


def _get_or_create_organization(session: Session, fixture: dict[str, Any]) -> tuple[Organization, bool]:
    org = session.scalar(select(Organization).where(Organization.name == fixture["name"]))
    if org is not None:
        return org, False
    org = Organization(
        name=fixture["name"],
        industry=fixture["industry"],
        date_founded=fixture["date_founded"],
    )
    session.add(org)
    session.flush()
    return org, True


def _get_or_create_user(session: Session, org: Organization, email: str, n: int) -> tuple[User, bool]:
    user = session.scalar(select(User).where(User.email == email))
    if user is not None:
        return user, False
    user = User(
        email=email,
        first_name="Demo",
        last_name=f"User {n}",
        organization_id=org.id,
    )
    user.password = DEMO_PASSWORD
    session.add(user)
    session.flush()
    return user, True


def seed_demo(session: Session) -> dict[str, dict[str, int]]:
    """Create the demo organizations, their users and a few orders.

    Existing rows (matched by organization name or user email) are kept, so
    the command can be re-run safely.
    """
    summary: dict[str, dict[str, int]] = {
        "organizations": {"created": 0, "existing": 0},
        "users": {"created": 0, "existing": 0},
        "orders": {"created": 0, "existing": 0},
    }
    for fixture in ORGANIZATION_FIXTURES:
        org, created = _get_or_create_organization(session, fixture)
        summary["organizations"]["created" if created else "existing"] += 1
        for n in range(1, USERS_PER_ORGANIZATION + 1):
            user, created = _get_or_create_user(session, org, f"user{n}@{fixture['domain']}", n)
            if not created:
                summary["users"]["existing"] += 1
                summary["orders"]["existing"] += len(user.orders)
                continue
            summary["users"]["created"] += 1
            for k in range(1, ORDERS_PER_USER + 1):
                session.add(
                    Order(total_amount=100.0 * k + n, user_id=user.id, organization_id=org.id)
                )
                summary["orders"]["created"] += 1
    session.commit()
    LOGGER.info("seed.demo %s", summary)
    return summary


def _echo_summary(summary: dict[str, dict[str, int]]) -> None:
    """Pretty-print a tabular summary of seed results."""
    click.echo("Seed summary:")
    width = max(len(name) for name in summary)
    for table, counters in sorted(summary.items()):
        created = counters.get("created", 0)
        existing = counters.get("existing", 0)
        click.echo(f"  {table.ljust(width)}  created={created:>2}  existing={existing:>2}")


@click.group("seed")
def seed_cli() -> None:
    """Collection of database seeding commands."""


@seed_cli.command("demo")
@click.option("--create-tables", is_flag=True, help="Create missing tables before seeding.")
@with_appcontext
def demo_command(create_tables: bool) -> None:
    """Populate the database with two demo organizations."""
    _ensure_non_production()
    if create_tables:
        db.create_all()
    try:
        summary = seed_demo(db.session)
    except Exception as exc:  # pragma: no cover - CLI safeguard
        db.session.rollback()
        raise click.ClickException(f"Seeding failed: {exc}") from exc
    _echo_summary(summary)
