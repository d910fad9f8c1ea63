"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from tenantapi.core.extensions import db
from tenantapi.repositories import (
    OrderRepository,
    OrganizationRepository,
    RefreshTokenRepository,
    UserRepository,
)
from tenantapi.uow.base import UnitOfWork


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    The same session is shared across all repositories for a consistent
    transaction. Leaving the ``with`` block commits, or rolls back when an
    exception escapes.
    """

    def __init__(self, session: Session | None = None) -> None:
        self.session: Session = session or db.session
        self.users = UserRepository(session=self.session)
        self.organizations = OrganizationRepository(session=self.session)
        self.orders = OrderRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
