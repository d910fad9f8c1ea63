"""Factory Boy helpers wired to the project's SQLAlchemy session."""

from __future__ import annotations

import factory


class SQLAlchemySession:
    """Store the session provided by the pytest fixture layer."""

    _session = None

    @classmethod
    def set(cls, session):
        """Register the SQLAlchemy session used to persist factory objects."""
        cls._session = session

    @classmethod
    def get(cls):
        """Return the registered SQLAlchemy session.

        Raises
        ------
        RuntimeError
            If factories are used by a test that does not request ``app``.
        """
        if cls._session is None:
            raise RuntimeError("Factories session not set. Did the test request the 'app' fixture?")
        return cls._session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Base class committing factory objects so HTTP requests can see them."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "commit"


from .order import OrderFactory  # noqa: E402
from .organization import OrganizationFactory  # noqa: E402
from .user import UserFactory  # noqa: E402

__all__ = ["BaseFactory", "OrderFactory", "OrganizationFactory", "SQLAlchemySession", "UserFactory"]
