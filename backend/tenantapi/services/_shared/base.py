# tenantapi/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass

from tenantapi.core import errors as api_errors
from tenantapi.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ServiceError,
)
from tenantapi.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork


@dataclass(slots=True)
class ServiceContext:
    """
    Carry request-scoped data (authenticated actor and tenant).

    :param actor_id: Authenticated user identifier.
    :param tenant_id: Organization the actor belongs to.
    """

    actor_id: str | None = None
    tenant_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide a helper to run read-write units of work.
    * Resolve the caller's tenant for tenant-scoped queries.
    * Keep services thin, orchestration-only, no web/ORM leakage.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def require_tenant(self) -> str:
        """Return the caller's tenant or fail closed when it is unknown."""
        if not self.ctx.tenant_id:
            raise api_errors.Forbidden("Organization context required")
        return self.ctx.tenant_id


def translate_service_error(exc: ServiceError) -> api_errors.APIError:
    """
    Map domain/service-level errors to API-level (HTTP) errors.

    :param exc: Exception raised within the service.
    :type exc: ServiceError
    :returns: Translated exception ready to be rendered.
    :rtype: APIError
    """
    if isinstance(exc, AuthenticationError):
        # → 401 with the specific failure code
        return api_errors.Unauthorized(str(exc), code=exc.code)

    if isinstance(exc, NotFoundError):
        return api_errors.NotFound(str(exc))

    if isinstance(exc, ConflictError):
        return api_errors.Conflict(str(exc))

    # Any other ServiceError subclass → 400 Bad Request with its own code
    return api_errors.APIError(message=str(exc), status_code=400, code=exc.code)
