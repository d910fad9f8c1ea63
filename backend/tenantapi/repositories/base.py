"""Generic repository base and query utilities for SQLAlchemy 2.x.

This module centralizes persistence-only concerns shared by all repositories:
- Strongly-typed pagination and sorting helpers.
- Safe sorting with a whitelist mapping (prevents SQL injection).
- Deterministic pagination (adds primary-key tiebreaker).
- Whitelisted equality filters and updatable fields.
- Conditional bulk updates returning the affected row count.
- No business logic, no commit/rollback; services own transactions.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, and_, func, select, update
from sqlalchemy.orm import InstrumentedAttribute, Session

from tenantapi.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


# ------------------------------- Pagination ----------------------------------


@dataclass(slots=True)
class Pagination:
    """Pagination input parameters.

    :param page: 1-based page number (validated to be ``>= 1``).
    :type page: int
    :param limit: Page size (validated to be ``>= 1``).
    :type limit: int
    :param sort: Public sort tokens (e.g., ``["-created_at", "name"]``).
    :type sort: list[str]
    """

    page: int
    limit: int
    sort: list[str]


@dataclass(slots=True)
class Page(Generic[E]):
    """Result page with metadata.

    :param items: Listed entities in the current page.
    :param total: Total item count for the query.
    :param page: 1-based current page number.
    :param limit: Page size.
    """

    items: Sequence[E]
    total: int
    page: int
    limit: int


# ----------------------------- Sorting utilities -----------------------------


def parse_sort_tokens(raw: Iterable[str]) -> list[tuple[str, bool]]:
    """Parse public sort tokens into ``(field, is_desc)`` tuples.

    :param raw: Public tokens like ``["-created_at", "name"]``.
    :type raw: Iterable[str]
    :returns: List of ``(field_name, is_desc)`` tokens.
    :rtype: list[tuple[str, bool]]
    """
    parsed: list[tuple[str, bool]] = []
    for token in raw:
        is_desc = token.startswith("-")
        field = (token[1:] if is_desc else token).strip()
        if field:
            parsed.append((field, is_desc))
    return parsed


def _apply_sorting(
    stmt: Select[Any],
    sortable_fields: Mapping[str, InstrumentedAttribute[Any]],
    tokens: Iterable[str],
    *,
    pk_attr: InstrumentedAttribute[Any] | None,
) -> Select[Any]:
    """Apply safe ``ORDER BY`` clauses based on a whitelist mapping.

    Unknown sort tokens are ignored silently. The model's primary key is always
    appended as a final ascending tiebreaker to stabilize pagination.
    """
    orders: list[Any] = []
    for field, is_desc in parse_sort_tokens(tokens):
        col = sortable_fields.get(field)
        if isinstance(col, InstrumentedAttribute):
            orders.append(col.desc() if is_desc else col.asc())

    if orders:
        stmt = stmt.order_by(*orders)

    if pk_attr is not None:
        stmt = stmt.order_by(pk_attr.asc())

    return stmt


# --------------------------- Pagination execution ----------------------------


def paginate_select(
    session: Session,
    stmt: Select[Any],
    *,
    page: int,
    limit: int,
) -> tuple[list[Any], int]:
    """Execute a select with page/limit slicing and a total count.

    The statement's existing ``ORDER BY`` is stripped for the ``COUNT`` to avoid
    unnecessary sorting overhead.

    :returns: Tuple of ``(items, total)``.
    :rtype: tuple[list[Any], int]
    """
    page = max(int(page), 1)
    limit = max(int(limit), 1)

    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = int(session.execute(count_stmt).scalar_one())

    offset = (page - 1) * limit
    sliced = stmt.limit(limit).offset(offset)
    items = list(session.execute(sliced).scalars().all())
    return items, total


# ------------------------------ Base repository ------------------------------


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define ``model``. They MAY override ``_sortable_fields``,
    ``_filterable_fields`` and ``_updatable_fields`` to expose safe keys.

    This class NEVER opens/commits/rolls back transactions and never
    implements business rules.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        When no explicit session is provided the repository falls back to the
        Flask-scoped session exposed by ``tenantapi.core.extensions``.
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Return the injected session or the Flask-scoped one."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Extensibility ----------------------------

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Whitelist mapping of public sort keys to model attributes."""
        return {}

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Whitelist of equality-filterable fields. Unknown keys are rejected."""
        return {}

    def _updatable_fields(self) -> set[str]:
        """Whitelist of public keys that can be assigned on update."""
        return set()

    # ------------------------------ Internals --------------------------------

    def _where_clause(self, filters: Mapping[str, Any]) -> Any:
        """Build an ``AND`` of equality clauses over whitelisted fields.

        :raises ValueError: If a filter key is not whitelisted.
        """
        allowed = self._filterable_fields()
        clauses: list[Any] = []
        for key, value in filters.items():
            col = allowed.get(key)
            if col is None:
                raise ValueError(f"Unknown or non-filterable field: {key}")
            clauses.append(col == value)
        return and_(*clauses)

    def _apply_equality_filters(
        self, stmt: Select[Any], filters: Mapping[str, Any] | None
    ) -> Select[Any]:
        if not filters:
            return stmt
        return stmt.where(self._where_clause(filters))

    def _sanitize_update_fields(
        self, fields: Mapping[str, Any], *, strict: bool = True
    ) -> dict[str, Any]:
        """Return a dict with only whitelisted update keys.

        :raises ValueError: If ``strict`` and unknown keys are present.
        """
        allowed = self._updatable_fields()
        unknown = [k for k in fields if k not in allowed]
        if unknown and strict:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")
        return {k: v for k, v in fields.items() if k in allowed}

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity and flush to materialize defaults."""
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Retrieve a single entity by primary key."""
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get requires a detectable PK attribute.")
        result = self.session.execute(select(self.model).where(pk_attr == entity_id))
        return cast(E | None, result.scalars().first())

    def find_one(self, **filters: Any) -> E | None:
        """Find a single entity by whitelisted equality filters."""
        stmt = self._apply_equality_filters(select(self.model), filters)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def count_where(self, **filters: Any) -> int:
        """Count rows matching whitelisted equality filters."""
        stmt = self._apply_equality_filters(select(func.count()).select_from(self.model), filters)
        return int(self.session.execute(stmt).scalar_one())

    def delete(self, instance: E) -> None:
        """Delete an entity and flush changes."""
        self.session.delete(instance)
        self.flush()

    def flush(self) -> None:
        self.session.flush()

    # ----------------------------- Safe updates -------------------------------

    def assign_updates(
        self,
        instance: E,
        fields: Mapping[str, Any],
        *,
        strict: bool = True,
        flush: bool = True,
    ) -> E:
        """Assign only whitelisted keys to ``instance`` and optionally flush.

        The assignment uses ``setattr`` to trigger SQLAlchemy ``@validates``
        decorators defined on the mapped class.
        """
        updates = self._sanitize_update_fields(fields, strict=strict)
        for k, v in updates.items():
            setattr(instance, k, v)
        if flush:
            self.flush()
        return instance

    def update_where(self, filters: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        """Issue a single ``UPDATE ... WHERE`` and return the affected row count.

        The statement is evaluated by the database in one step, so callers can
        use it as a compare-and-swap: include the expected current value in
        ``filters`` and check the returned count.

        :param filters: Whitelisted equality filters (must not be empty).
        :type filters: Mapping[str, Any]
        :param values: Whitelisted columns to assign.
        :type values: Mapping[str, Any]
        :returns: Number of rows changed.
        :rtype: int
        :raises ValueError: On empty filters or non-whitelisted keys.
        """
        if not filters:
            raise ValueError("update_where requires at least one filter.")
        assignments = self._sanitize_update_fields(values, strict=True)
        if not assignments:
            return 0
        stmt = (
            update(self.model)
            .where(self._where_clause(filters))
            .values(**assignments)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return int(result.rowcount or 0)

    # ------------------------------- Listing ---------------------------------

    def list(
        self,
        *,
        filters: Mapping[str, Any] | None = None,
        sort: Iterable[str] | None = None,
    ) -> list[E]:
        """List entities with optional filtering and stable sorting."""
        stmt: Select[Any] = self._apply_equality_filters(select(self.model), filters)
        stmt = _apply_sorting(stmt, self._sortable_fields(), sort or [], pk_attr=self._pk_attr())
        return cast(list[E], list(self.session.execute(stmt).scalars().all()))

    def paginate(
        self,
        pagination: Pagination,
        *,
        filters: Mapping[str, Any] | None = None,
    ) -> Page[E]:
        """Paginate entities with stable sorting and a total count.

        :param pagination: Pagination parameters.
        :type pagination: Pagination
        :param filters: Equality filters (public keys).
        :type filters: Mapping[str, Any] | None
        :returns: :class:`Page` with items and metadata.
        :rtype: Page[E]
        """
        stmt: Select[Any] = self._apply_equality_filters(select(self.model), filters)
        stmt = _apply_sorting(
            stmt, self._sortable_fields(), pagination.sort, pk_attr=self._pk_attr()
        )
        raw_items, total = paginate_select(
            self.session, stmt, page=pagination.page, limit=pagination.limit
        )
        return Page(
            items=cast(list[E], raw_items),
            total=total,
            page=max(int(pagination.page), 1),
            limit=max(int(pagination.limit), 1),
        )
