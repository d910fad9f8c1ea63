"""Conditional-request helpers built on Werkzeug's ETag support."""

from __future__ import annotations

from flask import Request, Response


def client_has_current(req: Request, etag: str) -> bool:
    """Return ``True`` when ``If-None-Match`` already names ``etag``.

    Weak comparison applies, as RFC 9110 requires for ``If-None-Match``;
    ``*`` matches any current representation.
    """

    return bool(req.if_none_match) and req.if_none_match.contains_weak(etag)


def not_modified(etag: str, headers: dict[str, str] | None = None) -> Response:
    """Build an empty ``304 Not Modified`` carrying the validator."""

    response = Response(status=304)
    response.set_etag(etag)
    for name, value in (headers or {}).items():
        response.headers[name] = value
    return response
