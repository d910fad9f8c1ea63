"""WSGI entry point for gunicorn: ``gunicorn tenantapi.wsgi:app``."""

from __future__ import annotations

from tenantapi.factory import create_app

app = create_app()
