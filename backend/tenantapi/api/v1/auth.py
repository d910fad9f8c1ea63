"""Authentication endpoints: register, login, token refresh, logout and me."""

from __future__ import annotations

from flask import Blueprint, current_app, request
from flask_jwt_extended import get_jwt_identity

from tenantapi.api.deps import json_response, require_auth, timing
from tenantapi.core.extensions import limiter
from tenantapi.infra import get_refresh_token_store, get_token_authority
from tenantapi.schemas import (
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
)
from tenantapi.services.auth.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn
from tenantapi.services.auth.service import AuthService

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
token_schema = TokenPairSchema()
user_schema = UserSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


def _auth_service() -> AuthService:
    return AuthService(authority=get_token_authority(), refresh_store=get_refresh_token_store())


def _token_body() -> dict:
    # Anything but a JSON object carries no token field
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


@bp.post("/register")
@timing
def register():
    """Create a user in an existing organization and return a token pair."""

    payload = register_schema.load(request.get_json(silent=True) or {})
    result = _auth_service().register(RegisterIn(**payload))
    body = {
        "message": "User created successfully",
        "user": user_schema.dump(result.user),
        "token": result.tokens.access_token,
        "refreshToken": result.tokens.refresh_token,
    }
    return json_response(body, status=201)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and start a new token family."""

    data = login_schema.load(request.get_json(silent=True) or {})
    result = _auth_service().login(LoginIn(**data))
    body = {
        "message": "Login successful",
        "user": user_schema.dump(result.user),
        "token": result.tokens.access_token,
        "refreshToken": result.tokens.refresh_token,
    }
    return json_response(body)


@bp.post("/refresh")
@timing
def refresh():
    """Exchange a refresh token for a new access/refresh pair."""

    data = refresh_schema.load(_token_body())
    pair = _auth_service().refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response(token_schema.dump(pair))


@bp.post("/logout")
@timing
def logout():
    """Revoke the family of the presented refresh token."""

    data = refresh_schema.load(_token_body())
    _auth_service().logout(LogoutIn(refresh_token=data["refresh_token"]))
    return json_response({"message": "Logged out successfully"})


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user profile."""

    user = _auth_service().me(str(get_jwt_identity()))
    return json_response({"user": user_schema.dump(user)})
