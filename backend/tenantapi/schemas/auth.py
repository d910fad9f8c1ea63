"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))
    first_name = fields.String(
        data_key="firstName", load_default=None, validate=validate.Length(max=50)
    )
    last_name = fields.String(
        data_key="lastName", load_default=None, validate=validate.Length(max=50)
    )
    organization_name = fields.String(
        data_key="organizationName", required=True, validate=validate.Length(min=1, max=100)
    )


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshTokenSchema(Schema):
    """Body of ``/auth/refresh`` and ``/auth/logout``.

    The field is optional at the schema level: an absent token is reported by
    the auth service as ``missing_token`` and a malformed one as an invalid
    token, never as a validation error.
    """

    refresh_token = fields.Raw(data_key="refreshToken", load_default=None, allow_none=True)


class TokenPairSchema(Schema):
    """Response payload for a rotated token pair."""

    access_token = fields.String(data_key="token", required=True)
    refresh_token = fields.String(data_key="refreshToken", required=True)
