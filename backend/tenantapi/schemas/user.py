"""User schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from .common import AtLeastOneFieldSchema


class UserSchema(Schema):
    """Public user projection (never includes the password hash)."""

    id = fields.String(required=True)
    email = fields.Email(required=True)
    first_name = fields.String(data_key="firstName", allow_none=True)
    last_name = fields.String(data_key="lastName", allow_none=True)
    organization_id = fields.String(data_key="organizationId")


class UserUpdateSchema(AtLeastOneFieldSchema):
    """Partial update of the caller's own profile."""

    email = fields.Email(validate=validate.Length(max=254))
    first_name = fields.String(data_key="firstName", allow_none=True, validate=validate.Length(max=50))
    last_name = fields.String(data_key="lastName", allow_none=True, validate=validate.Length(max=50))
