"""Organization schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from .common import AtLeastOneFieldSchema


class OrganizationSchema(Schema):
    id = fields.String(required=True)
    name = fields.String(required=True)
    industry = fields.String(allow_none=True)
    date_founded = fields.Date(data_key="dateFounded", allow_none=True)


class OrganizationCreateSchema(Schema):
    """Input payload for creating an organization."""

    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    industry = fields.String(load_default=None, validate=validate.Length(max=100))
    date_founded = fields.Date(data_key="dateFounded", load_default=None)


class OrganizationUpdateSchema(AtLeastOneFieldSchema):
    name = fields.String(validate=validate.Length(min=1, max=100))
    industry = fields.String(allow_none=True, validate=validate.Length(max=100))
    date_founded = fields.Date(data_key="dateFounded", allow_none=True)
