"""Order schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class OrderSchema(Schema):
    id = fields.String(required=True)
    total_amount = fields.Float(data_key="totalAmount", required=True)
    user_id = fields.String(data_key="userId")
    organization_id = fields.String(data_key="organizationId")


class OrderWriteSchema(Schema):
    """Input payload for creating or updating an order."""

    total_amount = fields.Float(
        data_key="totalAmount",
        required=True,
        validate=validate.Range(min=0, min_inclusive=False),
    )
