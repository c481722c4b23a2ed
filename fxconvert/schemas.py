"""Schemas for API requests and responses."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class HealthStatusSchema(Schema):
    status = fields.String(required=True)
    app = fields.String()


class HealthRatesSchema(Schema):
    status = fields.String(required=True)
    source = fields.String(allow_none=True)
    base_currency = fields.String(allow_none=True)
    last_updated = fields.String(allow_none=True)
    age_seconds = fields.Integer(allow_none=True)
    max_age_seconds = fields.Integer()
    last_failure = fields.String(allow_none=True)
    last_error = fields.String(allow_none=True)


class ConversionQuerySchema(Schema):
    from_code = fields.String(
        required=True, data_key="from", validate=validate.Length(min=1, max=16)
    )
    to_code = fields.String(required=True, data_key="to", validate=validate.Length(min=1, max=16))
    amount = fields.Float(required=True, data_key="v", allow_nan=False)


class ConversionResultSchema(Schema):
    result = fields.Float(required=True)
    from_code = fields.String(required=True, data_key="from")
    to_code = fields.String(required=True, data_key="to")
    amount = fields.Float(required=True)
    timestamp = fields.Integer(required=True)


class RatesSnapshotSchema(Schema):
    base = fields.String(required=True)
    timestamp = fields.Integer(required=True)
    rates = fields.Dict(keys=fields.String(), values=fields.Float(), required=True)


class RefreshAcceptedSchema(Schema):
    message = fields.String(required=True)


class ErrorMessageSchema(Schema):
    message = fields.String(required=True)
    error = fields.String()
