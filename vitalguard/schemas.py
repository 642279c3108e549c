# vitalguard/schemas.py
from marshmallow import Schema, fields, validate

class ReadingInSchema(Schema):
    # values are checked by the reading store; non-numbers are kept as "no data"
    values = fields.Dict(keys=fields.String(validate=validate.Length(min=1)),
                         values=fields.Raw(allow_none=True), required=True)
    observed_at = fields.DateTime(load_default=None)

class LimitInSchema(Schema):
    min_value = fields.Float(required=True, allow_nan=False)
    max_value = fields.Float(required=True, allow_nan=False)

class LimitPatchSchema(Schema):
    min_value = fields.Float(allow_nan=False)
    max_value = fields.Float(allow_nan=False)

class AlertPatchSchema(Schema):
    patient_note = fields.String(required=True, allow_none=True)

class AlertBatchDeleteSchema(Schema):
    alert_ids = fields.List(fields.Integer(strict=True), required=True,
                            validate=validate.Length(min=1))

class PatientInSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1))
    clinician_id = fields.Integer(allow_none=True, load_default=None)
    allergies = fields.String(allow_none=True, load_default=None)

class PatientPatchSchema(Schema):
    name = fields.String(validate=validate.Length(min=1))
    clinician_id = fields.Integer(allow_none=True)
    allergies = fields.String(allow_none=True)

class RecommendationInSchema(Schema):
    type = fields.String(required=True, validate=validate.Length(min=1))
    description = fields.String(allow_none=True, load_default=None)

class RecommendationPatchSchema(Schema):
    type = fields.String(validate=validate.Length(min=1))
    description = fields.String(allow_none=True)
