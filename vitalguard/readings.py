# vitalguard/readings.py
"""Append-only store of parameter observations."""
from __future__ import annotations

import math
from datetime import datetime, timezone
from numbers import Real

from .errors import ValidationError
from .extensions import db
from .models import Reading
from .patients import get_patient, require_patient


def validate_values(values) -> dict:
    """
    Reject physiologically impossible numbers.

    Negative, NaN and infinite numbers fail the whole reading. None and
    non-numeric values are kept as sent; the evaluator treats them as no data.
    """
    if not isinstance(values, dict) or not values:
        raise ValidationError("values must be a non-empty object", field="values")
    for name, raw in values.items():
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("parameter names must be non-empty strings", field="values")
        if isinstance(raw, bool) or not isinstance(raw, Real):
            continue
        try:
            value = float(raw)
        except OverflowError:
            raise ValidationError(f"{name} is not a finite number", field=name)
        if math.isnan(value) or math.isinf(value):
            raise ValidationError(f"{name} is not a finite number", field=name)
        if value < 0:
            raise ValidationError(f"{name} must not be negative", field=name)
    return dict(values)


def record_reading(patient_id: int, values: dict, observed_at: datetime | None = None) -> Reading:
    require_patient(patient_id)
    clean = validate_values(values)
    reading = Reading(patient_id=patient_id, values=clean)
    if observed_at is not None:
        # stored naive UTC like every other timestamp
        if observed_at.tzinfo is not None:
            observed_at = observed_at.astimezone(timezone.utc).replace(tzinfo=None)
        reading.observed_at = observed_at
    db.session.add(reading)
    db.session.flush()
    return reading


def get_readings(patient_id: int) -> list[Reading]:
    """All readings of a patient, oldest first; ties keep insertion order."""
    get_patient(patient_id)
    return (
        Reading.query.filter_by(patient_id=patient_id)
        .order_by(Reading.observed_at.asc(), Reading.id.asc())
        .all()
    )
