# vitalguard/limits.py
"""
Per-patient, per-parameter threshold configuration.

A pure data holder: storing a limit never evaluates anything. The monitoring
service runs the retroactive scan after a successful upsert or update.
"""
from __future__ import annotations

import logging
import math

from sqlalchemy.exc import IntegrityError

from .errors import NotFoundError, ValidationError
from .extensions import db
from .models import Limit
from .patients import get_patient, require_patient

logger = logging.getLogger(__name__)


def validate_range(min_value, max_value) -> tuple[float, float]:
    for field, value in (("min_value", min_value), ("max_value", max_value)):
        if value is None or isinstance(value, bool):
            raise ValidationError(f"{field} is required", field=field)
    bounds = []
    for field, value in (("min_value", min_value), ("max_value", max_value)):
        try:
            value = float(value)
        except (TypeError, ValueError, OverflowError):
            raise ValidationError(f"{field} must be a number", field=field)
        if math.isnan(value) or math.isinf(value):
            raise ValidationError(f"{field} must be a finite number", field=field)
        bounds.append(value)
    min_value, max_value = bounds
    if min_value > max_value:
        raise ValidationError("minValue exceeds maxValue", field="min_value")
    return min_value, max_value


def get_limits(patient_id: int) -> list[Limit]:
    get_patient(patient_id)
    return Limit.query.filter_by(patient_id=patient_id).order_by(Limit.parameter_name).all()


def get_limit(patient_id: int, parameter_name: str) -> Limit | None:
    return Limit.query.filter_by(patient_id=patient_id, parameter_name=parameter_name).first()


def upsert_limit(patient_id: int, parameter_name: str, min_value, max_value) -> Limit:
    """Create or replace the single limit of (patient_id, parameter_name)."""
    require_patient(patient_id)
    if not parameter_name or not parameter_name.strip():
        raise ValidationError("parameter_name must not be empty", field="parameter_name")
    parameter_name = parameter_name.strip()
    min_value, max_value = validate_range(min_value, max_value)

    limit = get_limit(patient_id, parameter_name)
    if limit is None:
        limit = Limit(
            patient_id=patient_id,
            parameter_name=parameter_name,
            min_value=min_value,
            max_value=max_value,
        )
        try:
            with db.session.begin_nested():
                db.session.add(limit)
        except IntegrityError:
            # a concurrent request inserted the pair first; edit its row
            logger.info("limit %s/%s created concurrently, updating", patient_id, parameter_name)
            limit = get_limit(patient_id, parameter_name)
            if limit is None:
                raise
        else:
            return limit

    limit.min_value = min_value
    limit.max_value = max_value
    db.session.flush()
    return limit


def update_limit(limit_id: int, min_value=None, max_value=None) -> Limit:
    """Edit an existing limit; omitted bounds keep their current value."""
    limit = db.session.get(Limit, limit_id)
    if limit is None:
        raise NotFoundError(f"Limit {limit_id} not found")
    min_value, max_value = validate_range(
        limit.min_value if min_value is None else min_value,
        limit.max_value if max_value is None else max_value,
    )
    limit.min_value = min_value
    limit.max_value = max_value
    db.session.flush()
    return limit


def delete_limit(limit_id: int) -> Limit:
    """Remove a limit. Alerts it raised stay where they are."""
    limit = db.session.get(Limit, limit_id)
    if limit is None:
        raise NotFoundError(f"Limit {limit_id} not found")
    db.session.delete(limit)
    db.session.flush()
    return limit
