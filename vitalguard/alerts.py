# vitalguard/alerts.py
"""
Raised alerts and their lifecycle.

Inserts are de-duplicated by the database: the unique constraint on
(triggering_reading_id, parameter_name, limit_type) decides, inside a
SAVEPOINT, whether a draft becomes a new row. Checking first and inserting
afterwards would let two concurrent evaluations both insert.
"""
from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy.exc import IntegrityError

from .errors import ConflictError, NotFoundError, ValidationError
from .evaluator import AlertDraft
from .extensions import db
from .models import STATUS_ACKNOWLEDGED, STATUS_ACTIVE, Alert, Patient
from .patients import assigned_to

logger = logging.getLogger(__name__)


def find_by_dedup_key(reading_id: int, parameter_name: str, limit_type: str) -> Alert | None:
    return Alert.query.filter_by(
        triggering_reading_id=reading_id,
        parameter_name=parameter_name,
        limit_type=limit_type,
    ).first()


def _insert(draft: AlertDraft) -> Alert:
    alert = Alert(
        patient_id=draft.patient_id,
        parameter_name=draft.parameter_name,
        value=draft.value,
        limit_value=draft.limit_value,
        limit_type=draft.limit_type,
        status=STATUS_ACTIVE,
        triggering_reading_id=draft.triggering_reading_id,
    )
    try:
        with db.session.begin_nested():
            db.session.add(alert)
    except IntegrityError as exc:
        raise ConflictError(f"Alert already exists for {draft.dedup_key}") from exc
    return alert


def create_alert(draft: AlertDraft) -> tuple[Alert, bool]:
    """
    Insert the alert for a draft unless its dedup key already exists.

    Returns (alert, created). A collision is success: the existing row is
    returned with created=False.
    """
    try:
        return _insert(draft), True
    except ConflictError:
        existing = find_by_dedup_key(*draft.dedup_key)
        if existing is None:
            raise
        logger.debug("alert %s already raised for %s", existing.id, draft.dedup_key)
        return existing, False


def create_alerts(drafts: Iterable[AlertDraft]) -> list[Alert]:
    """Insert drafts and return only the alerts that are new."""
    created = []
    for draft in drafts:
        alert, is_new = create_alert(draft)
        if is_new:
            created.append(alert)
    return created


def get_alert(alert_id: int) -> Alert:
    alert = db.session.get(Alert, alert_id)
    if alert is None:
        raise NotFoundError(f"Alert {alert_id} not found")
    return alert


def acknowledge(alert_id: int) -> Alert:
    """Mark an alert acknowledged. Acknowledging twice is a no-op."""
    alert = get_alert(alert_id)
    if alert.status != STATUS_ACKNOWLEDGED:
        alert.status = STATUS_ACKNOWLEDGED
        db.session.flush()
    return alert


def annotate(alert_id: int, note: str | None) -> Alert:
    alert = get_alert(alert_id)
    alert.patient_note = note.strip() if note and note.strip() else None
    db.session.flush()
    return alert


def delete(alert_id: int) -> Alert:
    alert = get_alert(alert_id)
    db.session.delete(alert)
    db.session.flush()
    return alert


def delete_many(alert_ids: Iterable[int]) -> list[Alert]:
    """Delete all given alerts, or none of them if any id is unknown."""
    ids = list(dict.fromkeys(alert_ids))
    if not ids:
        raise ValidationError("alert_ids must not be empty", field="alert_ids")
    alerts = Alert.query.filter(Alert.id.in_(ids)).all()
    missing = sorted(set(ids) - {a.id for a in alerts})
    if missing:
        raise NotFoundError("Some alerts were not found", details={"missing": missing})
    for alert in alerts:
        db.session.delete(alert)
    db.session.flush()
    return alerts


def list_by_patient(patient_id: int) -> list[Alert]:
    return (
        Alert.query.filter_by(patient_id=patient_id)
        .order_by(Alert.raised_at.desc(), Alert.id.desc())
        .all()
    )


def list_active_by_clinician(clinician_id: int) -> list[tuple[Alert, str]]:
    return (
        db.session.query(Alert, Patient.name)
        .join(Patient, Alert.patient_id == Patient.id)
        .filter(assigned_to(clinician_id), Alert.status == STATUS_ACTIVE)
        .order_by(Alert.raised_at.desc(), Alert.id.desc())
        .all()
    )
