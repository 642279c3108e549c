# vitalguard/patients.py
"""Patient records and clinician recommendations."""
from __future__ import annotations

import logging

from sqlalchemy import and_

from .errors import NotFoundError, ValidationError
from .extensions import db
from .models import Alert, Limit, Patient, Reading, Recommendation

logger = logging.getLogger(__name__)


def create_patient(name: str, clinician_id: int | None = None, allergies: str | None = None) -> Patient:
    if not name or not name.strip():
        raise ValidationError("name must not be empty", field="name")
    patient = Patient(name=name.strip(), clinician_id=clinician_id, allergies=allergies)
    db.session.add(patient)
    db.session.flush()
    return patient


def get_patient(patient_id: int) -> Patient:
    """Return an active patient or raise NotFoundError."""
    patient = db.session.get(Patient, patient_id)
    if patient is None or not patient.is_active:
        raise NotFoundError(f"Patient {patient_id} not found")
    return patient


def require_patient(patient_id: int) -> Patient:
    """Like get_patient, for payloads that name the patient: unknown is invalid input."""
    patient = db.session.get(Patient, patient_id) if patient_id is not None else None
    if patient is None or not patient.is_active:
        raise ValidationError(f"Unknown patient {patient_id}", field="patient_id")
    return patient


def update_patient(patient_id: int, **changes) -> Patient:
    patient = get_patient(patient_id)
    if "name" in changes:
        name = changes["name"]
        if not name or not name.strip():
            raise ValidationError("name must not be empty", field="name")
        changes["name"] = name.strip()
    for key in ("name", "clinician_id", "allergies"):
        if key in changes:
            setattr(patient, key, changes[key])
    db.session.flush()
    return patient


def delete_patient(patient_id: int) -> Patient:
    """
    Soft-delete a patient: unassign it and remove what it owns.

    The patient row stays so historical references keep resolving. Children
    are deleted explicitly, alerts before the readings they point at.
    """
    patient = get_patient(patient_id)
    counts = {}
    for model in (Alert, Limit, Reading, Recommendation):
        counts[model.__tablename__] = (
            db.session.query(model)
            .filter(model.patient_id == patient_id)
            .delete(synchronize_session=False)
        )
    patient.clinician_id = None
    patient.is_active = False
    db.session.flush()
    logger.info("patient %s removed, cascade: %s", patient_id, counts)
    return patient


def get_recommendations(patient_id: int) -> list[Recommendation]:
    get_patient(patient_id)
    return (
        Recommendation.query.filter_by(patient_id=patient_id)
        .order_by(Recommendation.created_at.desc(), Recommendation.id.desc())
        .all()
    )


def add_recommendation(patient_id: int, type: str, description: str | None = None) -> Recommendation:
    require_patient(patient_id)
    if not type or not type.strip():
        raise ValidationError("type must not be empty", field="type")
    rec = Recommendation(patient_id=patient_id, type=type.strip(), description=description)
    db.session.add(rec)
    db.session.flush()
    return rec


def update_recommendation(recommendation_id: int, **changes) -> Recommendation:
    rec = db.session.get(Recommendation, recommendation_id)
    if rec is None:
        raise NotFoundError(f"Recommendation {recommendation_id} not found")
    if "type" in changes:
        if not changes["type"] or not changes["type"].strip():
            raise ValidationError("type must not be empty", field="type")
        rec.type = changes["type"].strip()
    if "description" in changes:
        rec.description = changes["description"]
    db.session.flush()
    return rec


def assigned_to(clinician_id: int):
    """
    Predicate for patients visible in a clinician's roll-ups.

    Unassigned patients still own readings and alerts but never match.
    """
    return and_(
        Patient.clinician_id.isnot(None),
        Patient.clinician_id == clinician_id,
        Patient.is_active,
    )
