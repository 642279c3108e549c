# vitalguard/dashboard.py
"""
Read-only roll-ups for the clinician dashboard.

The allergy and medication counts scan free text and are a best-effort
heuristic, not clinical truth.
"""
from __future__ import annotations

from sqlalchemy import func

from .extensions import db
from .models import STATUS_ACTIVE, Alert, Patient, Recommendation
from .patients import assigned_to

# free-text answers that mean "nothing to report"
NONE_MARKERS = frozenset({"none", "n/a", "na", "no", "-", "nil"})

MEDICATION_TYPE = "medication"


def has_content(text: str | None) -> bool:
    if text is None:
        return False
    cleaned = text.strip().lower().rstrip(".")
    return bool(cleaned) and cleaned not in NONE_MARKERS


def _scoped_patients(clinician_id: int | None):
    q = Patient.query.filter(Patient.is_active)
    if clinician_id is not None:
        q = q.filter(assigned_to(clinician_id))
    return q


def count_active(clinician_id: int) -> int:
    return (
        db.session.query(func.count(Alert.id))
        .select_from(Alert)
        .join(Patient, Alert.patient_id == Patient.id)
        .filter(assigned_to(clinician_id), Alert.status == STATUS_ACTIVE)
        .scalar()
    )


def count_patients(clinician_id: int) -> int:
    return _scoped_patients(clinician_id).count()


def count_with_allergies(clinician_id: int | None = None) -> int:
    return sum(1 for p in _scoped_patients(clinician_id) if has_content(p.allergies))


def count_under_medication(clinician_id: int | None = None) -> int:
    rows = (
        db.session.query(Recommendation.patient_id, Recommendation.description)
        .select_from(Recommendation)
        .join(Patient, Recommendation.patient_id == Patient.id)
        .filter(Patient.is_active, func.lower(Recommendation.type) == MEDICATION_TYPE)
    )
    if clinician_id is not None:
        rows = rows.filter(assigned_to(clinician_id))
    return len({patient_id for patient_id, description in rows if has_content(description)})


def summary(clinician_id: int) -> dict:
    return {
        "clinician_id": clinician_id,
        "total_patients": count_patients(clinician_id),
        "active_alerts_count": count_active(clinician_id),
        "patients_with_allergies_count": count_with_allergies(clinician_id),
        "patients_under_medication_count": count_under_medication(clinician_id),
    }
