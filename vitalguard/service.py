# vitalguard/service.py
"""
Orchestration of the alert engine.

Each public method is one synchronous unit of work: write through the
stores, run the evaluator inline on data fetched in the same transaction,
commit, then notify. Known gap: a reading and a limit change for the same
patient and parameter may interleave, so the reading can be judged against
the old limit. The next change to that limit re-scans history; nothing
corrects it automatically.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime

from . import alerts, dashboard, limits, patients, readings
from .errors import NotFoundError
from .evaluator import evaluate_limit_change, evaluate_reading
from .extensions import db
from .models import Alert, Limit, Patient, Reading, Recommendation
from .notifier import NullNotifier, Notifier, send

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work():
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


class MonitoringService:
    def __init__(self, notifier: Notifier | None = None):
        self.notifier = notifier or NullNotifier()

    def _notify(self, patient_id: int) -> None:
        send(self.notifier, patient_id)

    # --- readings ---

    def submit_reading(self, patient_id: int, values: dict, observed_at: datetime | None = None) -> tuple[Reading, list[Alert]]:
        """Store a reading and raise the alerts it triggers. Returns (reading, new alerts)."""
        with unit_of_work():
            reading = readings.record_reading(patient_id, values, observed_at)
            drafts = evaluate_reading(reading, limits.get_limits(patient_id))
            raised = alerts.create_alerts(drafts)
        if raised:
            logger.info(
                "reading %s for patient %s raised %d alert(s): %s",
                reading.id, patient_id, len(raised),
                ", ".join(f"{a.parameter_name}/{a.limit_type}" for a in raised),
            )
        self._notify(patient_id)
        return reading, raised

    def reevaluate_reading(self, reading_id: int) -> list[Alert]:
        """Run a stored reading through the current limits again; only new alerts are returned."""
        with unit_of_work():
            reading = db.session.get(Reading, reading_id)
            if reading is None:
                raise NotFoundError(f"Reading {reading_id} not found")
            drafts = evaluate_reading(reading, limits.get_limits(reading.patient_id))
            raised = alerts.create_alerts(drafts)
        if raised:
            self._notify(reading.patient_id)
        return raised

    def get_readings(self, patient_id: int) -> list[Reading]:
        return readings.get_readings(patient_id)

    # --- limits ---

    def _rescan(self, limit: Limit) -> list[Alert]:
        history = readings.get_readings(limit.patient_id)
        drafts = evaluate_limit_change(limit.patient_id, limit.parameter_name, limit, history)
        raised = alerts.create_alerts(drafts)
        logger.info(
            "limit %s on %s/%s [%s, %s]: %d historical reading(s), %d new alert(s)",
            limit.id, limit.patient_id, limit.parameter_name,
            limit.min_value, limit.max_value, len(history), len(raised),
        )
        return raised

    def upsert_limit(self, patient_id: int, parameter_name: str, min_value, max_value) -> tuple[Limit, list[Alert]]:
        """Create or replace a limit and retroactively evaluate the patient's readings."""
        with unit_of_work():
            limit = limits.upsert_limit(patient_id, parameter_name, min_value, max_value)
            raised = self._rescan(limit)
        self._notify(patient_id)
        return limit, raised

    def update_limit(self, limit_id: int, min_value=None, max_value=None) -> tuple[Limit, list[Alert]]:
        with unit_of_work():
            limit = limits.update_limit(limit_id, min_value, max_value)
            raised = self._rescan(limit)
        self._notify(limit.patient_id)
        return limit, raised

    def get_limits(self, patient_id: int) -> list[Limit]:
        return limits.get_limits(patient_id)

    def delete_limit(self, limit_id: int) -> None:
        """Delete a limit. Alerts raised under it are kept."""
        with unit_of_work():
            limit = limits.delete_limit(limit_id)
            patient_id = limit.patient_id
        self._notify(patient_id)

    # --- alerts ---

    def acknowledge_alert(self, alert_id: int) -> Alert:
        with unit_of_work():
            alert = alerts.acknowledge(alert_id)
        self._notify(alert.patient_id)
        return alert

    def annotate_alert(self, alert_id: int, note: str | None) -> Alert:
        with unit_of_work():
            alert = alerts.annotate(alert_id, note)
        self._notify(alert.patient_id)
        return alert

    def delete_alert(self, alert_id: int) -> None:
        with unit_of_work():
            patient_id = alerts.delete(alert_id).patient_id
        self._notify(patient_id)

    def delete_alerts(self, alert_ids: list[int]) -> None:
        with unit_of_work():
            patient_ids = {a.patient_id for a in alerts.delete_many(alert_ids)}
        for patient_id in sorted(patient_ids):
            self._notify(patient_id)

    def list_alerts(self, patient_id: int) -> list[Alert]:
        patients.get_patient(patient_id)
        return alerts.list_by_patient(patient_id)

    def list_active_alerts(self, clinician_id: int) -> list[dict]:
        """Active alerts of the clinician's patients, with the patient's display name."""
        return [
            {**alert.to_dict(), "patient_name": name}
            for alert, name in alerts.list_active_by_clinician(clinician_id)
        ]

    def dashboard(self, clinician_id: int) -> dict:
        return dashboard.summary(clinician_id)

    # --- patients & recommendations ---

    def create_patient(self, name: str, clinician_id: int | None = None, allergies: str | None = None) -> Patient:
        with unit_of_work():
            patient = patients.create_patient(name, clinician_id, allergies)
        return patient

    def get_patient(self, patient_id: int) -> Patient:
        return patients.get_patient(patient_id)

    def update_patient(self, patient_id: int, **changes) -> Patient:
        with unit_of_work():
            patient = patients.update_patient(patient_id, **changes)
        self._notify(patient_id)
        return patient

    def delete_patient(self, patient_id: int) -> None:
        with unit_of_work():
            patients.delete_patient(patient_id)
        self._notify(patient_id)

    def get_recommendations(self, patient_id: int) -> list[Recommendation]:
        return patients.get_recommendations(patient_id)

    def add_recommendation(self, patient_id: int, type: str, description: str | None = None) -> Recommendation:
        with unit_of_work():
            rec = patients.add_recommendation(patient_id, type, description)
        self._notify(patient_id)
        return rec

    def update_recommendation(self, recommendation_id: int, **changes) -> Recommendation:
        with unit_of_work():
            rec = patients.update_recommendation(recommendation_id, **changes)
        self._notify(rec.patient_id)
        return rec
