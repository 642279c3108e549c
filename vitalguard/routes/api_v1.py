# vitalguard/routes/api_v1.py
from __future__ import annotations
from flask import Blueprint, request, current_app
from marshmallow import Schema, ValidationError
from ..errors import EngineError
from ..service import MonitoringService
from ..schemas import (
    ReadingInSchema, LimitInSchema, LimitPatchSchema, AlertPatchSchema,
    AlertBatchDeleteSchema, PatientInSchema, PatientPatchSchema,
    RecommendationInSchema, RecommendationPatchSchema,
)

api_v1_bp = Blueprint("api_v1", __name__, url_prefix="/api/v1")


def service() -> MonitoringService:
    return current_app.extensions["vitalguard"]


def error(code: str, http: int, message: str, details=None):
    """Return a consistent JSON error payload with HTTP status."""
    payload = {"code": code, "message": message}
    if details is not None:
        payload["details"] = details
    return payload, http


def load_json(schema: Schema):
    """
    Validate the JSON body against a schema.

    Returns (data, None) on success or (None, error response) on failure,
    so views can bail out early.
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return None, error("validation_error", 400, "Request body must be a JSON object")
    try:
        return schema.load(body), None
    except ValidationError as e:
        return None, error("validation_error", 400, "Invalid payload", e.messages)


@api_v1_bp.errorhandler(EngineError)
def handle_engine_error(e: EngineError):
    if e.http_status >= 500:
        current_app.logger.error("engine error: %s", e.message)
    return e.to_payload(), e.http_status


# --- patients ---

@api_v1_bp.post("/patients")
def create_patient():
    body, resp = load_json(PatientInSchema())
    if resp:
        return resp
    patient = service().create_patient(**body)
    return patient.to_dict(), 201


@api_v1_bp.get("/patients/<int:patient_id>")
def get_patient(patient_id):
    return service().get_patient(patient_id).to_dict(), 200


@api_v1_bp.patch("/patients/<int:patient_id>")
def update_patient(patient_id):
    body, resp = load_json(PatientPatchSchema())
    if resp:
        return resp
    return service().update_patient(patient_id, **body).to_dict(), 200


@api_v1_bp.delete("/patients/<int:patient_id>")
def delete_patient(patient_id):
    """Unassign the patient and delete its readings, limits, alerts and recommendations."""
    service().delete_patient(patient_id)
    return {"status": "deleted"}, 200


# --- readings ---

@api_v1_bp.post("/patients/<int:patient_id>/readings")
def submit_reading(patient_id):
    """Ingest one reading (one or more parameters) and evaluate it against the patient's limits."""
    body, resp = load_json(ReadingInSchema())
    if resp:
        return resp
    reading, raised = service().submit_reading(patient_id, body["values"], body.get("observed_at"))
    return {"reading": reading.to_dict(), "alerts": [a.to_dict() for a in raised]}, 201


@api_v1_bp.get("/patients/<int:patient_id>/readings")
def list_readings(patient_id):
    return {"results": [r.to_dict() for r in service().get_readings(patient_id)]}, 200


# --- limits ---

@api_v1_bp.get("/patients/<int:patient_id>/limits")
def list_limits(patient_id):
    return {"results": [lim.to_dict() for lim in service().get_limits(patient_id)]}, 200


@api_v1_bp.put("/patients/<int:patient_id>/limits/<parameter_name>")
def upsert_limit(patient_id, parameter_name):
    """Create or replace a limit; historical readings are re-evaluated against it."""
    body, resp = load_json(LimitInSchema())
    if resp:
        return resp
    limit, raised = service().upsert_limit(
        patient_id, parameter_name, body["min_value"], body["max_value"]
    )
    return {"limit": limit.to_dict(), "alerts": [a.to_dict() for a in raised]}, 200


@api_v1_bp.patch("/limits/<int:limit_id>")
def update_limit(limit_id):
    body, resp = load_json(LimitPatchSchema())
    if resp:
        return resp
    limit, raised = service().update_limit(limit_id, body.get("min_value"), body.get("max_value"))
    return {"limit": limit.to_dict(), "alerts": [a.to_dict() for a in raised]}, 200


@api_v1_bp.delete("/limits/<int:limit_id>")
def delete_limit(limit_id):
    """Delete a limit. Alerts it raised are kept."""
    service().delete_limit(limit_id)
    return {"status": "deleted"}, 200


# --- alerts ---

@api_v1_bp.get("/patients/<int:patient_id>/alerts")
def list_alerts(patient_id):
    return {"results": [a.to_dict() for a in service().list_alerts(patient_id)]}, 200


@api_v1_bp.post("/alerts/<int:alert_id>/acknowledge")
def acknowledge_alert(alert_id):
    return service().acknowledge_alert(alert_id).to_dict(), 200


@api_v1_bp.patch("/alerts/<int:alert_id>")
def annotate_alert(alert_id):
    body, resp = load_json(AlertPatchSchema())
    if resp:
        return resp
    return service().annotate_alert(alert_id, body["patient_note"]).to_dict(), 200


@api_v1_bp.delete("/alerts/<int:alert_id>")
def delete_alert(alert_id):
    service().delete_alert(alert_id)
    return {"status": "deleted"}, 200


@api_v1_bp.post("/alerts/batch-delete")
def delete_alerts():
    body, resp = load_json(AlertBatchDeleteSchema())
    if resp:
        return resp
    service().delete_alerts(body["alert_ids"])
    return {"status": "deleted", "count": len(set(body["alert_ids"]))}, 200


# --- clinician views ---

@api_v1_bp.get("/clinicians/<int:clinician_id>/alerts")
def list_active_alerts(clinician_id):
    """Active alerts across the clinician's assigned patients, with patient names."""
    return {"results": service().list_active_alerts(clinician_id)}, 200


@api_v1_bp.get("/clinicians/<int:clinician_id>/dashboard")
def dashboard(clinician_id):
    return service().dashboard(clinician_id), 200


# --- recommendations ---

@api_v1_bp.get("/patients/<int:patient_id>/recommendations")
def list_recommendations(patient_id):
    return {"results": [r.to_dict() for r in service().get_recommendations(patient_id)]}, 200


@api_v1_bp.post("/patients/<int:patient_id>/recommendations")
def add_recommendation(patient_id):
    body, resp = load_json(RecommendationInSchema())
    if resp:
        return resp
    rec = service().add_recommendation(patient_id, body["type"], body.get("description"))
    return rec.to_dict(), 201


@api_v1_bp.patch("/recommendations/<int:recommendation_id>")
def update_recommendation(recommendation_id):
    body, resp = load_json(RecommendationPatchSchema())
    if resp:
        return resp
    return service().update_recommendation(recommendation_id, **body).to_dict(), 200
