# vitalguard/models.py
from datetime import datetime, timezone
from .extensions import db

LIMIT_MINIMUM = "minimum"
LIMIT_MAXIMUM = "maximum"

STATUS_ACTIVE = "active"
STATUS_ACKNOWLEDGED = "acknowledged"


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso(dt: datetime | None) -> str | None:
    return dt.isoformat() + "Z" if dt else None


class Patient(db.Model):
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String, nullable=False)
    clinician_id = db.Column(db.Integer, index=True)
    allergies = db.Column(db.Text)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "clinician_id": self.clinician_id,
            "allergies": self.allergies,
            "is_active": self.is_active,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


class Recommendation(db.Model):
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    patient_id = db.Column(db.Integer, db.ForeignKey("patient.id"), index=True, nullable=False)
    type = db.Column(db.String, nullable=False)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "patient_id": self.patient_id,
            "type": self.type,
            "description": self.description,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


class Reading(db.Model):
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    patient_id = db.Column(db.Integer, db.ForeignKey("patient.id"), index=True, nullable=False)
    values = db.Column("parameter_values", db.JSON, nullable=False)
    observed_at = db.Column(db.DateTime, index=True, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "patient_id": self.patient_id,
            "values": self.values,
            "observed_at": iso(self.observed_at),
        }


class Limit(db.Model):
    __tablename__ = "parameter_limit"
    __table_args__ = (
        db.UniqueConstraint("patient_id", "parameter_name", name="uq_limit_patient_parameter"),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    patient_id = db.Column(db.Integer, db.ForeignKey("patient.id"), index=True, nullable=False)
    parameter_name = db.Column(db.String, nullable=False)
    min_value = db.Column(db.Float, nullable=False)
    max_value = db.Column(db.Float, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "patient_id": self.patient_id,
            "parameter_name": self.parameter_name,
            "min_value": self.min_value,
            "max_value": self.max_value,
            "updated_at": iso(self.updated_at),
        }


class Alert(db.Model):
    # dedup key: one alert per reading, parameter and side of the range
    __table_args__ = (
        db.UniqueConstraint(
            "triggering_reading_id", "parameter_name", "limit_type", name="uq_alert_dedup"
        ),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    patient_id = db.Column(db.Integer, db.ForeignKey("patient.id"), index=True, nullable=False)
    parameter_name = db.Column(db.String, nullable=False)
    value = db.Column(db.Float, nullable=False)
    limit_value = db.Column(db.Float, nullable=False)
    limit_type = db.Column(db.String, nullable=False)
    status = db.Column(db.String, nullable=False, default=STATUS_ACTIVE, index=True)
    triggering_reading_id = db.Column(db.Integer, db.ForeignKey("reading.id"), nullable=False)
    patient_note = db.Column(db.Text)
    raised_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "patient_id": self.patient_id,
            "parameter_name": self.parameter_name,
            "value": self.value,
            "limit_value": self.limit_value,
            "limit_type": self.limit_type,
            "status": self.status,
            "triggering_reading_id": self.triggering_reading_id,
            "patient_note": self.patient_note,
            "raised_at": iso(self.raised_at),
        }
