import pytest

from vitalguard import dashboard
from vitalguard.dashboard import has_content


@pytest.mark.parametrize("text,expected", [
    ("Penicillin", True),
    ("  pollen, dust ", True),
    ("none", False),
    ("None.", False),
    ("N/A", False),
    ("-", False),
    ("   ", False),
    ("", False),
    (None, False),
])
def test_has_content(text, expected):
    assert has_content(text) is expected


@pytest.fixture
def ward(svc):
    a = svc.create_patient("Popescu Maria", clinician_id=1, allergies="Penicillin")
    b = svc.create_patient("Ionescu Dan", clinician_id=1, allergies="none")
    c = svc.create_patient("Dumitrescu Ana", allergies="Latex")
    d = svc.create_patient("Georgescu Elena", clinician_id=2, allergies="Aspirin")

    svc.add_recommendation(a.id, "Medication", "Paracetamol 500mg")
    svc.add_recommendation(a.id, "medication", "Ibuprofen")
    svc.add_recommendation(b.id, "Medication", "None")
    svc.add_recommendation(b.id, "Diet", "low salt")
    svc.add_recommendation(c.id, "Medication", "Metformin")

    for p in (a, b, c, d):
        svc.upsert_limit(p.id, "spo2", 94, 100)
        svc.submit_reading(p.id, {"spo2": 88})
    return a, b, c, d


def test_counts_are_scoped_to_assigned_patients(svc, ward):
    a, b, c, d = ward

    assert dashboard.count_patients(1) == 2
    assert dashboard.count_active(1) == 2
    assert dashboard.count_with_allergies(1) == 1
    assert dashboard.count_under_medication(1) == 1


def test_unscoped_heuristics_cover_every_active_patient(svc, ward):
    assert dashboard.count_with_allergies() == 3
    assert dashboard.count_under_medication() == 2


def test_acknowledged_alerts_leave_the_active_count(svc, ward):
    a = ward[0]
    (alert,) = svc.list_alerts(a.id)
    svc.acknowledge_alert(alert.id)

    assert dashboard.count_active(1) == 1


def test_summary_after_soft_delete(svc, ward):
    a = ward[0]
    svc.delete_patient(a.id)

    assert svc.dashboard(1) == {
        "clinician_id": 1,
        "total_patients": 1,
        "active_alerts_count": 1,
        "patients_with_allergies_count": 0,
        "patients_under_medication_count": 0,
    }
    assert dashboard.count_patients(99) == 0
