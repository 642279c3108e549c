import pytest


@pytest.fixture
def patient_id(client):
    resp = client.post("/api/v1/patients", json={"name": "Popescu Maria", "clinician_id": 7})
    assert resp.status_code == 201
    return resp.get_json()["id"]


def put_limit(client, patient_id, name, lo, hi):
    return client.put(f"/api/v1/patients/{patient_id}/limits/{name}",
                      json={"min_value": lo, "max_value": hi})


def post_reading(client, patient_id, values, **extra):
    return client.post(f"/api/v1/patients/{patient_id}/readings", json={"values": values, **extra})


def test_health(client):
    assert client.get("/health").get_json() == {"status": "OK"}


def test_reading_raises_alert_and_shows_in_clinician_view(client, patient_id, notifier):
    assert put_limit(client, patient_id, "temperature", 36, 37.5).status_code == 200

    resp = post_reading(client, patient_id, {"temperature": 38.2, "pulse": 80})

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["reading"]["values"] == {"temperature": 38.2, "pulse": 80}
    assert [(a["limit_type"], a["limit_value"], a["value"]) for a in body["alerts"]] == [
        ("maximum", 37.5, 38.2)
    ]

    active = client.get("/api/v1/clinicians/7/alerts").get_json()["results"]
    assert [(a["parameter_name"], a["patient_name"]) for a in active] == [("temperature", "Popescu Maria")]
    assert notifier.calls == [patient_id, patient_id]


def test_limit_upsert_reports_retroactive_alerts(client, patient_id):
    for value in (35, 36.5, 39):
        post_reading(client, patient_id, {"temperature": value})

    body = put_limit(client, patient_id, "temperature", 36, 37.5).get_json()

    assert body["limit"]["parameter_name"] == "temperature"
    assert sorted(a["limit_type"] for a in body["alerts"]) == ["maximum", "minimum"]
    assert put_limit(client, patient_id, "temperature", 36, 37.5).get_json()["alerts"] == []

    alerts = client.get(f"/api/v1/patients/{patient_id}/alerts").get_json()["results"]
    assert len(alerts) == 2


def test_min_above_max_names_the_field(client, patient_id):
    resp = put_limit(client, patient_id, "pulse", 120, 60)

    assert resp.status_code == 400
    assert resp.get_json() == {
        "code": "validation_error",
        "message": "minValue exceeds maxValue",
        "details": {"field": "min_value"},
    }


def test_negative_value_names_the_parameter(client, patient_id):
    resp = post_reading(client, patient_id, {"spo2": -3})

    assert resp.status_code == 400
    assert resp.get_json()["details"] == {"field": "spo2"}


def test_oversized_integer_is_a_validation_error(client, patient_id):
    resp = post_reading(client, patient_id, {"pulse": 10 ** 400})

    assert resp.status_code == 400
    assert resp.get_json()["details"] == {"field": "pulse"}


def test_payload_errors(client, patient_id):
    resp = client.post(f"/api/v1/patients/{patient_id}/readings", data="nope",
                       content_type="text/plain")
    assert resp.status_code == 400

    resp = put_limit(client, patient_id, "pulse", "low", 100)
    assert resp.status_code == 400
    assert "min_value" in resp.get_json()["details"]

    resp = post_reading(client, 999, {"pulse": 70})
    assert resp.status_code == 400
    assert resp.get_json()["details"] == {"field": "patient_id"}


def test_acknowledge_twice(client, patient_id):
    put_limit(client, patient_id, "pulse", 60, 100)
    alert_id = post_reading(client, patient_id, {"pulse": 200}).get_json()["alerts"][0]["id"]

    for _ in range(2):
        resp = client.post(f"/api/v1/alerts/{alert_id}/acknowledge")
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "acknowledged"

    assert client.get("/api/v1/clinicians/7/alerts").get_json()["results"] == []
    assert client.post("/api/v1/alerts/4242/acknowledge").status_code == 404


def test_annotate_and_delete_alerts(client, patient_id):
    put_limit(client, patient_id, "pulse", 60, 100)
    ids = [post_reading(client, patient_id, {"pulse": v}).get_json()["alerts"][0]["id"]
           for v in (110, 120, 130)]

    resp = client.patch(f"/api/v1/alerts/{ids[0]}", json={"patient_note": "after exercise"})
    assert resp.get_json()["patient_note"] == "after exercise"

    assert client.delete(f"/api/v1/alerts/{ids[0]}").status_code == 200

    resp = client.post("/api/v1/alerts/batch-delete", json={"alert_ids": [ids[1], 555]})
    assert resp.status_code == 404
    assert resp.get_json()["details"] == {"missing": [555]}

    resp = client.post("/api/v1/alerts/batch-delete", json={"alert_ids": ids[1:]})
    assert resp.get_json() == {"status": "deleted", "count": 2}
    assert client.get(f"/api/v1/patients/{patient_id}/alerts").get_json()["results"] == []


def test_limit_edit_and_delete_keep_alerts(client, patient_id):
    limit_id = put_limit(client, patient_id, "spo2", 94, 100).get_json()["limit"]["id"]
    post_reading(client, patient_id, {"spo2": 91})

    resp = client.patch(f"/api/v1/limits/{limit_id}", json={"min_value": 95})
    assert resp.get_json()["limit"]["min_value"] == 95
    assert resp.get_json()["alerts"] == []

    assert client.delete(f"/api/v1/limits/{limit_id}").status_code == 200
    assert client.delete(f"/api/v1/limits/{limit_id}").status_code == 404
    assert client.get(f"/api/v1/patients/{patient_id}/limits").get_json()["results"] == []
    assert len(client.get(f"/api/v1/patients/{patient_id}/alerts").get_json()["results"]) == 1


def test_readings_listing_is_chronological(client, patient_id):
    post_reading(client, patient_id, {"pulse": 72}, observed_at="2025-04-15T14:45:00Z")
    post_reading(client, patient_id, {"pulse": 70}, observed_at="2025-04-12T10:30:00Z")

    results = client.get(f"/api/v1/patients/{patient_id}/readings").get_json()["results"]

    assert [r["observed_at"] for r in results] == ["2025-04-12T10:30:00Z", "2025-04-15T14:45:00Z"]


def test_dashboard_and_patient_removal(client, patient_id):
    client.post(f"/api/v1/patients/{patient_id}/recommendations",
                json={"type": "Medication", "description": "Aspirin 75mg"})
    client.patch(f"/api/v1/patients/{patient_id}", json={"allergies": "Peanuts"})
    put_limit(client, patient_id, "pulse", 60, 100)
    post_reading(client, patient_id, {"pulse": 45})

    assert client.get("/api/v1/clinicians/7/dashboard").get_json() == {
        "clinician_id": 7,
        "total_patients": 1,
        "active_alerts_count": 1,
        "patients_with_allergies_count": 1,
        "patients_under_medication_count": 1,
    }

    assert client.delete(f"/api/v1/patients/{patient_id}").status_code == 200
    assert client.get(f"/api/v1/patients/{patient_id}").status_code == 404
    assert client.get("/api/v1/clinicians/7/dashboard").get_json()["total_patients"] == 0


def test_recommendation_update(client, patient_id):
    rec = client.post(f"/api/v1/patients/{patient_id}/recommendations",
                      json={"type": "Diet", "description": "low salt"}).get_json()

    resp = client.patch(f"/api/v1/recommendations/{rec['id']}", json={"description": "low sugar"})

    assert resp.get_json()["description"] == "low sugar"
    listed = client.get(f"/api/v1/patients/{patient_id}/recommendations").get_json()["results"]
    assert [r["description"] for r in listed] == ["low sugar"]
    assert client.patch("/api/v1/recommendations/999", json={"type": "Diet"}).status_code == 404


def test_admin_table_counts(client, patient_id):
    post_reading(client, patient_id, {"pulse": 70})
    counts = client.get("/admin/table-counts").get_json()
    assert counts["patient"] == 1
    assert counts["reading"] == 1
    assert counts["parameter_limit"] == 0
