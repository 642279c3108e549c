import pytest

from vitalguard import create_app
from vitalguard.config import TestingConfig
from vitalguard.extensions import db


class RecordingNotifier:
    def __init__(self):
        self.calls = []

    def notify(self, patient_id):
        self.calls.append(patient_id)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def app(notifier):
    app = create_app(TestingConfig, notifier=notifier)
    with app.app_context():
        db.create_all()
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    """App context for tests that drive the service directly (not via HTTP)."""
    with app.app_context():
        yield
        db.session.remove()


@pytest.fixture
def svc(app, ctx):
    return app.extensions["vitalguard"]


@pytest.fixture
def patient(svc):
    return svc.create_patient("Popescu Maria", clinician_id=1, allergies="Penicillin")
