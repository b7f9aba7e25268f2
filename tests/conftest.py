"""Shared fixtures: an in-memory mongomock database and a notifier that records instead of sending."""

import mongomock
import pytest
from fastapi.testclient import TestClient

from auth import create_token
from config import Settings
from database import TREATMENTS, USERS
from main import create_app
from notifications import Notifier


class RecordingNotifier(Notifier):
    def __init__(self, settings, fail=False, on_failure=None):
        super().__init__("test-key", settings.email_sender, settings.business_name, on_failure=on_failure)
        self.sent = []
        self.fail = fail

    def deliver(self, message):
        if self.fail:
            raise RuntimeError("mail server down")
        self.sent.append(message)


@pytest.fixture
def settings():
    return Settings(jwt_token_secret="test-secret", stripe_secret_key="sk_test_123")


@pytest.fixture
def db():
    return mongomock.MongoClient().db


@pytest.fixture
def notifier(settings):
    return RecordingNotifier(settings)


@pytest.fixture
def client(settings, db, notifier):
    app = create_app(settings, db=db, notifier=notifier)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_header(settings):
    def make(email):
        return {"Authorization": f"Bearer {create_token(email, settings)}"}
    return make


@pytest.fixture
def admin_headers(db, auth_header):
    db[USERS].insert_one({"email": "admin@clinic.com", "role": "admin"})
    return auth_header("admin@clinic.com")


@pytest.fixture
def cleaning(db):
    db[TREATMENTS].insert_one({"name": "Cleaning", "price": 50.0, "slots": ["9am", "10am", "11am"], "image": None})
    db[TREATMENTS].insert_one({"name": "Whitening", "price": 120.0, "slots": ["9am", "2pm"], "image": "w.png"})
