# Test configuration and fixtures
import os

# Config reads the signing secret at import time
os.environ.setdefault("JWT_SECRET_KEY", "test-signing-secret-0123456789abcdef0123")

from datetime import datetime, timedelta

import pytest

from app import create_app
from config import TestConfig
from models.database import db, Account, AccountStatus
from services.accounts import AccountService
from services.errors import DependencyUnavailable
from services.incidents import IncidentService


ADMIN_PASSWORD = "Adm1n#Portal"
DEALER_PASSWORD = "Dealer#2024"


class RecordingNotifier:
    """Stands in for SMTP: keeps every message it is asked to send."""

    def __init__(self):
        self.sent = []
        self.available = True
        self.fail_send = False

    def is_available(self):
        return self.available

    def send(self, message):
        if self.fail_send:
            raise DependencyUnavailable("Failed to send email", reason="email_delivery_failed")
        self.sent.append(message)

    @property
    def last(self):
        return self.sent[-1] if self.sent else None


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 2, 9, 30))


@pytest.fixture
def app(notifier, clock):
    app = create_app(TestConfig, notifier=notifier, clock=clock)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def accounts(app, notifier, clock):
    return AccountService(db.session, notifier, app.config, clock=clock)


@pytest.fixture
def incidents(app, clock):
    return IncidentService(db.session, app.config, clock=clock)


@pytest.fixture
def make_account(app):
    def _make(username="1234567", password=DEALER_PASSWORD, email="dealer@example.com",
              status=AccountStatus.ACTIVE.value):
        account = Account(username=username, email=email, status=status)
        account.set_password(password)
        db.session.add(account)
        db.session.commit()
        return account
    return _make


def _login(client, username, password):
    resp = client.post("/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}


@pytest.fixture
def admin_headers(client, accounts):
    accounts.ensure_admin(ADMIN_PASSWORD, email="admin@example.com")
    return _login(client, "admin", ADMIN_PASSWORD)


@pytest.fixture
def dealer_headers(client, make_account):
    make_account()
    return _login(client, "1234567", DEALER_PASSWORD)


@pytest.fixture
def sample_incident():
    """Help-form payload as the SPA submits it"""
    return {
        "dealerCode": "7654321",
        "location": "Chennai",
        "region": "SOUTH 1",
        "issue": "Not able to Login",
        "email": "store@example.com",
        "contactNo": "9876543210",
        "screenshot": "data:image/png;base64,iVBORw0KGgo=",
        "reportedAt": "2026-03-01T10:15:00.000Z",
        "checked": False,
    }
