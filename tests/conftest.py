import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))
# Settings are read at import time, so the required variables must exist
# before any application module is imported.
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGODB_DB", "webinar_test")
os.environ.setdefault("JWT_SECRET", "test-secret")

from fastapi.testclient import TestClient

from core.security import create_access_token
from fakes import FakeRegistrantStore, FakeAdminStore, FakeMailer
from main import create_app


@pytest.fixture
def registrants():
    return FakeRegistrantStore()


@pytest.fixture
def admins():
    return FakeAdminStore()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def app(registrants, admins, mailer):
    return create_app(registrants=registrants, admins=admins, mailer=mailer)


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def admin(admins):
    return admins.add("Ada Admin", "ada@acme.io", "secret123")


@pytest.fixture
def auth_headers(admin):
    token = create_access_token(admin.id, admin.role)
    return {"Authorization": f"Bearer {token}"}
