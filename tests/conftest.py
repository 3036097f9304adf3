"""
Test configuration and fixtures
"""
import os
import shutil
import tempfile
import uuid
from pathlib import Path

import pytest

# Point the app at throwaway storage before it is imported
TEST_ROOT = Path(tempfile.mkdtemp(prefix="techfest-tests-"))
os.environ['DATABASE_URL'] = f"sqlite:///{TEST_ROOT / 'test.db'}"
os.environ['UPLOADS_DIR'] = str(TEST_ROOT / 'uploads')
os.environ['EXPORTS_DIR'] = str(TEST_ROOT / 'exports')
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['REFRESH_EXPORT_ON_REGISTER'] = 'true'
os.environ['SMTP_USER'] = ''
os.environ['SMTP_PASSWORD'] = ''

from fastapi.testclient import TestClient

from app.main import app
from app.api.deps import get_exporter, get_notifier
from app.config import UPLOADS_DIR
from app.database.session import Base, SessionLocal, engine
from app.errors import TransportError


class FakeNotifier:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    async def send_confirmation(self, registration):
        if self.fail:
            raise TransportError("Failed to send confirmation email")
        self.sent.append(registration.registration_id)


class FakeExporter:
    def __init__(self):
        self.refreshes = 0

    def refresh_quietly(self):
        self.refreshes += 1


def registration_form(**overrides):
    """Valid form fields, unique per call unless overridden"""
    suffix = uuid.uuid4().int
    form = {
        'registrationId': str(uuid.uuid4()),
        'event': 'robo-race',
        'teamName': f'Team {suffix % 10 ** 8}',
        'teamLeaderName': 'Asha Verma',
        'email': f'leader{suffix % 10 ** 8}@gmail.com',
        'mobile': f'9{suffix % 10 ** 9:09d}',
        'gender': 'female',
        'college': 'ABES-EC',
        'course': 'btech',
        'year': '2',
        'rollno': f'R{suffix % 10 ** 6}',
        'aadhar': f'{suffix % 10 ** 12:012d}',
        'teamSize': '3',
    }
    form.update(overrides)
    return form


def pdf_document(label='doc', content=None):
    content = content if content is not None else f"%PDF-1.4 {label} {uuid.uuid4()}".encode()
    return (f"{label}.pdf", content, "application/pdf")


def documents(aadhar=None, college_id=None):
    return [
        ('aadharImage', aadhar or pdf_document('aadhar')),
        ('collegeId', college_id or pdf_document('college-id')),
    ]


@pytest.fixture(autouse=True)
def database():
    """Fresh tables and an empty upload directory for every test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    shutil.rmtree(UPLOADS_DIR, ignore_errors=True)
    UPLOADS_DIR.mkdir(parents=True, exist_ok=True)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def exporter():
    return FakeExporter()


@pytest.fixture
def client(notifier, exporter):
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_exporter] = lambda: exporter
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """POST a registration; returns the response"""
    def _register(form=None, files=None):
        return client.post(
            '/api/register',
            data=form if form is not None else registration_form(),
            files=files if files is not None else documents()
        )
    return _register


def stored_uploads():
    return sorted(p.name for p in UPLOADS_DIR.iterdir())
