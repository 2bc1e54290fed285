import os
import tempfile

# Settings are read at import time.
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["IDENTITY_JWKS_URL"] = ""
os.environ["ALLOWED_COMPANY_EMAILS"] = ""
os.environ["SENTRY_DSN"] = ""
os.environ["SEED_DEMO_DATA"] = "false"
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="jobportal-uploads-"))

import pytest
from fastapi.testclient import TestClient

from jobportal.core.identity import InvalidIdentityToken
from jobportal.db.session import build_engine
from jobportal.main import create_app
from jobportal.services.file_intake import FileIntake
from jobportal.storage import InMemoryStorage, SQLStorage

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"

JOB_PAYLOAD = {
    "title": "Backend Engineer",
    "description": "<p>Build APIs</p>",
    "location": "Remote",
    "salary": 120000,
    "level": "Mid",
    "category": "Programming",
}


class FakeIdentityProvider:
    """Accepts ``token-<subject>`` bearer tokens."""

    def verify_token(self, token):
        if not token.startswith("token-"):
            raise InvalidIdentityToken("signature mismatch")
        return {"sub": token[len("token-"):], "exp": 4102444800}


def bearer(subject):
    return {"Authorization": f"Bearer token-{subject}"}


def pdf_file(name="resume.pdf"):
    return {"resume": (name, PDF_BYTES, "application/pdf")}


def make_sql_storage(path):
    storage = SQLStorage(build_engine(f"sqlite:///{path}"))
    storage.create_tables()
    return storage


@pytest.fixture(params=["memory", "sqlite"])
def storage(request, tmp_path):
    if request.param == "memory":
        return InMemoryStorage()
    return make_sql_storage(tmp_path / "jobportal.db")


@pytest.fixture
def memory_storage():
    return InMemoryStorage()


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def file_intake(tmp_path):
    return FileIntake(tmp_path / "uploads")


@pytest.fixture
def app(memory_storage, identity_provider, file_intake):
    return create_app(
        storage=memory_storage,
        identity_provider=identity_provider,
        file_intake=file_intake,
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register_company(client):
    """Register a recruiter and return (company, token)."""

    def _register(email="hr@acme.com", name="Acme", password="secret123"):
        response = client.post(
            "/api/company/register",
            data={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return body["company"], body["token"]

    return _register


@pytest.fixture
def post_job(client):
    """Post a job as the given recruiter and return it."""

    def _post(token, **overrides):
        response = client.post(
            "/api/company/post-job",
            json={**JOB_PAYLOAD, **overrides},
            headers={"token": token},
        )
        assert response.status_code == 200, response.text
        return response.json()["job"]

    return _post


@pytest.fixture
def sync_user(client):
    """Sync an applicant profile for the subject and return it."""

    def _sync(subject="user_1", email="ann@example.com", first_name="Ann", last_name="Lee"):
        response = client.post(
            "/api/users/sync",
            json={"email": email, "firstName": first_name, "lastName": last_name},
            headers=bearer(subject),
        )
        assert response.status_code == 200, response.text
        return response.json()["user"]

    return _sync
