import os
import tempfile

import pytest

_DB_DIR = tempfile.mkdtemp(prefix="scada-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"

from fastapi.testclient import TestClient  # noqa: E402

from scada.Core.config import settings  # noqa: E402
from scada.DB.database import drop_all_tables  # noqa: E402
from scada.DB.session import SessionLocal  # noqa: E402
from scada.main import app  # noqa: E402


@pytest.fixture
def client():
    """App with a fresh schema and the bootstrap admin seeded by the lifespan."""
    drop_all_tables()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(client):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {settings.ADMIN_TOKEN}"}


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def machine(client, admin_headers):
    resp = client.post(
        "/api/machines",
        json={"name": "Line1", "code": "L1", "location": "Hall A"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture
def technician(client, admin_headers):
    resp = client.post(
        "/api/users",
        json={"username": "maria", "password": "s3cret", "role": "technician"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    return resp.json()
