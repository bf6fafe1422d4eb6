import os
import tempfile

from cryptography.fernet import Fernet

# Settings are read at import time; point them at a throwaway database first.
_tmpdir = tempfile.mkdtemp(prefix="socialhub-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmpdir, 'test.db')}"
os.environ["FERNET_KEY"] = Fernet.generate_key().decode()
os.environ["JWT_SECRET"] = "test-secret"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient

from socialhub.db.base import Base, SessionLocal, engine
from socialhub.main import app


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def register(client):
    """Create a user; returns (user_id, auth headers)."""
    def _register(email="owner@example.com", password="s3cret-pass", name="Owner"):
        resp = client.post("/auth/register", json={"email": email, "password": password, "name": name})
        assert resp.status_code == 201, resp.text
        data = resp.json()
        return data["user"]["id"], {"Authorization": f"Bearer {data['token']}"}
    return _register


@pytest.fixture
def workspace(client):
    def _workspace(headers, slug="acme", name="Acme"):
        resp = client.post("/workspaces", json={"name": name, "slug": slug}, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _workspace


@pytest.fixture
def connect(client):
    def _connect(headers, workspace_id, platform="X", account_id="acct-1", token="plain-access"):
        resp = client.post(
            f"/workspaces/{workspace_id}/platforms",
            json={"platform": platform, "platform_account_id": account_id,
                  "platform_username": f"{platform.lower()}-user", "access_token": token},
            headers=headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["id"]
    return _connect


@pytest.fixture
def add_member(client, register):
    """Register another user and add them to the workspace under the named role."""
    def _add(owner_headers, ws, email, role_name="Publisher"):
        user_id, headers = register(email=email, name=email.split("@")[0])
        role_id = next(r["id"] for r in ws["roles"] if r["name"] == role_name)
        resp = client.post(f"/workspaces/{ws['id']}/members", json={"email": email, "role_id": role_id},
                           headers=owner_headers)
        assert resp.status_code == 201, resp.text
        return user_id, headers
    return _add
