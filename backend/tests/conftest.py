import pytest
from fastapi.testclient import TestClient
from fileshare.core.config import Settings
from fileshare.main import create_app

ADMIN_PASSWORD = "admin-pass"


@pytest.fixture
def settings(tmp_path):
    """Fresh SQLite database and upload directory per test"""
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        SECRET_KEY="test-secret",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        # Small cap so oversized uploads are cheap to build
        MAX_FILE_SIZE=1024,
        UPLOAD_CHUNK_SIZE=256,
        ADMIN_EMAIL="root@fileshare.io",
        ADMIN_PASSWORD=ADMIN_PASSWORD,
        ORPHAN_SWEEP_INTERVAL_HOURS=0,
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    # Context manager runs the lifespan: tables, admin seed, storage
    with TestClient(app) as test_client:
        yield test_client


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register(client, username: str, email: str | None = None, password: str = "pw1"):
    return client.post("/api/register", json={
        "username": username,
        "email": email or f"{username}@x.com",
        "password": password,
    })


def upload(client, token: str, name: str = "notes.txt", content: bytes = b"hello world",
           content_type: str = "text/plain"):
    return client.post(
        "/api/upload",
        files={"file": (name, content, content_type)},
        headers=auth_header(token),
    )


@pytest.fixture
def admin_token(client):
    response = client.post("/api/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def alice(client):
    """Registered regular user: returns the {token, user} body"""
    response = register(client, "alice", "a@x.com", "pw1")
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def bob(client):
    response = register(client, "bob", "b@x.com", "pw2")
    assert response.status_code == 200
    return response.json()
