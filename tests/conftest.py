import pytest
from fastapi.testclient import TestClient

from ehr_api.application import create_app
from ehr_api.config import Settings
from ehr_api.database import Store

SECRET = "test-signing-secret"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'ehr.db'}",
        jwt_secret=SECRET,
        bcrypt_rounds=4,
        db_pool_timeout=5,
        db_query_timeout=5,
        upload_dir=str(tmp_path / "images"),
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # entering the context runs the lifespan: store created, tables built
    with TestClient(app) as client:
        yield client


@pytest.fixture
def store(settings):
    store = Store(settings)
    store.create_all()
    yield store
    store.dispose()


@pytest.fixture
def db(store):
    session = store.session()
    yield session
    session.close()


def register(client, name, email, role, password="pw123", **kwargs):
    return client.post(
        "/register",
        data={"name": name, "email": email, "role": role, "password": password},
        **kwargs,
    )


def login(client, email, password="pw123"):
    return client.post("/login", json={"email": email, "password": password})


@pytest.fixture
def make_user(client):
    """Register a user and log in; returns (user dict, token)."""

    def _make(name, email, role, password="pw123"):
        r = register(client, name, email, role, password)
        assert r.json()["Status"] == "Success"
        body = login(client, email, password).json()
        return body["user"], body["token"]

    return _make


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
