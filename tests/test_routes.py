# tests/test_routes.py
import pytest
from fastapi.testclient import TestClient

from oauth_setup.main import app
from oauth_setup.routes.schema import get_executor
from oauth_setup.services.executors import RemoteError
from oauth_setup.services.sql_schema import SCHEMA_SQL


@pytest.fixture()
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def _use(executor):
    app.dependency_overrides[get_executor] = lambda: executor


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["service"] == "OAuth Table Setup"


def test_schema_sql_is_plain_text(client):
    r = client.get("/schema/oauth_providers/sql")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text == SCHEMA_SQL


def test_unknown_table_is_404(client, existing_remote):
    _use(existing_remote)
    assert client.get("/schema/nope/sql").status_code == 404
    assert client.get("/schema/nope/status").status_code == 404


def test_status_exists(client, existing_remote):
    _use(existing_remote)
    r = client.get("/schema/oauth_providers/status")
    assert r.status_code == 200, r.text
    assert r.json() == {"table": "oauth_providers", "status": "exists", "detail": None}


def test_status_not_found_does_not_create(client, fresh_remote):
    _use(fresh_remote)
    r = client.get("/schema/oauth_providers/status")
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "not_found"
    assert fresh_remote.execute_calls == []


def test_status_probe_error_is_502_with_detail(client, make_executor):
    _use(make_executor(probe_error=RemoteError("28P01", "password authentication failed")))
    r = client.get("/schema/oauth_providers/status")
    assert r.status_code == 502
    assert r.json()["detail"] == "password authentication failed"
