from datetime import timedelta

import pytest
from fastapi import HTTPException
from starlette.testclient import TestClient

from app.core.database import get_db
from app.core.security import create_access_token, decode_access_token
from app.main import app


@pytest.fixture
def anonymous_client(db):
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def test_token_round_trip():
    token = create_access_token({"sub": "admin@example.com"})

    payload = decode_access_token(token)

    assert payload["sub"] == "admin@example.com"
    assert payload["type"] == "access"


def test_expired_token_is_rejected():
    token = create_access_token({"sub": "admin@example.com"}, expires_delta=timedelta(minutes=-5))

    with pytest.raises(HTTPException) as exc_info:
        decode_access_token(token)
    assert exc_info.value.status_code == 401


def test_token_without_subject_is_rejected():
    with pytest.raises(HTTPException):
        decode_access_token(create_access_token({"role": "admin"}))


def test_admin_endpoints_require_a_token(anonymous_client):
    response = anonymous_client.get("/api/field-groups")

    assert response.status_code in (401, 403)


def test_admin_endpoints_reject_bad_tokens(anonymous_client):
    response = anonymous_client.get("/api/field-groups", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_admin_endpoints_accept_valid_tokens(anonymous_client):
    token = create_access_token({"sub": "admin@example.com"})

    response = anonymous_client.get("/api/field-groups", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json() == {"field_groups": []}


def test_health(anonymous_client):
    assert anonymous_client.get("/api/health").json() == {"status": "ok"}
