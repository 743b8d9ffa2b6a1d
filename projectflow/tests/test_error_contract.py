"""Tests for normalized error responses and caller identity."""

import time

import jwt
import pytest

from projectflow.core import auth
from projectflow.core.errors import AuthenticationError

SECRET = "test-clerk-signing-secret-0123456789abcdef"


def _token(sub="user_jwt", exp_offset=300, **claims):
    payload = {"sub": sub, "exp": int(time.time()) + exp_offset, **claims}
    return jwt.encode(payload, SECRET, algorithm="HS256")


def test_validation_error_has_standard_shape(client):
    project_id = client.post("/api/projects", headers={"X-User-Id": "u1"}).json()["data"]["project_id"]

    resp = client.put(f"/api/projects/{project_id}/name", json={}, headers={"X-User-Id": "u1"})

    assert resp.status_code == 400
    body = resp.json()
    rid = resp.headers.get("x-request-id")
    assert body["error"]["code"] == "validation_error"
    assert body["error"]["message"] == "Invalid or missing fields: name"
    assert body["error"]["request_id"] == rid


def test_missing_identity_is_unauthorized(client):
    resp = client.get("/api/projects")

    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "unauthorized"


def test_provided_request_id_is_echoed(client):
    resp = client.get("/api/projects", headers={"X-User-Id": "u1", "X-Request-Id": "rid-123"})

    assert resp.headers["x-request-id"] == "rid-123"
    assert resp.json()["request_id"] == "rid-123"


def test_permission_error_normalized(client):
    project_id = client.post("/api/projects", headers={"X-User-Id": "owner"}).json()["data"]["project_id"]

    resp = client.put(f"/api/projects/{project_id}/name", json={"name": "Mine"}, headers={"X-User-Id": "other"})

    assert resp.status_code == 403
    body = resp.json()
    assert body["error"]["code"] == "forbidden"
    assert body["error"]["request_id"] == resp.headers.get("x-request-id")


def test_unknown_route_is_not_found(client):
    resp = client.get("/api/does-not-exist", headers={"X-User-Id": "u1"})

    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "not_found"


def test_verify_clerk_jwt_returns_subject():
    assert auth.verify_clerk_jwt(_token(), secret=SECRET) == "user_jwt"


def test_verify_clerk_jwt_without_secret_defers(monkeypatch):
    monkeypatch.setattr(auth.settings, "CLERK_SECRET_KEY", None)
    assert auth.verify_clerk_jwt(_token()) is None


@pytest.mark.parametrize(
    "token",
    [
        _token(exp_offset=-60),
        _token(sub=""),
        "not-a-jwt",
        jwt.encode({"sub": "x", "exp": int(time.time()) + 60}, "some-other-secret-0123456789abcdef", algorithm="HS256"),
    ],
)
def test_verify_clerk_jwt_rejects_bad_tokens(token):
    with pytest.raises(AuthenticationError):
        auth.verify_clerk_jwt(token, secret=SECRET)


def test_issuer_is_checked_when_configured():
    token = _token(iss="https://clerk.projectflow.dev")

    assert auth.verify_clerk_jwt(token, secret=SECRET, issuer="https://clerk.projectflow.dev") == "user_jwt"
    with pytest.raises(AuthenticationError):
        auth.verify_clerk_jwt(token, secret=SECRET, issuer="https://elsewhere.dev")


def test_bearer_token_identifies_caller(client, monkeypatch):
    monkeypatch.setattr(auth.settings, "CLERK_SECRET_KEY", SECRET)
    monkeypatch.setattr(auth.settings, "CLERK_ISSUER", None)

    created = client.post("/api/projects", headers={"Authorization": f"Bearer {_token(sub='user_bearer')}"})
    assert created.status_code == 201
    assert created.json()["data"]["user_id"] == "user_bearer"

    expired = client.get("/api/projects", headers={"Authorization": f"Bearer {_token(exp_offset=-60)}"})
    assert expired.status_code == 401


def test_user_header_ignored_once_secret_configured(client, monkeypatch):
    monkeypatch.setattr(auth.settings, "CLERK_SECRET_KEY", SECRET)

    header_only = client.get("/api/plans/me", headers={"X-User-Id": "victim"})
    assert header_only.status_code == 401
    assert header_only.json()["error"]["code"] == "unauthorized"

    both = client.post(
        "/api/projects",
        headers={"Authorization": f"Bearer {_token(sub='user_real')}", "X-User-Id": "victim"},
    )
    assert both.status_code == 201
    assert both.json()["data"]["user_id"] == "user_real"


def test_admin_role_claim_can_add_credits(client, monkeypatch):
    monkeypatch.setattr(auth.settings, "CLERK_SECRET_KEY", SECRET)
    client.post("/api/plans/me", headers={"Authorization": f"Bearer {_token(sub='user_topped')}"})

    body = {"user_id": "user_topped", "credits_to_add": 10}
    as_user = client.post("/api/plans/credits", json=body, headers={"Authorization": f"Bearer {_token(sub='user_topped')}"})
    admin_token = _token(sub="user_admin", public_metadata={"role": "admin"})
    as_admin = client.post("/api/plans/credits", json=body, headers={"Authorization": f"Bearer {admin_token}"})

    assert as_user.status_code == 403
    assert as_admin.status_code == 200
    assert as_admin.json()["data"]["credits_remaining"] == 60
