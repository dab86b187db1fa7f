"""
End-to-end tests for the accounts API against an on-disk SQLite database.
"""

import logging

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from api.schemas import RegisterRequest
from auth.jwt import issue_token, verify_token
from main import create_app


def _register(client, email="alice@example.com", password="secret123", name="Alice", **extra):
    return client.post(
        "/api/users",
        json={"name": name, "email": email, "password": password, **extra},
    )


def _auth(token: str) -> dict:
    return {"x-auth-token": token}


class TestRegister:
    def test_register_returns_token(self, client, settings):
        resp = _register(client)
        assert resp.status_code == 200
        token = resp.json()["token"]
        assert verify_token(token, settings.jwt_secret)

    def test_duplicate_email_rejected(self, client):
        assert _register(client).status_code == 200
        resp = _register(client, email="ALICE@example.com ")
        assert resp.status_code == 400
        assert resp.json() == {"errors": [{"msg": "User already exists"}]}

    def test_validation_errors(self, client):
        resp = client.post(
            "/api/users", json={"name": " ", "email": "nope", "password": "123"},
        )
        assert resp.status_code == 400
        errors = {e["param"]: e["msg"] for e in resp.json()["errors"]}
        assert errors == {
            "name": "Name is required",
            "email": "Please, include a valid email",
            "password": "Password must contain at least 6 symbols",
        }

    def test_missing_fields(self, client):
        resp = client.post("/api/users", json={})
        assert resp.status_code == 400
        params = {e["param"] for e in resp.json()["errors"]}
        assert params == {"name", "email", "password"}

    def test_overlong_password_rejected(self, client):
        resp = _register(client, password="x" * 73)
        assert resp.status_code == 400


class TestLogin:
    def test_login_after_register(self, client, settings):
        registered = _register(client).json()["token"]
        resp = client.post(
            "/api/auth", json={"email": "Alice@Example.com", "password": "secret123"},
        )
        assert resp.status_code == 200
        token = resp.json()["token"]
        assert verify_token(token, settings.jwt_secret) == verify_token(
            registered, settings.jwt_secret
        )

    def test_wrong_password(self, client):
        _register(client)
        resp = client.post(
            "/api/auth", json={"email": "alice@example.com", "password": "wrong-pass"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"errors": [{"msg": "Invalid credentials"}]}

    def test_unknown_email(self, client):
        resp = client.post(
            "/api/auth", json={"email": "ghost@example.com", "password": "secret123"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"errors": [{"msg": "Invalid credentials"}]}

    def test_password_required(self, client):
        resp = client.post("/api/auth", json={"email": "alice@example.com", "password": ""})
        assert resp.status_code == 400
        assert resp.json()["errors"][0]["msg"] == "Password is required"


class TestCurrentAccount:
    def test_requires_token(self, client):
        resp = client.get("/api/auth")
        assert resp.status_code == 401
        assert resp.json() == {"msg": "No token, authorisation denied"}

    def test_rejects_garbage(self, client):
        resp = client.get("/api/auth", headers=_auth("garbage"))
        assert resp.status_code == 401
        assert resp.json() == {"msg": "Invalid token"}

    def test_returns_account_without_hash(self, client):
        token = _register(client, avatar="https://img.example/a.png").json()["token"]
        resp = client.get("/api/auth", headers=_auth(token))
        assert resp.status_code == 200
        body = resp.json()
        assert body["name"] == "Alice"
        assert body["email"] == "alice@example.com"
        assert body["avatar"] == "https://img.example/a.png"
        assert "password" not in body and "password_hash" not in body

    def test_token_from_other_secret_rejected(self, client):
        token = _register(client).json()["token"]
        account_id = verify_token(token, "test-jwt-secret")
        forged = issue_token(account_id, "attacker-secret", 60)
        resp = client.get("/api/auth", headers=_auth(forged))
        assert resp.status_code == 401
        assert resp.json() == {"msg": "Invalid token"}


class TestDeleteAccount:
    def test_delete_requires_token(self, client):
        resp = client.delete("/api/users")
        assert resp.status_code == 401

    def test_delete_then_token_outlives_account(self, client, settings):
        token = _register(client).json()["token"]

        resp = client.delete("/api/users", headers=_auth(token))
        assert resp.status_code == 200
        assert resp.json() == {"msg": "User removed"}

        # stateless tokens: still verifies, but the account is gone
        assert verify_token(token, settings.jwt_secret)
        resp = client.get("/api/auth", headers=_auth(token))
        assert resp.status_code == 404
        assert resp.json() == {"msg": "User not found"}

        resp = client.delete("/api/users", headers=_auth(token))
        assert resp.status_code == 404

    def test_can_register_again_after_delete(self, client):
        token = _register(client).json()["token"]
        client.delete("/api/users", headers=_auth(token))
        assert _register(client).status_code == 200


class TestServerErrors:
    def test_unexpected_error_is_generic_500(self, settings):
        app = create_app(settings)

        @app.get("/boom")
        async def boom():
            raise RuntimeError("database exploded")

        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.get("/boom")
        assert resp.status_code == 500
        assert resp.json() == {"msg": "Server error"}

    def test_health(self, client):
        assert client.get("/").json() == {"status": "ok"}


class TestEmailValidation:
    @pytest.mark.parametrize(
        "bad_email",
        ["a@b..c", "a@b.c.", "a@-x.com", '"@x.y', "nope", "two@@x.io", "sp ace@x.io"],
    )
    def test_malformed_address_rejected(self, client, bad_email):
        resp = _register(client, email=bad_email)
        assert resp.status_code == 400
        assert resp.json()["errors"] == [
            {"msg": "Please, include a valid email", "param": "email", "location": "body"}
        ]

    @pytest.mark.parametrize("bad_email", ["a@b..c", "a@-x.com"])
    def test_login_rejects_malformed_address(self, client, bad_email):
        resp = client.post("/api/auth", json={"email": bad_email, "password": "secret123"})
        assert resp.status_code == 400
        assert resp.json()["errors"][0]["msg"] == "Please, include a valid email"

    def test_schema_normalizes_case_and_whitespace(self):
        req = RegisterRequest(name="n", email="  Mixed.Case@Example.COM ", password="secret123")
        assert req.email == "mixed.case@example.com"

    @pytest.mark.parametrize("bad_email", ["a@b..c", "a@b.c.", "a@-x.com", '"@x.y'])
    def test_schema_rejects_malformed_address(self, bad_email):
        with pytest.raises(ValidationError):
            RegisterRequest(name="n", email=bad_email, password="secret123")


class TestAccessLog:
    def test_logs_resolved_account_but_not_token(self, client, settings, caplog):
        token = _register(client).json()["token"]
        account_id = verify_token(token, settings.jwt_secret)

        with caplog.at_level(logging.INFO, logger="api.middleware"):
            client.get("/api/auth", headers=_auth(token))

        lines = [r.getMessage() for r in caplog.records if r.name == "api.middleware"]
        assert any(f"GET /api/auth -> 200 account={account_id}" in line for line in lines)
        assert token not in caplog.text

    def test_rejected_request_is_anonymous(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="api.middleware"):
            client.get("/api/auth", headers=_auth("garbage-token-value"))

        lines = [r.getMessage() for r in caplog.records if r.name == "api.middleware"]
        assert any("GET /api/auth -> 401 account=anonymous" in line for line in lines)
        assert "garbage-token-value" not in caplog.text
