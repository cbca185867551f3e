"""End-to-end tests for ``/api/v1/auth``."""

from __future__ import annotations

from datetime import timedelta

import pytest
from authcore.core.config import AuthSettings
from authcore.infra.jwt.pyjwt_codec import PyJWTCodec
from authcore.services._shared.ports import TokenClaims, TokenType

from tests.factories.user import DEFAULT_PASSWORD, STRONG_PASSWORD, UserFactory
from tests.helpers.auth import bearer_header

AUTH = "/api/v1/auth"


def _error(resp) -> dict:
    body = resp.get_json()
    assert set(body) == {"error"}
    return body["error"]


class TestRegisterAndMe:
    def test_register_then_me(self, client):
        resp = client.post(
            f"{AUTH}/register",
            json={"name": "Ann", "email": "ann@x.com", "password": STRONG_PASSWORD},
        )

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["message"] == "User registered successfully"
        data = body["data"]
        assert set(data) == {"user", "token", "refreshToken"}
        assert data["user"]["email"] == "ann@x.com"
        assert data["user"]["role"] == "user"
        assert "password" not in data["user"]
        assert "passwordHash" not in data["user"]
        assert "password_hash" not in data["user"]

        me = client.get(f"{AUTH}/me", headers=bearer_header(data["token"]))

        assert me.status_code == 200
        assert me.get_json()["data"]["id"] == data["user"]["id"]
        assert me.get_json()["data"]["name"] == "Ann"

    def test_register_duplicate_in_other_case(self, client):
        UserFactory(email="ann@x.com")

        resp = client.post(
            f"{AUTH}/register",
            json={"name": "Ann", "email": "Ann@X.com", "password": STRONG_PASSWORD},
        )

        assert resp.status_code == 409
        assert _error(resp)["code"] == "user_exists"

    def test_register_weak_password_details(self, client):
        resp = client.post(f"{AUTH}/register", json={"name": "Ann", "email": "ann@x.com", "password": "abc"})

        assert resp.status_code == 400
        err = _error(resp)
        assert err["code"] == "invalid_input"
        assert "password" in err["details"]["errors"]

    def test_register_without_json_body(self, client):
        resp = client.post(f"{AUTH}/register", data="not json", content_type="text/plain")

        assert resp.status_code == 400
        assert set(_error(resp)["details"]["errors"]) == {"name", "email", "password"}


class TestLogin:
    def test_login_success(self, client):
        user = UserFactory(email="bob@x.com")

        resp = client.post(f"{AUTH}/login", json={"email": "BOB@x.com", "password": DEFAULT_PASSWORD})

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["message"] == "Login successful"
        assert body["data"]["user"]["id"] == user.id

    @pytest.mark.parametrize("email", ["bob@x.com", "ghost@x.com"])
    def test_login_failures_are_identical(self, client, email):
        UserFactory(email="bob@x.com")

        resp = client.post(f"{AUTH}/login", json={"email": email, "password": "Wrong-pass1"})

        assert resp.status_code == 401
        err = _error(resp)
        assert err["code"] == "invalid_credentials"
        assert err["message"] == "Invalid email or password"

    def test_login_missing_fields(self, client):
        resp = client.post(f"{AUTH}/login", json={"email": "bob@x.com"})

        assert resp.status_code == 400


class TestMe:
    def test_no_header(self, client):
        resp = client.get(f"{AUTH}/me")

        assert resp.status_code == 401
        assert _error(resp)["code"] == "no_token"

    def test_token_from_other_issuer(self, client, services):
        user = UserFactory()
        foreign = PyJWTCodec(AuthSettings(secret=services.settings.secret, issuer="other-issuer"))

        resp = client.get(f"{AUTH}/me", headers=bearer_header(foreign.sign(TokenClaims(user.id, user.email))))

        assert resp.status_code == 401
        assert _error(resp)["code"] == "invalid_token"

    def test_expired_token(self, client, services):
        user = UserFactory()
        token = services.tokens.sign(TokenClaims(user.id, user.email), ttl=timedelta(seconds=-1))

        resp = client.get(f"{AUTH}/me", headers=bearer_header(token))

        assert resp.status_code == 401
        assert _error(resp)["code"] == "expired_token"

    def test_refresh_token_cannot_authenticate(self, client, issue_tokens):
        user = UserFactory()

        resp = client.get(f"{AUTH}/me", headers=bearer_header(issue_tokens(user).refresh_token))

        assert resp.status_code == 401
        assert _error(resp)["code"] == "invalid_token"

    def test_error_envelope_carries_request_id(self, client):
        resp = client.get(f"{AUTH}/me", headers={"X-Request-ID": "req-123"})

        assert _error(resp)["request_id"] == "req-123"
        assert resp.headers["X-Request-ID"] == "req-123"


class TestRefresh:
    def test_refresh_issues_new_pair(self, client, services, issue_tokens):
        user = UserFactory()
        pair = issue_tokens(user)

        resp = client.post(f"{AUTH}/refresh", json={"refreshToken": pair.refresh_token})

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert services.tokens.verify(data["token"]).token_type is TokenType.ACCESS
        assert data["refreshToken"] != pair.refresh_token
        assert resp.get_json()["message"] == "Token refreshed successfully"

    def test_refresh_with_access_token(self, client, issue_tokens):
        user = UserFactory()

        resp = client.post(f"{AUTH}/refresh", json={"refreshToken": issue_tokens(user).access_token})

        assert resp.status_code == 401
        assert _error(resp)["code"] == "invalid_refresh_token"

    def test_refresh_missing_token(self, client):
        resp = client.post(f"{AUTH}/refresh", json={})

        assert resp.status_code == 400


class TestMisc:
    def test_unknown_route(self, client):
        resp = client.get("/api/v1/nope")

        assert resp.status_code == 404
        assert _error(resp)["message"] == "Route '/api/v1/nope' not found"

    def test_health(self, client):
        resp = client.get("/api/v1/health")

        assert resp.status_code == 200
        assert resp.get_json()["status"] == "ok"
