"""
tests/integration/test_auth.py: Integration tests for authentication endpoints.

Endpoints covered:
  POST /auth/register          → 201
  POST /auth/login             → 200
  POST /auth/refresh           → 200
  POST /auth/logout            → 200
  POST /auth/change-password   → 200
  GET  /auth/me                → 200

Error cases:
  DUPLICATE_EMAIL       409: email already registered
  DUPLICATE_USERNAME    409: username already taken
  INVALID_IDENTIFIER    400: identifier is neither a username nor an email
  INVALID_CREDENTIALS   401: unknown user or wrong password
  TOKEN_MISMATCH        401: superseded or logged-out refresh token
  TOKEN_MISSING         401: no Authorization header and no cookie
  TOKEN_INVALID         401: malformed token
"""

from __future__ import annotations

import pytest

from vidtube.app.extensions import db
from vidtube.app.models.user import User
from vidtube.app.services import auth_service

from .conftest import PASSWORD, auth_headers, login, register, set_cookie_headers


def _register_payload(**overrides) -> dict:
    payload = {
        "username": "jane",
        "email": "jane@gmail.com",
        "full_name": "Jane Doe",
        "password": PASSWORD,
    }
    payload.update(overrides)
    return payload


# ═══════════════════════════════════════════════════════════════════════════
# POST /auth/register
# ═══════════════════════════════════════════════════════════════════════════

class TestRegister:

    def test_register_success_returns_201_with_sanitized_user(self, client):
        resp = client.post("/api/v1/auth/register", json=_register_payload())
        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["username"] == "jane"
        assert data["email"] == "jane@gmail.com"
        assert data["full_name"] == "Jane Doe"
        assert isinstance(data["id"], int)
        # Secrets must NEVER appear in the response
        for key in ("password", "password_hash", "refresh_token_hash", "refreshToken"):
            assert key not in data

    def test_register_issues_no_tokens_or_cookies(self, client):
        resp = client.post("/api/v1/auth/register", json=_register_payload())
        assert "accessToken" not in resp.get_json()["data"]
        assert set_cookie_headers(resp) == []

    def test_stored_password_is_hashed(self, app, client):
        client.post("/api/v1/auth/register", json=_register_payload())
        with app.app_context():
            user = db.session.query(User).filter_by(username="jane").one()
            assert user.password_hash != PASSWORD
            assert user.password_hash.startswith("$2")
            assert user.refresh_token_hash is None

    def test_username_and_email_are_normalised(self, client):
        resp = client.post("/api/v1/auth/register", json=_register_payload(
            username="  JANE ", email=" Jane@Gmail.com ",
        ))
        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["username"] == "jane"
        assert data["email"] == "jane@gmail.com"

    def test_duplicate_email_returns_409(self, client):
        register(client, "jane", email="shared@gmail.com")
        resp = client.post("/api/v1/auth/register", json=_register_payload(
            username="jane2", email="shared@gmail.com",
        ))
        assert resp.status_code == 409
        assert resp.get_json()["error"]["code"] == "DUPLICATE_EMAIL"

    def test_duplicate_username_returns_409(self, client):
        register(client, "jane")
        resp = client.post("/api/v1/auth/register", json=_register_payload(
            email="other@gmail.com",
        ))
        assert resp.status_code == 409
        assert resp.get_json()["error"]["code"] == "DUPLICATE_USERNAME"

    @pytest.mark.parametrize("clash,code", [
        ({"email": "other@gmail.com"}, "DUPLICATE_USERNAME"),
        ({"username": "jane2"}, "DUPLICATE_EMAIL"),
    ])
    def test_unique_constraint_wins_when_existence_check_is_beaten(self, client, monkeypatch, clash, code):
        # Stands in for a concurrent registration committing between the
        # existence check and the insert.
        register(client, "jane")
        monkeypatch.setattr(auth_service, "ensure_identity_available", lambda *args: None)
        resp = client.post("/api/v1/auth/register", json=_register_payload(**clash))
        assert resp.status_code == 409
        assert resp.get_json()["error"]["code"] == code

    def test_username_with_underscore_returns_400(self, client):
        resp = client.post("/api/v1/auth/register", json=_register_payload(username="jane_doe"))
        assert resp.status_code == 400
        error = resp.get_json()["error"]
        assert error["code"] == "INVALID_USERNAME"
        assert error["field"] == "username"

    def test_non_gmail_email_returns_400(self, client):
        resp = client.post("/api/v1/auth/register", json=_register_payload(email="jane@yahoo.com"))
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "INVALID_EMAIL"

    @pytest.mark.parametrize("password", ["abc12345", "ABCDEFG1!", "Abc!", "Abcdefgh!"])
    def test_weak_password_returns_400(self, client, password):
        resp = client.post("/api/v1/auth/register", json=_register_payload(password=password))
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "WEAK_PASSWORD"

    def test_blank_full_name_returns_400(self, client):
        resp = client.post("/api/v1/auth/register", json=_register_payload(full_name="   "))
        assert resp.status_code == 400
        assert resp.get_json()["error"]["field"] == "full_name"

    def test_missing_fields_return_400(self, client):
        resp = client.post("/api/v1/auth/register", json={})
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "MISSING_FIELD"


# ═══════════════════════════════════════════════════════════════════════════
# POST /auth/login
# ═══════════════════════════════════════════════════════════════════════════

class TestLogin:

    def test_login_with_email_sets_both_cookies(self, client):
        register(client, "jane")
        resp = client.post("/api/v1/auth/login", json={
            "identifier": "jane@gmail.com", "password": PASSWORD,
        })
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["accessToken"]
        assert data["refreshToken"]
        assert data["user"]["username"] == "jane"

        cookies = set_cookie_headers(resp)
        access = next(c for c in cookies if c.startswith("accessToken="))
        refresh = next(c for c in cookies if c.startswith("refreshToken="))
        for cookie in (access, refresh):
            assert "HttpOnly" in cookie
            assert "Secure" in cookie
            assert "SameSite=Strict" in cookie
        assert client.get_cookie("accessToken").value == data["accessToken"]
        assert client.get_cookie("refreshToken").value == data["refreshToken"]

    def test_login_with_username_succeeds(self, client):
        register(client, "jane")
        data = login(client, "jane")
        assert data["user"]["email"] == "jane@gmail.com"

    def test_identifier_is_normalised(self, client):
        register(client, "jane")
        data = login(client, "  JANE@GMAIL.COM ")
        assert data["user"]["username"] == "jane"

    def test_wrong_password_returns_401_and_sets_no_cookies(self, client):
        register(client, "jane")
        resp = client.post("/api/v1/auth/login", json={
            "identifier": "jane@gmail.com", "password": "Wrong123!",
        })
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "INVALID_CREDENTIALS"
        assert set_cookie_headers(resp) == []

    def test_unknown_user_gets_the_same_error_as_wrong_password(self, client):
        resp = client.post("/api/v1/auth/login", json={
            "identifier": "nobody@gmail.com", "password": PASSWORD,
        })
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "INVALID_CREDENTIALS"

    def test_unclassifiable_identifier_returns_400(self, client):
        register(client, "jane")
        resp = client.post("/api/v1/auth/login", json={
            "identifier": "Jane_Doe", "password": PASSWORD,
        })
        assert resp.status_code == 400
        error = resp.get_json()["error"]
        assert error["code"] == "INVALID_IDENTIFIER"
        assert error["field"] == "identifier"

    def test_blank_identifier_returns_400(self, client):
        resp = client.post("/api/v1/auth/login", json={"identifier": "  ", "password": PASSWORD})
        assert resp.status_code == 400

    def test_login_stores_refresh_token_hash_not_token(self, app, client):
        register(client, "jane")
        data = login(client, "jane")
        with app.app_context():
            user = db.session.get(User, data["user"]["id"])
            assert user.refresh_token_hash is not None
            assert user.refresh_token_hash != data["refreshToken"]
            assert len(user.refresh_token_hash) == 64


# ═══════════════════════════════════════════════════════════════════════════
# POST /auth/refresh
# ═══════════════════════════════════════════════════════════════════════════

class TestRefresh:

    def test_refresh_rotates_pair_and_rejects_old_token(self, client):
        register(client, "jane")
        original = login(client, "jane")

        resp = client.post("/api/v1/auth/refresh", json={"refreshToken": original["refreshToken"]})
        assert resp.status_code == 200
        rotated = resp.get_json()["data"]
        assert rotated["accessToken"] != original["accessToken"]
        assert rotated["refreshToken"] != original["refreshToken"]

        resp = client.post("/api/v1/auth/refresh", json={"refreshToken": original["refreshToken"]})
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_MISMATCH"

    def test_refresh_reads_cookie_when_body_is_empty(self, client):
        register(client, "jane")
        login(client, "jane")

        resp = client.post("/api/v1/auth/refresh")
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert client.get_cookie("refreshToken").value == data["refreshToken"]
        assert client.get_cookie("accessToken").value == data["accessToken"]

    def test_new_login_supersedes_previous_refresh_token(self, client):
        register(client, "jane")
        first = login(client, "jane")
        login(client, "jane")

        resp = client.post("/api/v1/auth/refresh", json={"refreshToken": first["refreshToken"]})
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_MISMATCH"

    def test_missing_refresh_token_returns_401(self, anon_client):
        resp = anon_client.post("/api/v1/auth/refresh", json={})
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_MISSING"

    def test_garbage_refresh_token_returns_401(self, anon_client):
        resp = anon_client.post("/api/v1/auth/refresh", json={"refreshToken": "not.a.jwt"})
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "REFRESH_TOKEN_INVALID"

    def test_access_token_is_not_accepted_as_refresh_token(self, client):
        register(client, "jane")
        data = login(client, "jane")
        resp = client.post("/api/v1/auth/refresh", json={"refreshToken": data["accessToken"]})
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "REFRESH_TOKEN_INVALID"


# ═══════════════════════════════════════════════════════════════════════════
# POST /auth/logout
# ═══════════════════════════════════════════════════════════════════════════

class TestLogout:

    def test_logout_then_refresh_fails(self, client):
        register(client, "jane")
        data = login(client, "jane")

        resp = client.post("/api/v1/auth/logout", headers=auth_headers(data["accessToken"]))
        assert resp.status_code == 200

        resp = client.post("/api/v1/auth/refresh", json={"refreshToken": data["refreshToken"]})
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_MISMATCH"

    def test_logout_with_cookie_session_clears_cookies(self, client):
        register(client, "jane")
        login(client, "jane")

        resp = client.post("/api/v1/auth/logout")
        assert resp.status_code == 200
        assert client.get_cookie("accessToken") is None
        assert client.get_cookie("refreshToken") is None

    def test_logout_without_session_returns_401(self, anon_client):
        resp = anon_client.post("/api/v1/auth/logout")
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_MISSING"

        # Stable on repeat.
        resp = anon_client.post("/api/v1/auth/logout")
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_MISSING"

    def test_second_logout_with_valid_access_token_succeeds(self, client):
        register(client, "jane")
        data = login(client, "jane")
        headers = auth_headers(data["accessToken"])

        assert client.post("/api/v1/auth/logout", headers=headers).status_code == 200
        assert client.post("/api/v1/auth/logout", headers=headers).status_code == 200


# ═══════════════════════════════════════════════════════════════════════════
# POST /auth/change-password
# ═══════════════════════════════════════════════════════════════════════════

class TestChangePassword:

    def _change(self, client, token, old=PASSWORD, new="Newpass1!", confirm=None):
        return client.post(
            "/api/v1/auth/change-password",
            json={
                "old_password": old,
                "new_password": new,
                "confirm_password": new if confirm is None else confirm,
            },
            headers=auth_headers(token),
        )

    def test_change_password_then_login_with_new_password(self, client):
        register(client, "jane")
        data = login(client, "jane")

        resp = self._change(client, data["accessToken"])
        assert resp.status_code == 200

        login(client, "jane", password="Newpass1!")
        resp = client.post("/api/v1/auth/login", json={"identifier": "jane", "password": PASSWORD})
        assert resp.status_code == 401

    def test_change_password_revokes_refresh_token(self, client):
        register(client, "jane")
        data = login(client, "jane")
        self._change(client, data["accessToken"])

        resp = client.post("/api/v1/auth/refresh", json={"refreshToken": data["refreshToken"]})
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_MISMATCH"

    def test_wrong_old_password_returns_401(self, client):
        register(client, "jane")
        data = login(client, "jane")
        resp = self._change(client, data["accessToken"], old="Wrong123!")
        assert resp.status_code == 401
        error = resp.get_json()["error"]
        assert error["code"] == "INVALID_CREDENTIALS"
        assert error["field"] == "old_password"

    def test_confirmation_mismatch_returns_400(self, client):
        register(client, "jane")
        data = login(client, "jane")
        resp = self._change(client, data["accessToken"], confirm="Other123!")
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "PASSWORD_MISMATCH"

    def test_weak_new_password_returns_400(self, client):
        register(client, "jane")
        data = login(client, "jane")
        resp = self._change(client, data["accessToken"], new="abc12345")
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "WEAK_PASSWORD"


# ═══════════════════════════════════════════════════════════════════════════
# GET /auth/me and the authentication gate
# ═══════════════════════════════════════════════════════════════════════════

class TestMe:

    def test_me_with_bearer_token(self, client):
        register(client, "jane")
        data = login(client, "jane")
        resp = client.get("/api/v1/auth/me", headers=auth_headers(data["accessToken"]))
        assert resp.status_code == 200
        me = resp.get_json()["data"]
        assert me["username"] == "jane"
        assert "password_hash" not in me

    def test_me_with_cookie_only(self, client):
        register(client, "jane")
        login(client, "jane")
        resp = client.get("/api/v1/auth/me")
        assert resp.status_code == 200

    def test_header_wins_over_cookie(self, client):
        register(client, "jane")
        register(client, "john")
        john = login(client, "john")
        login(client, "jane")  # cookie now belongs to jane

        resp = client.get("/api/v1/auth/me", headers=auth_headers(john["accessToken"]))
        assert resp.get_json()["data"]["username"] == "john"

    def test_no_token_returns_401(self, anon_client):
        resp = anon_client.get("/api/v1/auth/me")
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_MISSING"

    def test_malformed_header_returns_401(self, anon_client):
        resp = anon_client.get("/api/v1/auth/me", headers={"Authorization": "Token abc"})
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_INVALID"

    def test_tampered_token_returns_401(self, client):
        register(client, "jane")
        data = login(client, "jane")
        resp = client.get("/api/v1/auth/me", headers=auth_headers(data["accessToken"] + "x"))
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_INVALID"

    def test_refresh_token_is_not_accepted_as_access_token(self, client):
        register(client, "jane")
        data = login(client, "jane")
        resp = client.get("/api/v1/auth/me", headers=auth_headers(data["refreshToken"]))
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_INVALID"

    def test_token_for_deleted_user_returns_401(self, app, client):
        register(client, "jane")
        data = login(client, "jane")
        with app.app_context():
            db.session.delete(db.session.get(User, data["user"]["id"]))
            db.session.commit()

        resp = client.get("/api/v1/auth/me", headers=auth_headers(data["accessToken"]))
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_USER_NOT_FOUND"


class TestHealth:

    def test_health(self, anon_client):
        resp = anon_client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.get_json() == {"status": "ok"}

    def test_unknown_route_returns_json_404(self, anon_client):
        resp = anon_client.get("/api/v1/nope")
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "NOT_FOUND"
