"""
tests/integration/test_users.py: Account, channel profile and watch history.
"""

from __future__ import annotations

from vidtube.app.services import user_service

from .conftest import auth_headers, make_video, register, signup


class TestAccount:

    def test_get_me(self, client):
        jane = signup(client, "jane")
        resp = client.get("/api/v1/users/me", headers=auth_headers(jane["accessToken"]))
        assert resp.status_code == 200
        assert resp.get_json()["data"]["username"] == "jane"

    def test_update_full_name_and_email(self, client):
        jane = signup(client, "jane")
        resp = client.patch(
            "/api/v1/users/me",
            json={"full_name": "Jane Q. Doe", "email": " JQD@gmail.com "},
            headers=auth_headers(jane["accessToken"]),
        )
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["full_name"] == "Jane Q. Doe"
        assert data["email"] == "jqd@gmail.com"

    def test_update_to_taken_email_returns_409(self, client):
        register(client, "john")
        jane = signup(client, "jane")
        resp = client.patch(
            "/api/v1/users/me",
            json={"email": "john@gmail.com"},
            headers=auth_headers(jane["accessToken"]),
        )
        assert resp.status_code == 409
        assert resp.get_json()["error"]["code"] == "DUPLICATE_EMAIL"

    def test_email_taken_after_existence_check_returns_409(self, client, monkeypatch):
        register(client, "john")
        jane = signup(client, "jane")
        monkeypatch.setattr(user_service, "ensure_email_available", lambda *args, **kwargs: None)
        resp = client.patch(
            "/api/v1/users/me",
            json={"email": "john@gmail.com"},
            headers=auth_headers(jane["accessToken"]),
        )
        assert resp.status_code == 409
        assert resp.get_json()["error"]["code"] == "DUPLICATE_EMAIL"
        # The failed update left jane's row untouched.
        me = client.get("/api/v1/users/me", headers=auth_headers(jane["accessToken"]))
        assert me.get_json()["data"]["email"] == "jane@gmail.com"

    def test_empty_update_returns_400(self, client):
        jane = signup(client, "jane")
        resp = client.patch("/api/v1/users/me", json={}, headers=auth_headers(jane["accessToken"]))
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "EMPTY_UPDATE"

    def test_update_avatar_and_cover_image(self, client):
        jane = signup(client, "jane")
        headers = auth_headers(jane["accessToken"])

        resp = client.patch(
            "/api/v1/users/me/avatar",
            json={"avatar": "https://img.example.com/a.png"},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.get_json()["data"]["avatar"] == "https://img.example.com/a.png"

        resp = client.patch(
            "/api/v1/users/me/cover-image",
            json={"cover_image": "https://img.example.com/c.png"},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.get_json()["data"]["cover_image"] == "https://img.example.com/c.png"

    def test_avatar_must_be_a_url(self, client):
        jane = signup(client, "jane")
        resp = client.patch(
            "/api/v1/users/me/avatar",
            json={"avatar": "not a url"},
            headers=auth_headers(jane["accessToken"]),
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"]["field"] == "avatar"


class TestChannelProfile:

    def test_anonymous_viewer(self, client, anon_client):
        jane = signup(client, "jane")
        make_video(client, jane["accessToken"])
        make_video(client, jane["accessToken"], is_public=False)

        resp = anon_client.get("/api/v1/users/c/jane")
        assert resp.status_code == 200
        profile = resp.get_json()["data"]
        assert profile["username"] == "jane"
        assert "email" not in profile
        assert profile["subscribers_count"] == 0
        assert profile["subscribed_to_count"] == 0
        assert profile["videos_count"] == 1
        assert profile["is_subscribed"] is False

    def test_subscribed_viewer(self, client):
        jane = signup(client, "jane")
        john = signup(client, "john")
        client.post(
            f"/api/v1/subscriptions/c/{jane['user']['id']}",
            headers=auth_headers(john["accessToken"]),
        )

        resp = client.get("/api/v1/users/c/jane", headers=auth_headers(john["accessToken"]))
        profile = resp.get_json()["data"]
        assert profile["subscribers_count"] == 1
        assert profile["is_subscribed"] is True

        resp = client.get("/api/v1/users/c/john", headers=auth_headers(john["accessToken"]))
        assert resp.get_json()["data"]["subscribed_to_count"] == 1

    def test_unknown_channel_returns_404(self, anon_client):
        resp = anon_client.get("/api/v1/users/c/ghost")
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "CHANNEL_NOT_FOUND"


class TestWatchHistory:

    def test_history_is_most_recent_first_without_duplicates(self, client):
        jane = signup(client, "jane")
        john = signup(client, "john")
        first = make_video(client, jane["accessToken"], title="First")
        second = make_video(client, jane["accessToken"], title="Second")
        headers = auth_headers(john["accessToken"])

        client.get(f"/api/v1/videos/{first['id']}", headers=headers)
        client.get(f"/api/v1/videos/{second['id']}", headers=headers)
        client.get(f"/api/v1/videos/{first['id']}", headers=headers)

        resp = client.get("/api/v1/users/history", headers=headers)
        assert resp.status_code == 200
        history = resp.get_json()["data"]
        assert [v["title"] for v in history] == ["First", "Second"]
        assert history[0]["owner"]["username"] == "jane"
        assert history[0]["watched_at"] is not None

    def test_owner_views_are_not_recorded(self, client):
        jane = signup(client, "jane")
        video = make_video(client, jane["accessToken"])
        headers = auth_headers(jane["accessToken"])

        client.get(f"/api/v1/videos/{video['id']}", headers=headers)
        resp = client.get("/api/v1/users/history", headers=headers)
        assert resp.get_json()["data"] == []
