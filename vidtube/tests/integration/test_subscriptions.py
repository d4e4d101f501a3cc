"""
tests/integration/test_subscriptions.py: Channel subscription toggles and listings.
"""

from __future__ import annotations

from .conftest import auth_headers, signup


def _toggle(client, token, channel_id):
    return client.post(f"/api/v1/subscriptions/c/{channel_id}", headers=auth_headers(token))


class TestToggle:

    def test_subscribe_then_unsubscribe(self, client):
        jane = signup(client, "jane")
        john = signup(client, "john")

        resp = _toggle(client, john["accessToken"], jane["user"]["id"])
        assert resp.status_code == 201
        assert resp.get_json()["data"] == {"subscribed": True}

        resp = _toggle(client, john["accessToken"], jane["user"]["id"])
        assert resp.status_code == 200
        assert resp.get_json()["data"] == {"subscribed": False}

    def test_self_subscription_returns_400(self, client):
        jane = signup(client, "jane")
        resp = _toggle(client, jane["accessToken"], jane["user"]["id"])
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "SELF_SUBSCRIPTION"

    def test_unknown_channel_returns_404(self, client):
        jane = signup(client, "jane")
        resp = _toggle(client, jane["accessToken"], 9999)
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "CHANNEL_NOT_FOUND"


class TestListings:

    def test_subscribers_report_follow_back(self, client):
        jane = signup(client, "jane")
        john = signup(client, "john")
        mary = signup(client, "mary")
        _toggle(client, john["accessToken"], jane["user"]["id"])
        _toggle(client, mary["accessToken"], jane["user"]["id"])
        # jane follows john back, not mary
        _toggle(client, jane["accessToken"], john["user"]["id"])

        resp = client.get(
            f"/api/v1/subscriptions/c/{jane['user']['id']}/subscribers",
            headers=auth_headers(jane["accessToken"]),
        )
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["total_subscribers"] == 2
        follow_back = {s["username"]: s["is_subscribed"] for s in data["subscribers"]}
        assert follow_back == {"john": True, "mary": False}

    def test_subscribed_channels(self, client):
        jane = signup(client, "jane")
        john = signup(client, "john")
        mary = signup(client, "mary")
        _toggle(client, john["accessToken"], jane["user"]["id"])
        _toggle(client, john["accessToken"], mary["user"]["id"])

        resp = client.get(
            f"/api/v1/subscriptions/u/{john['user']['id']}/channels",
            headers=auth_headers(jane["accessToken"]),
        )
        data = resp.get_json()["data"]
        assert data["total_channels"] == 2
        assert [c["username"] for c in data["channels"]] == ["mary", "jane"]

        mine = client.get(
            "/api/v1/subscriptions/me/channels",
            headers=auth_headers(john["accessToken"]),
        ).get_json()["data"]
        assert mine == data

    def test_unknown_subscriber_returns_404(self, client):
        jane = signup(client, "jane")
        resp = client.get(
            "/api/v1/subscriptions/u/9999/channels",
            headers=auth_headers(jane["accessToken"]),
        )
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "USER_NOT_FOUND"
