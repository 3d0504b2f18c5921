"""Integration tests for the session endpoints (login, refresh, revoke)."""

from __future__ import annotations

from datetime import timedelta

import pytest
from freezegun import freeze_time

from tests.factories import DEFAULT_PASSWORD
from tests.factories.user import UserFactory

API = "/api/v1"


@pytest.fixture()
def user(factories):
    return UserFactory(email="saul@example.com")


def _login(client, email="saul@example.com", password=DEFAULT_PASSWORD):
    return client.post(f"{API}/login", json={"email": email, "password": password})


def test_healthz(client) -> None:
    resp = client.get(f"{API}/healthz")

    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "db": "ok"}
    assert resp.headers.get("X-Request-ID")


def test_login_returns_user_and_both_tokens(client, user) -> None:
    resp = _login(client)

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["id"] == str(user.id)
    assert body["email"] == "saul@example.com"
    assert body["token"].count(".") == 2
    assert len(body["refresh_token"]) == 64
    assert "password" not in body and "password_hash" not in body


def test_login_failures_do_not_reveal_which_part_was_wrong(client, user) -> None:
    wrong_password = _login(client, password="nope")
    unknown_email = _login(client, email="ghost@example.com")

    for resp in (wrong_password, unknown_email):
        assert resp.status_code == 401
        assert resp.mimetype == "application/problem+json"
        assert resp.get_json()["code"] == "invalid_credentials"
    assert wrong_password.get_json()["detail"] == unknown_email.get_json()["detail"]


def test_login_validates_payload(client) -> None:
    resp = client.post(f"{API}/login", json={"email": "not-an-email"})

    assert resp.status_code == 422
    errors = resp.get_json()["details"]["errors"]
    assert "email" in errors and "password" in errors


def test_refresh_issues_new_access_token(client, user, bearer) -> None:
    with freeze_time("2024-01-01 12:00:00") as frozen:
        session = _login(client).get_json()
        frozen.tick(timedelta(seconds=5))

        resp = client.post(f"{API}/refresh", headers=bearer(session["refresh_token"]))

        assert resp.status_code == 200
        token = resp.get_json()["token"]
        assert token != session["token"]

        update = client.put(
            f"{API}/users",
            json={"email": "saul@example.com", "password": "new-pass"},
            headers=bearer(token),
        )
        assert update.status_code == 200


def test_refresh_without_header(client) -> None:
    resp = client.post(f"{API}/refresh")

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "missing_credentials"
    assert resp.headers["WWW-Authenticate"].startswith("Bearer")


def test_refresh_with_basic_scheme(client) -> None:
    resp = client.post(f"{API}/refresh", headers={"Authorization": "Basic xyz"})

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "malformed_credentials"


def test_refresh_with_unknown_token(client, bearer) -> None:
    resp = client.post(f"{API}/refresh", headers=bearer("0" * 64))

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "unauthorized"


def test_revoke_then_refresh_is_unauthorized(client, user, bearer) -> None:
    refresh_token = _login(client).get_json()["refresh_token"]

    first = client.post(f"{API}/revoke", headers=bearer(refresh_token))
    assert first.status_code == 204
    assert first.data == b""

    resp = client.post(f"{API}/refresh", headers=bearer(refresh_token))
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "unauthorized"

    again = client.post(f"{API}/revoke", headers=bearer(refresh_token))
    assert again.status_code == 204


def test_revoke_unknown_token_is_no_content(client, bearer) -> None:
    resp = client.post(f"{API}/revoke", headers=bearer("never-issued"))
    assert resp.status_code == 204


def test_refresh_after_sixty_days(client, user, bearer) -> None:
    with freeze_time("2024-01-01 12:00:00") as frozen:
        refresh_token = _login(client).get_json()["refresh_token"]
        frozen.tick(timedelta(days=60))

        resp = client.post(f"{API}/refresh", headers=bearer(refresh_token))

    assert resp.status_code == 401
