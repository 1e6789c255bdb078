from base64 import b64encode
import json
import logging

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from itsdangerous import TimestampSigner
import pytest

from themekit.auth.session import SessionUser, set_session_user
from themekit.http.middleware import THEME_HEADER, RequestLoggingMiddleware
from themekit.main import app
from themekit.settings import settings
from themekit.themes.resolver import THEME_ATTRIBUTE

USER = SessionUser(id=5, email="user@example.com", is_admin=False)
ADMIN = SessionUser(id=1, email="admin@example.com", is_admin=True)


def _session_headers(user: SessionUser) -> dict[str, str]:
    # Same encoding SessionMiddleware uses for the `session` cookie.
    request = Request({"type": "http", "session": {}})
    set_session_user(request, user_id=user.id, email=user.email, is_admin=user.is_admin)
    data = b64encode(json.dumps(request.session).encode("utf-8"))
    signed = TimestampSigner(settings.session_secret_key).sign(data).decode("utf-8")
    return {"cookie": f"session={signed}"}


def test_anonymous_request_resolves_default_theme() -> None:
    with TestClient(app) as client:
        response = client.get("/api/v1/theme")

    assert response.status_code == 200
    assert response.json()["data"] == {"theme_id": "default"}
    assert response.headers[THEME_HEADER] == "default"


def test_list_themes_returns_installed_catalog() -> None:
    with TestClient(app) as client:
        response = client.get("/api/v1/themes")

    assert response.status_code == 200
    assert [theme["id"] for theme in response.json()["data"]["themes"]] == [
        "dark",
        "default",
        "midnight",
    ]


@pytest.mark.parametrize(
    "request_kwargs",
    [
        {},
        {"json": {}},
        {"json": {"theme_id": "dark"}},
        {"json": {"theme_id": None}},
        {"json": {"theme_id": 5}},
        {"json": {"foo": 1}},
        {"content": b"not json"},
    ],
)
def test_changing_theme_through_resolver_is_rejected(request_kwargs: dict) -> None:
    with TestClient(app) as client:
        response = client.put("/api/v1/theme", **request_kwargs)

    assert response.status_code == 405
    assert response.json()["error"]["code"] == "theme_change_unsupported"


def test_saved_user_preference_is_resolved_for_that_user() -> None:
    headers = _session_headers(USER)
    with TestClient(app) as client:
        update = client.put(
            "/api/v1/settings/theme",
            json={"theme_id": "midnight"},
            headers=headers,
        )
        resolved = client.get("/api/v1/theme", headers=headers)
        stored = client.get("/api/v1/settings/theme", headers=headers)
        anonymous = client.get("/api/v1/theme", headers={"cookie": ""})

    assert update.status_code == 200
    assert update.json()["data"] == {"theme_id": "midnight"}
    assert resolved.json()["data"] == {"theme_id": "midnight"}
    assert stored.json()["data"] == {"theme_id": "midnight"}
    assert anonymous.json()["data"] == {"theme_id": "default"}


def test_tampered_session_cookie_is_treated_as_anonymous() -> None:
    with TestClient(app) as client:
        response = client.put(
            "/api/v1/settings/theme",
            json={"theme_id": "dark"},
            headers={"cookie": "session=forged.value.signature"},
        )

    assert response.status_code == 401


def test_updating_preference_to_uninstalled_theme_is_rejected() -> None:
    with TestClient(app) as client:
        response = client.put(
            "/api/v1/settings/theme",
            json={"theme_id": "neon"},
            headers=_session_headers(USER),
        )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_settings"


def test_updating_preference_requires_authentication() -> None:
    with TestClient(app) as client:
        response = client.put("/api/v1/settings/theme", json={"theme_id": "dark"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "auth_required"


def test_system_theme_update_requires_admin() -> None:
    with TestClient(app) as client:
        response = client.put(
            "/api/v1/settings/system-theme",
            json={"theme_id": "dark"},
            headers=_session_headers(USER),
        )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "forbidden"


def test_admin_system_theme_applies_to_anonymous_requests() -> None:
    with TestClient(app) as client:
        update = client.put(
            "/api/v1/settings/system-theme",
            json={"theme_id": "dark"},
            headers=_session_headers(ADMIN),
        )
        resolved = client.get("/api/v1/theme")

    assert update.status_code == 200
    assert resolved.json()["data"] == {"theme_id": "dark"}


def test_request_logs_carry_resolved_theme(caplog) -> None:
    caplog.set_level(logging.INFO, logger="themekit.http.middleware")
    with TestClient(app) as client:
        client.get("/api/v1/theme")

    completed = [
        record for record in caplog.records if getattr(record, "event", None) == "request.completed"
    ]
    assert completed
    assert completed[-1].theme_id == "default"


def test_failed_request_log_carries_resolved_theme(caplog) -> None:
    failing_app = FastAPI()
    failing_app.add_middleware(RequestLoggingMiddleware)

    @failing_app.get("/explode")
    def explode(request: Request) -> None:
        setattr(request.state, THEME_ATTRIBUTE, "midnight")
        raise RuntimeError("render failed")

    caplog.set_level(logging.INFO, logger="themekit.http.middleware")
    client = TestClient(failing_app, raise_server_exceptions=False)

    response = client.get("/explode")

    assert response.status_code == 500
    failed = [
        record for record in caplog.records if getattr(record, "event", None) == "request.failed"
    ]
    assert len(failed) == 1
    assert failed[0].theme_id == "midnight"
    assert failed[0].exc_info is not None
