from unittest.mock import Mock

import pytest
from fastapi import FastAPI, HTTPException, Request

from resume_builder.app.core.auth import (
    AuthSession,
    get_current_user_from_cookie,
    get_optional_current_user_from_cookie,
    get_pending_verification,
)
from resume_builder.app.core.security import (
    create_access_token,
    create_pending_verification_token,
)


def _request(cookies: dict | None = None, headers: dict | None = None) -> Request:
    """Build a bare request whose `url_for('login_page')` resolves."""
    app = FastAPI()

    @app.get("/login", name="login_page")
    async def login():
        return {}

    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    if cookies:
        cookie_header = "; ".join(f"{k}={v}" for k, v in cookies.items())
        raw_headers.append((b"cookie", cookie_header.encode()))
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/builder",
        "headers": raw_headers,
        "query_string": b"",
        "server": ("testserver", 80),
        "scheme": "http",
        "root_path": "",
        "app": app,
        "router": app.router,
    }
    return Request(scope)


def test_current_user_from_valid_cookie(db_session, verified_user, settings):
    token = create_access_token(data={"sub": str(verified_user.id)}, settings=settings)
    request = _request(cookies={"access_token": token})

    user = get_current_user_from_cookie(request, db_session)

    assert user.id == verified_user.id


def test_missing_cookie_redirects_browsers(db_session):
    request = _request(headers={"Accept": "text/html"})
    with pytest.raises(HTTPException) as exc_info:
        get_current_user_from_cookie(request, db_session)
    assert exc_info.value.status_code == 307
    assert exc_info.value.headers["Location"].endswith("/login")


def test_missing_cookie_htmx_gets_hx_redirect(db_session):
    request = _request(headers={"HX-Request": "true"})
    with pytest.raises(HTTPException) as exc_info:
        get_current_user_from_cookie(request, db_session)
    assert exc_info.value.status_code == 401
    assert exc_info.value.headers["HX-Redirect"].endswith("/login")


def test_missing_cookie_json_clients_get_401(db_session):
    request = _request(headers={"Accept": "application/json"})
    with pytest.raises(HTTPException) as exc_info:
        get_current_user_from_cookie(request, db_session)
    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Could not validate credentials"


def test_unverified_user_is_rejected(db_session, verified_user, settings):
    verified_user.is_verified = False
    db_session.commit()
    token = create_access_token(data={"sub": str(verified_user.id)}, settings=settings)
    request = _request(cookies={"access_token": token}, headers={"Accept": "application/json"})
    with pytest.raises(HTTPException):
        get_current_user_from_cookie(request, db_session)


def test_non_numeric_subject_is_rejected(db_session, settings):
    token = create_access_token(data={"sub": "jane@example.com"}, settings=settings)
    request = _request(cookies={"access_token": token}, headers={"Accept": "application/json"})
    with pytest.raises(HTTPException):
        get_current_user_from_cookie(request, db_session)


def test_optional_user_returns_none(db_session):
    assert get_optional_current_user_from_cookie(_request(), db_session) is None


def test_auth_session_from_user():
    user = Mock(id=3, email="a@example.com", full_name=None)
    assert AuthSession.from_user(user) == AuthSession(user_id=3, email="a@example.com")


def test_pending_verification_from_cookie(settings):
    token = create_pending_verification_token("a@example.com", 100.0, settings)
    pending = get_pending_verification(_request(cookies={"pending_verification": token}), settings)
    assert pending.email == "a@example.com"
    assert pending.code_sent_at == 100.0


def test_pending_verification_without_cookie(settings):
    assert get_pending_verification(_request(), settings) is None


def test_builder_redirects_to_login_when_signed_out(client):
    response = client.get("/builder", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"].endswith("/login")


def test_api_requires_session(client):
    response = client.get("/api/resume", headers={"Accept": "application/json"})
    assert response.status_code == 401
