from bs4 import BeautifulSoup

from resume_builder.app.core.auth import PENDING_VERIFICATION_COOKIE
from resume_builder.app.core.config import get_settings
from resume_builder.app.core.security import create_pending_verification_token


def test_root_redirects_to_login(client):
    response = client.get("/", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/login"


def test_root_redirects_signed_in_user_to_builder(signed_in_client):
    response = signed_in_client.get("/", follow_redirects=False)
    assert response.headers["location"] == "/builder"


def test_login_page(client):
    response = client.get("/login")

    assert response.status_code == 200
    assert 'id="auth-form"' in response.text
    assert 'id="notifications"' in response.text
    assert "htmx.org" in response.text


def test_login_page_prefills_sign_up(client):
    response = client.get("/login", params={"mode": "sign_up", "email": "new@example.com"})

    assert 'name="confirmPassword"' in response.text
    assert 'value="new@example.com"' in response.text


def test_login_page_ignores_unknown_mode(client):
    response = client.get("/login", params={"mode": "admin"})

    assert response.status_code == 200
    assert 'name="confirmPassword"' not in response.text


def test_login_page_redirects_signed_in_user(signed_in_client):
    response = signed_in_client.get("/login", follow_redirects=False)
    assert response.headers["location"] == "/builder"


def test_verify_page_without_pending_sign_up(client):
    response = client.get("/verify", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"].endswith("/login")


def test_verify_page_restores_cooldown(client):
    settings = get_settings()
    token = create_pending_verification_token(
        email="new@example.com",
        code_sent_at=0.0,
        settings=settings,
    )
    client.cookies = {PENDING_VERIFICATION_COOKIE: token}

    response = client.get("/verify")

    assert response.status_code == 200
    soup = BeautifulSoup(response.content, "html.parser")
    assert soup.find("div", id="verify-form").find("strong").text == "new@example.com"
    resend = soup.find("button", attrs={"hx-post": "/api/auth/resend"})
    assert resend["data-countdown"] == "0"
    assert not resend.has_attr("disabled")


def test_builder_requires_sign_in(client):
    response = client.get("/builder", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"].endswith("/login")


def test_builder_page(signed_in_client):
    response = signed_in_client.get("/builder")

    assert response.status_code == 200
    soup = BeautifulSoup(response.content, "html.parser")
    assert soup.find(id="workspace") is not None
    assert soup.find(id="preview").find("article")["class"] == ["resume", "layout-modern"]
    assert "Jane Doe" in response.text
    assert "New resume created" in soup.find(id="notifications").text
    export_link = soup.find("a", href="/api/resume/export")
    assert export_link is not None


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_static_assets_are_served(client):
    assert client.get("/static/js/app.js").status_code == 200
