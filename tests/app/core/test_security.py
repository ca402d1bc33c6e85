from datetime import timedelta

from jose import jwt

from resume_builder.app.core.security import (
    ONE_TIME_CODE_LENGTH,
    authenticate_user,
    create_access_token,
    create_pending_verification_token,
    decode_pending_verification_token,
    generate_one_time_code,
    get_password_hash,
    verify_password,
)

VALID_PASSWORD = "Str0ng!Pass"


def test_password_hash_round_trip():
    hashed = get_password_hash("Secret1!")
    assert hashed != "Secret1!"
    assert verify_password("Secret1!", hashed) is True
    assert verify_password("Secret2!", hashed) is False


def test_create_access_token_contains_claims(settings):
    token = create_access_token(data={"sub": "42"}, settings=settings)
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    assert payload["sub"] == "42"
    assert "exp" in payload


def test_create_access_token_does_not_modify_input(settings):
    data = {"sub": "1"}
    create_access_token(data=data, settings=settings, expires_delta=timedelta(minutes=1))
    assert data == {"sub": "1"}


def test_pending_verification_token_round_trip(settings):
    token = create_pending_verification_token("a@example.com", 1700000000.5, settings)
    pending = decode_pending_verification_token(token, settings)
    assert pending.email == "a@example.com"
    assert pending.code_sent_at == 1700000000.5


def test_access_token_is_not_a_pending_verification(settings):
    token = create_access_token(data={"sub": "a@example.com"}, settings=settings)
    assert decode_pending_verification_token(token, settings) is None


def test_pending_verification_token_expired(settings):
    token = create_access_token(
        data={"sub": "a@example.com", "purpose": "pending_verification"},
        settings=settings,
        expires_delta=timedelta(seconds=-1),
    )
    assert decode_pending_verification_token(token, settings) is None


def test_pending_verification_token_garbage(settings):
    assert decode_pending_verification_token("not-a-token", settings) is None


def test_generate_one_time_code():
    code = generate_one_time_code()
    assert len(code) == ONE_TIME_CODE_LENGTH
    assert code.isdigit()


def test_authenticate_user(db_session, verified_user):
    assert authenticate_user(db_session, "jane@example.com", VALID_PASSWORD).id == verified_user.id
    assert authenticate_user(db_session, "jane@example.com", "wrong") is None
    assert authenticate_user(db_session, "nobody@example.com", VALID_PASSWORD) is None


def test_authenticate_inactive_user(db_session, verified_user):
    verified_user.is_active = False
    db_session.commit()
    assert authenticate_user(db_session, "jane@example.com", VALID_PASSWORD) is None
