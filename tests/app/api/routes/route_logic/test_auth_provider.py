from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from resume_builder.app.api.routes.route_logic.auth_provider import (
    AuthProviderError,
    AuthTransportError,
    DatabaseAuthProvider,
    LoggingCodeSender,
)
from resume_builder.app.models.one_time_code import OneTimeCode
from resume_builder.app.models.user import User

VALID_PASSWORD = "Str0ng!Pass"


class MutableClock:
    def __init__(self):
        self.now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def provider(db_session, settings, code_sender, clock) -> DatabaseAuthProvider:
    return DatabaseAuthProvider(db=db_session, settings=settings, sender=code_sender, clock=clock)


def test_sign_up_creates_unverified_user_and_sends_code(provider, db_session, code_sender, clock):
    dispatch = provider.sign_up("Jane@Example.com", VALID_PASSWORD, "Jane Doe")

    assert dispatch.email == "jane@example.com"
    assert dispatch.sent_at == clock.now.timestamp()
    user = db_session.query(User).filter(User.email == "jane@example.com").one()
    assert user.is_verified is False
    assert user.full_name == "Jane Doe"
    assert user.hashed_password != VALID_PASSWORD
    (email, code) = code_sender.sent[0]
    assert email == "jane@example.com"
    assert len(code) == 6
    stored = db_session.query(OneTimeCode).filter(OneTimeCode.user_id == user.id).one()
    assert stored.hashed_code != code


def test_sign_up_duplicate_verified_email(provider, verified_user):
    with pytest.raises(AuthProviderError, match="User already registered"):
        provider.sign_up("jane@example.com", VALID_PASSWORD, "Someone Else")


def test_sign_up_again_while_unverified_resends(provider, db_session, code_sender):
    provider.sign_up("new@example.com", VALID_PASSWORD, "First Name")
    provider.sign_up("new@example.com", "An0ther!Pass", "Second Name")

    users = db_session.query(User).filter(User.email == "new@example.com").all()
    assert len(users) == 1
    assert users[0].full_name == "Second Name"
    assert len(code_sender.sent) == 2


def test_verify_code_marks_user_verified(provider, db_session, code_sender):
    provider.sign_up("new@example.com", VALID_PASSWORD, "New User")

    session = provider.verify_code("new@example.com", code_sender.last_code)

    assert session.email == "new@example.com"
    user = db_session.query(User).filter(User.email == "new@example.com").one()
    assert user.is_verified is True


def test_verify_code_is_single_use(provider, code_sender):
    provider.sign_up("new@example.com", VALID_PASSWORD, "New User")
    code = code_sender.last_code
    provider.verify_code("new@example.com", code)

    with pytest.raises(AuthProviderError):
        provider.verify_code("new@example.com", code)


def test_verify_wrong_code(provider, code_sender):
    provider.sign_up("new@example.com", VALID_PASSWORD, "New User")
    wrong = "000000" if code_sender.last_code != "000000" else "111111"

    with pytest.raises(AuthProviderError, match="Token has expired or is invalid"):
        provider.verify_code("new@example.com", wrong)


def test_verify_expired_code(provider, code_sender, clock, settings):
    provider.sign_up("new@example.com", VALID_PASSWORD, "New User")
    clock.now += timedelta(minutes=settings.otp_expire_minutes, seconds=1)

    with pytest.raises(AuthProviderError):
        provider.verify_code("new@example.com", code_sender.last_code)


def test_only_latest_code_is_accepted(provider, code_sender, clock):
    provider.sign_up("new@example.com", VALID_PASSWORD, "New User")
    first_code = code_sender.last_code
    clock.now += timedelta(seconds=90)
    provider.resend_code("new@example.com")
    second_code = code_sender.last_code

    if first_code != second_code:
        with pytest.raises(AuthProviderError):
            provider.verify_code("new@example.com", first_code)
    assert provider.verify_code("new@example.com", second_code).email == "new@example.com"


def test_verify_unknown_email(provider):
    with pytest.raises(AuthProviderError):
        provider.verify_code("ghost@example.com", "123456")


def test_sign_in(provider, verified_user):
    session = provider.sign_in(" JANE@example.com ", VALID_PASSWORD)
    assert session.user_id == verified_user.id
    assert session.full_name == "Jane Doe"


def test_sign_in_wrong_password(provider, verified_user):
    with pytest.raises(AuthProviderError, match="Invalid login credentials"):
        provider.sign_in("jane@example.com", "Wrong!Pass1")


def test_sign_in_unverified(provider):
    provider.sign_up("new@example.com", VALID_PASSWORD, "New User")
    with pytest.raises(AuthProviderError, match="Email not confirmed"):
        provider.sign_in("new@example.com", VALID_PASSWORD)


def test_resend_for_verified_account_is_rejected(provider, verified_user):
    with pytest.raises(AuthProviderError):
        provider.resend_code("jane@example.com")


def test_get_session(provider, verified_user, db_session):
    assert provider.get_session(verified_user.id).email == "jane@example.com"
    verified_user.is_active = False
    db_session.commit()
    assert provider.get_session(verified_user.id) is None
    assert provider.get_session(9999) is None


def test_database_error_becomes_transport_error(settings):
    db = Mock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("down"))
    provider = DatabaseAuthProvider(db=db, settings=settings)

    with pytest.raises(AuthTransportError):
        provider.sign_in("jane@example.com", VALID_PASSWORD)
    db.rollback.assert_called_once()


def test_logging_sender_is_the_default(db_session, settings):
    provider = DatabaseAuthProvider(db=db_session, settings=settings)
    assert isinstance(provider.sender, LoggingCodeSender)
