import pytest

from photoindex.lib.throttle import LinearDelay
from photoindex.models.user import ADMIN_UID, GUEST_UID, UNKNOWN_UID, Password, Role, User
from photoindex.services.users import (
    bootstrap_default_users,
    find_user_by_name,
    find_user_by_uid,
    invalid_password,
    set_password,
)


def _recording_delay(waits):
    return LinearDelay(step=5, cap=60, sleep=waits.append)


@pytest.fixture
def alice(session):
    user = User(user_name="alice", full_name="Alice", role_family=True)
    session.add(user)
    session.commit()
    return user


def test_bootstrap_is_idempotent(session):
    first = bootstrap_default_users(session)
    second = bootstrap_default_users(session)

    assert [u.user_uid for u in first] == [ADMIN_UID, UNKNOWN_UID, GUEST_UID]
    assert [u.id for u in first] == [u.id for u in second]
    assert session.query(User).count() == 3

    admin, anonymous, guest = first
    assert admin.registered and admin.is_admin and admin.role == Role.ADMIN
    assert anonymous.anonymous and not anonymous.registered
    assert guest.guest and guest.user_disabled


def test_find_users(session, alice):
    bootstrap_default_users(session)
    assert find_user_by_name(session, "admin").user_uid == ADMIN_UID
    assert find_user_by_uid(session, alice.user_uid).user_name == "alice"
    assert find_user_by_name(session, "bob") is None
    assert find_user_by_uid(session, "") is None


def test_set_password_stores_bcrypt_hash(session, alice):
    set_password(session, alice, "photos")
    row = session.get(Password, alice.user_uid)
    assert row.hash.startswith("$2")
    assert "photos" not in row.hash


def test_set_password_rules(session, alice):
    with pytest.raises(ValueError):
        set_password(session, alice, "abc")
    with pytest.raises(ValueError):
        set_password(session, User(user_uid=UNKNOWN_UID), "long enough")


def test_failed_attempts_slow_down_next_check(session, alice):
    set_password(session, alice, "photos")
    waits = []
    delay = _recording_delay(waits)

    assert invalid_password(session, alice, "wrong", delay)
    assert alice.login_attempts == 1
    assert invalid_password(session, alice, "wrong again", delay)
    assert alice.login_attempts == 2
    assert waits == [5.0]

    assert not invalid_password(session, alice, "photos", delay)
    assert waits == [5.0, 10.0]
    assert alice.login_attempts == 0
    assert alice.login_at is not None


def test_unregistered_user_never_matches(session):
    waits = []
    anonymous = bootstrap_default_users(session)[1]
    assert invalid_password(session, anonymous, "anything", _recording_delay(waits))
    assert waits == []


def test_empty_password_and_missing_hash(session, alice):
    waits = []
    assert invalid_password(session, alice, "", _recording_delay(waits))
    assert invalid_password(session, alice, "photos", _recording_delay(waits))
    assert alice.login_attempts == 0
