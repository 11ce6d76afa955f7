import pytest

from photoindex.lib.uid import generate_uid
from photoindex.models.user import ADMIN_UID, GUEST_UID, UNKNOWN_UID, User
from photoindex.services.acl import Action, Resource, RoleAccess


def _user(**kwargs):
    kwargs.setdefault("user_uid", generate_uid("u"))
    kwargs.setdefault("user_name", "someone")
    return User(**kwargs)


@pytest.fixture
def acl():
    return RoleAccess()


def test_admin_may_do_everything(acl):
    admin = _user(user_uid=ADMIN_UID, user_name="admin", role_admin=True)
    for resource in Resource:
        for action in Action:
            assert acl.allowed(admin, resource, action)


def test_family_may_edit_photos_only(acl):
    member = _user(role_family=True)
    assert acl.allowed(member, Resource.PHOTOS, Action.UPDATE)
    assert acl.allowed(member, Resource.PHOTOS, Action.PRIVATE)
    assert not acl.allowed(member, Resource.PHOTOS, Action.DELETE)
    assert not acl.allowed(member, Resource.ALBUMS, Action.DELETE)


def test_denied_callers(acl):
    assert not acl.allowed(None, Resource.PHOTOS, Action.UPDATE)
    assert not acl.allowed(_user(user_uid=UNKNOWN_UID, role_admin=True), Resource.PHOTOS, Action.UPDATE)
    assert not acl.allowed(_user(role_admin=True, user_disabled=True), Resource.PHOTOS, Action.UPDATE)
    assert not acl.allowed(_user(user_uid=GUEST_UID, role_guest=True), Resource.PHOTOS, Action.UPDATE)
    assert not acl.allowed(object(), Resource.PHOTOS, Action.UPDATE)


def test_custom_grants():
    acl = RoleAccess(grants={})
    assert not acl.allowed(_user(role_admin=True), Resource.LABELS, Action.DELETE)
