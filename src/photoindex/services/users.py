"""Well-known accounts and password checks."""
from __future__ import annotations

import logging
from typing import Optional

import bcrypt
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from photoindex.lib.throttle import LinearDelay
from photoindex.models.user import ADMIN_UID, GUEST_UID, UNKNOWN_UID, Password, User
from photoindex.services.repository import timestamp

log = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 4

DEFAULT_USERS = (
    {"user_uid": ADMIN_UID, "user_name": "admin", "full_name": "Admin", "role_admin": True},
    {"user_uid": UNKNOWN_UID, "full_name": "Anonymous", "user_disabled": True},
    {"user_uid": GUEST_UID, "full_name": "Guest", "role_guest": True, "user_disabled": True},
)


def bootstrap_default_users(session: Session) -> list[User]:
    """Create the admin, anonymous and guest accounts unless they exist.

    Safe to call on every startup. Returns the three rows in that order.
    """
    users = []
    for fields in DEFAULT_USERS:
        user = session.query(User).filter(User.user_uid == fields["user_uid"]).first()
        if user is None:
            user = User(**fields)
            session.add(user)
            log.info("users: created default account %s", fields["user_uid"])
        users.append(user)
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    return users


def find_user_by_uid(session: Session, uid: str) -> Optional[User]:
    if not uid:
        return None
    user = session.query(User).filter(User.user_uid == uid, User.deleted_at.is_(None)).first()
    if user is None:
        log.debug("users: %r not found", uid)
    return user


def find_user_by_name(session: Session, user_name: str) -> Optional[User]:
    if not user_name:
        return None
    user = session.query(User).filter(User.user_name == user_name, User.deleted_at.is_(None)).first()
    if user is None:
        log.debug("users: %r not found", user_name)
    return user


def set_password(session: Session, user: User, password: str) -> None:
    """Store a new password hash for a registered user.

    Raises:
        ValueError: the user is not registered or the password is too short
    """
    if not user.registered:
        raise ValueError("only registered users can change their password")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"new password for {user.user_name!r} must be at least {MIN_PASSWORD_LENGTH} characters")

    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("ascii")
    row = session.get(Password, user.user_uid)
    if row is None:
        row = Password(uid=user.user_uid, hash=hashed)
        session.add(row)
    else:
        row.hash = hashed
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise


def invalid_password(session: Session, user: User, password: str, delay: Optional[LinearDelay] = None) -> bool:
    """Return True if `password` does NOT match the user's stored hash.

    Before checking, waits according to the failed attempts recorded for the
    user. A mismatch increments the counter in the store, a match resets it.
    """
    if not user.registered:
        log.warning("users: only registered users can log in")
        return True
    if not password:
        return True

    (delay or LinearDelay()).wait(user.login_attempts or 0)

    row = session.get(Password, user.user_uid)
    if row is None:
        return True

    if not bcrypt.checkpw(password.encode("utf-8"), row.hash.encode("ascii")):
        try:
            session.query(User).filter(User.id == user.id).update(
                {User.login_attempts: User.login_attempts + 1}, synchronize_session=False
            )
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            log.error("users: %s (update login attempts)", exc)
        session.refresh(user)
        return True

    try:
        session.query(User).filter(User.id == user.id).update(
            {User.login_attempts: 0, User.login_at: timestamp()}, synchronize_session=False
        )
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        log.error("users: %s (update last login)", exc)
    session.refresh(user)
    return False
