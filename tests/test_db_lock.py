import os
from datetime import datetime, timedelta

import pytest

from photoindex.lib.db_lock import DatabaseLock, LockAcquisitionError, acquire_lock, check_lock_exists
from photoindex.models import ApplicationLock


def test_lock_is_exclusive(session):
    with acquire_lock(session, "primary:p1"):
        assert check_lock_exists(session, "primary:p1") is not None
        with pytest.raises(LockAcquisitionError):
            DatabaseLock(session, "primary:p1").acquire()
        # other names are independent
        with acquire_lock(session, "primary:p2"):
            pass

    assert check_lock_exists(session, "primary:p1") is None
    assert session.query(ApplicationLock).count() == 0


def test_wait_times_out(session):
    with acquire_lock(session, "scan"):
        lock = DatabaseLock(session, "scan", wait_for_lock=True, wait_timeout=0, poll_interval=0)
        with pytest.raises(LockAcquisitionError):
            lock.acquire()


def test_expired_lock_is_taken_over(session):
    session.add(ApplicationLock(
        lock_name="scan", process_id=1, hostname="elsewhere",
        expires_at=datetime.now() - timedelta(minutes=1),
    ))
    session.commit()
    assert check_lock_exists(session, "scan") is None

    with DatabaseLock(session, "scan") as lock:
        assert lock.lock_record.process_id == os.getpid()
        assert session.query(ApplicationLock).count() == 1

    assert session.query(ApplicationLock).count() == 0


def test_lock_released_on_error(session):
    with pytest.raises(RuntimeError):
        with acquire_lock(session, "primary:p1"):
            raise RuntimeError("boom")
    assert check_lock_exists(session, "primary:p1") is None


def test_lock_row_expiry():
    now = datetime(2026, 1, 1, 12, 0)
    lock = ApplicationLock(lock_name="scan", process_id=42, hostname="nas")
    assert not lock.expired(now)

    lock.expires_at = now - timedelta(seconds=1)
    assert lock.expired(now)
    lock.expires_at = now + timedelta(seconds=1)
    assert not lock.expired(now)
    assert lock.holder == "pid 42 on nas"
