"""Named locks stored in the database.

Resolving the primary file of a photo is not safe to run twice at the same
time for the same photo. Callers that may race serialize through a lock row:

    with acquire_lock(session, f"primary:{photo_uid}"):
        set_photo_primary(session, photo_uid)
"""
from __future__ import annotations

import logging
import os
import socket
import time
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Generator, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from photoindex.models.application_lock import ApplicationLock

log = logging.getLogger(__name__)


class LockAcquisitionError(Exception):
    """Raised when a lock cannot be acquired."""


class DatabaseLock:
    """Context manager holding one `application_locks` row.

    Args:
        session: SQLAlchemy session
        lock_name: unique name of the lock
        timeout_seconds: after this the lock counts as abandoned and may be taken over
        wait_for_lock: poll until the holder releases instead of failing at once
        wait_timeout: max seconds to poll
        poll_interval: seconds between polls
    """

    def __init__(
        self,
        session: Session,
        lock_name: str,
        timeout_seconds: int = 300,
        wait_for_lock: bool = False,
        wait_timeout: int = 30,
        poll_interval: float = 0.5,
    ):
        self.session = session
        self.lock_name = lock_name
        self.timeout_seconds = timeout_seconds
        self.wait_for_lock = wait_for_lock
        self.wait_timeout = wait_timeout
        self.poll_interval = poll_interval
        self.lock_record: Optional[ApplicationLock] = None

    def acquire(self) -> None:
        """Acquire the lock.

        Raises:
            LockAcquisitionError: If lock cannot be acquired
        """
        start_time = time.monotonic()

        while True:
            existing = self.session.query(ApplicationLock).filter_by(lock_name=self.lock_name).first()

            if existing is not None:
                if existing.expired():
                    log.warning("lock: taking over expired lock %r from %s", self.lock_name, existing.holder)
                    self.session.delete(existing)
                    try:
                        self.session.commit()
                    except IntegrityError:
                        self.session.rollback()
                    continue

                if not self.wait_for_lock:
                    raise LockAcquisitionError(
                        f"Lock '{self.lock_name}' is held by {existing.holder} (acquired at {existing.acquired_at})"
                    )
                if time.monotonic() - start_time >= self.wait_timeout:
                    raise LockAcquisitionError(
                        f"Timeout waiting for lock '{self.lock_name}' "
                        f"(held by {existing.holder})"
                    )
                log.debug("lock: waiting for %r (held by %s)", self.lock_name, existing.holder)
                time.sleep(self.poll_interval)
                continue

            record = ApplicationLock(
                lock_name=self.lock_name,
                process_id=os.getpid(),
                hostname=socket.gethostname(),
                expires_at=datetime.now() + timedelta(seconds=self.timeout_seconds),
            )
            self.session.add(record)
            try:
                self.session.commit()
            except IntegrityError:
                # Another process inserted the row first
                self.session.rollback()
                if not self.wait_for_lock:
                    raise LockAcquisitionError(f"Lock '{self.lock_name}' was acquired by another process")
                continue
            self.lock_record = record
            return

    def release(self) -> None:
        if self.lock_record is None:
            return
        try:
            self.session.delete(self.lock_record)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.lock_record = None

    def __enter__(self) -> DatabaseLock:
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()


@contextmanager
def acquire_lock(
    session: Session,
    lock_name: str,
    timeout_seconds: int = 300,
    wait_for_lock: bool = False,
    wait_timeout: int = 30,
) -> Generator[None, None, None]:
    """Hold the named lock for the duration of the with-block."""
    with DatabaseLock(
        session=session,
        lock_name=lock_name,
        timeout_seconds=timeout_seconds,
        wait_for_lock=wait_for_lock,
        wait_timeout=wait_timeout,
    ):
        yield


def check_lock_exists(session: Session, lock_name: str) -> Optional[ApplicationLock]:
    """Return the unexpired lock row for `lock_name`, if any, without taking it."""
    existing = session.query(ApplicationLock).filter_by(lock_name=lock_name).first()
    if existing is None:
        return None
    if existing.expired():
        return None
    return existing
