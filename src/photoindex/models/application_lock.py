from datetime import datetime
from typing import Optional

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from photoindex.models import Base


class ApplicationLock(Base):
    """A named lock; the unique lock_name lets only one holder insert its row.

    Rows past `expires_at` count as abandoned and are taken over by the next
    caller. Names used by photoindex are "primary:<photo_uid>" and "scan".
    """
    __tablename__ = "application_locks"

    id = Column(Integer, primary_key=True)
    lock_name = Column(String(255), unique=True, nullable=False, index=True)
    process_id = Column(Integer, nullable=False)
    hostname = Column(String(255), nullable=False)
    acquired_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
    expires_at = Column(DateTime, nullable=True)

    def expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at < (now or datetime.now())

    @property
    def holder(self) -> str:
        return f"pid {self.process_id} on {self.hostname}"
