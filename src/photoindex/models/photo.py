from dataclasses import dataclass
from datetime import datetime
from typing import Union

from sqlalchemy import Column, Integer, String, Boolean, DateTime, event
from sqlalchemy.sql import func
from photoindex.lib.uid import PHOTO_PREFIX, ensure_uid
from photoindex.models import Base

# Photos below this quality are waiting for review.
APPROVED_QUALITY = 3


@dataclass(frozen=True)
class Active:
    pass


@dataclass(frozen=True)
class Archived:
    at: datetime


Lifecycle = Union[Active, Archived]


class Photo(Base):
    __tablename__ = "photos"

    id = Column(Integer, primary_key=True)
    photo_uid = Column(String(42), unique=True, nullable=False, index=True)
    photo_path = Column(String(500), nullable=False, default="", index=True)
    photo_name = Column(String(255), nullable=False, default="")
    photo_title = Column(String(200), nullable=False, default="")
    photo_quality = Column(Integer, nullable=False, default=0)
    photo_private = Column(Boolean, nullable=False, default=False)
    file_count = Column(Integer, nullable=False, default=0)
    edited_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime, server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)
    # NULL while the photo is active; set when archived.
    deleted_at = Column(DateTime, nullable=True, index=True)

    @property
    def lifecycle(self) -> Lifecycle:
        if self.deleted_at is None:
            return Active()
        return Archived(self.deleted_at)

    @property
    def review(self) -> bool:
        """True while the photo is pending approval."""
        return (self.photo_quality or 0) < APPROVED_QUALITY

    def __repr__(self) -> str:
        return f"<Photo {self.photo_uid}>"


@event.listens_for(Photo, "before_insert")
def _photo_before_insert(mapper, connection, target):
    ensure_uid(target, "photo_uid", PHOTO_PREFIX)
