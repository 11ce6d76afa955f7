from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, event
from sqlalchemy.sql import func
from photoindex.lib.uid import LABEL_PREFIX, ensure_uid
from photoindex.models import Base


class Label(Base):
    __tablename__ = "labels"

    id = Column(Integer, primary_key=True)
    label_uid = Column(String(42), unique=True, nullable=False, index=True)
    label_slug = Column(String(160), unique=True, nullable=False)
    label_name = Column(String(160), nullable=False)
    photo_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime, server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)
    deleted_at = Column(DateTime, nullable=True, index=True)


class PhotoLabel(Base):
    __tablename__ = "photos_labels"

    photo_id = Column(Integer, ForeignKey("photos.id"), primary_key=True)
    label_id = Column(Integer, ForeignKey("labels.id"), primary_key=True, index=True)
    uncertainty = Column(Integer, nullable=False, default=0)


@event.listens_for(Label, "before_insert")
def _label_before_insert(mapper, connection, target):
    ensure_uid(target, "label_uid", LABEL_PREFIX)
