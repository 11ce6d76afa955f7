from sqlalchemy import Column, Integer, String, Boolean, DateTime, event
from sqlalchemy.sql import func
from photoindex.lib.uid import ALBUM_PREFIX, ensure_uid
from photoindex.models import Base


class Album(Base):
    __tablename__ = "albums"

    id = Column(Integer, primary_key=True)
    album_uid = Column(String(42), unique=True, nullable=False, index=True)
    album_title = Column(String(255), nullable=False, default="")
    album_type = Column(String(8), nullable=False, default="album")
    photo_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime, server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)


class PhotoAlbum(Base):
    """Album membership of a photo."""
    __tablename__ = "photos_albums"

    photo_uid = Column(String(42), primary_key=True)
    album_uid = Column(String(42), primary_key=True, index=True)
    hidden = Column(Boolean, nullable=False, default=False)
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime, server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)


@event.listens_for(Album, "before_insert")
def _album_before_insert(mapper, connection, target):
    ensure_uid(target, "album_uid", ALBUM_PREFIX)
