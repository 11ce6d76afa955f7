from sqlalchemy import Column, Integer, BigInteger, String, Boolean, DateTime, ForeignKey, event
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from photoindex.lib.uid import FILE_PREFIX, ensure_uid
from photoindex.models import Base

# Short type code of the files eligible as primary.
JPEG_TYPE = "jpg"


class File(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True)
    file_uid = Column(String(42), unique=True, nullable=False, index=True)
    photo_id = Column(Integer, ForeignKey("photos.id"), nullable=True, index=True)
    photo_uid = Column(String(42), nullable=True, index=True)
    # Keep root + name within MySQL's index key length limit (utf8mb4).
    file_root = Column(String(16), nullable=False, default="/")
    file_name = Column(String(740), nullable=False)
    original_name = Column(String(755), nullable=False, default="")
    file_hash = Column(String(128), nullable=True, index=True)
    file_size = Column(BigInteger, nullable=False, default=0)
    file_type = Column(String(32), nullable=True)
    file_mime = Column(String(64), nullable=True)
    file_width = Column(Integer, nullable=False, default=0)
    file_height = Column(Integer, nullable=False, default=0)
    file_primary = Column(Boolean, nullable=False, default=False)
    file_sidecar = Column(Boolean, nullable=False, default=False)
    file_video = Column(Boolean, nullable=False, default=False)
    # The file vanished from disk; the row is kept.
    file_missing = Column(Boolean, nullable=False, default=False)
    file_error = Column(String(512), nullable=False, default="")
    mod_time = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime, server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)
    deleted_at = Column(DateTime, nullable=True, index=True)

    # Never loaded implicitly: ask the repository for `with_photo=True`.
    photo = relationship("Photo", lazy="raise")

    def __repr__(self) -> str:
        return f"<File {self.file_uid} {self.file_root}/{self.file_name}>"


@event.listens_for(File, "before_insert")
def _file_before_insert(mapper, connection, target):
    ensure_uid(target, "file_uid", FILE_PREFIX)
