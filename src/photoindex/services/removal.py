"""Permanent removal of a photo: files on disk first, then its rows."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from photoindex.models.album import PhotoAlbum
from photoindex.models.file import File
from photoindex.models.label import PhotoLabel
from photoindex.models.photo import Photo

log = logging.getLogger(__name__)


class Remover(Protocol):
    """Removes one photo for good; raises when it could not."""

    def remove(self, photo: Photo) -> None: ...


class OriginalsRemover:
    """Deletes a photo's files below the configured roots, then its rows.

    Every path is resolved before the first file is unlinked, so an unknown
    root or a path outside its root leaves the disk untouched. If unlinking
    or the row delete fails halfway, rows of files already gone are marked
    `file_missing` before the error is raised.

    Args:
        session: SQLAlchemy session
        originals_path: folder holding files with file_root "/"
        roots: extra file_root -> folder mappings (e.g. {"sidecar": "/photos/sidecar"})
    """

    def __init__(self, session: Session, originals_path: str, roots: Optional[dict[str, str]] = None):
        self.session = session
        self.roots = {"/": originals_path}
        if roots:
            self.roots.update(roots)

    def disk_path(self, f: File) -> Path:
        base = self.roots.get(f.file_root or "/")
        if base is None:
            raise ValueError(f"unknown file root {f.file_root!r} for {f.file_uid}")
        base_path = Path(base).resolve()
        path = (base_path / f.file_name.lstrip("/")).resolve()
        if base_path != path and base_path not in path.parents:
            raise ValueError(f"{f.file_name} is outside of {base_path}")
        return path

    def remove(self, photo: Photo) -> None:
        files = self.session.query(File).filter(File.photo_id == photo.id).all()
        paths = [(f.id, self.disk_path(f)) for f in files]

        gone = []
        try:
            for file_id, path in paths:
                if path.exists():
                    path.unlink()
                    log.debug("delete: removed %s", path)
                else:
                    log.debug("delete: %s already gone", path)
                gone.append(file_id)

            self.session.query(File).filter(File.photo_id == photo.id).delete(synchronize_session=False)
            self.session.query(PhotoAlbum).filter(PhotoAlbum.photo_uid == photo.photo_uid).delete(synchronize_session=False)
            self.session.query(PhotoLabel).filter(PhotoLabel.photo_id == photo.id).delete(synchronize_session=False)
            self.session.query(Photo).filter(Photo.id == photo.id).delete(synchronize_session=False)
            self.session.commit()
        except (OSError, SQLAlchemyError):
            self.session.rollback()
            self._mark_missing(gone)
            raise

        log.info("delete: removed photo %s and %d file(s)", photo.photo_uid, len(files))

    def _mark_missing(self, file_ids: list[int]) -> None:
        if not file_ids:
            return
        try:
            self.session.query(File).filter(File.id.in_(file_ids)).update(
                {File.file_missing: True}, synchronize_session=False
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.error("delete: %s (mark %d file(s) missing)", exc, len(file_ids))
            return
        self.session.expire_all()
        log.warning("delete: marked %d file(s) missing after a failed removal", len(file_ids))
