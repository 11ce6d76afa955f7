import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import func, select, update, or_, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from photoindex.models.photo import Photo, APPROVED_QUALITY
from photoindex.models.file import File
from photoindex.models.album import Album, PhotoAlbum
from photoindex.models.label import Label, PhotoLabel
from photoindex.models.duplicate import Duplicate

log = logging.getLogger(__name__)


def timestamp() -> datetime:
    """Current UTC time as a naive datetime, the way the columns store it."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Repository:
    """Typed queries and saves over one SQLAlchemy session.

    Reads skip soft-deleted rows unless `include_archived=True` is passed.
    Related rows are only loaded when asked for (`with_photo=True`).
    """

    def __init__(self, session: Session):
        self.session = session

    # -- generic ---------------------------------------------------------

    def save(self, obj):
        """Insert or update a row. UIDs are assigned on first insert only."""
        self.session.add(obj)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return obj

    # -- photos ----------------------------------------------------------

    def create_photo(self, **kwargs) -> Photo:
        return self.save(Photo(**kwargs))

    def photo_by_uid(self, photo_uid: str, include_archived: bool = False) -> Optional[Photo]:
        if not photo_uid:
            return None
        q = self.session.query(Photo).filter(Photo.photo_uid == photo_uid)
        if not include_archived:
            q = q.filter(Photo.deleted_at.is_(None))
        return q.first()

    def photo_selection(self, photo_uids: Iterable[str], include_archived: bool = False) -> list[Photo]:
        """Photos named by a selection, in selection order; unknown UIDs are skipped."""
        uids = list(dict.fromkeys(photo_uids))
        if not uids:
            return []
        q = self.session.query(Photo).filter(Photo.photo_uid.in_(uids))
        if not include_archived:
            q = q.filter(Photo.deleted_at.is_(None))
        by_uid = {p.photo_uid: p for p in q.all()}
        return [by_uid[u] for u in uids if u in by_uid]

    def approve_photo(self, photo: Photo) -> Photo:
        """Clear the pending review state of a photo. Already approved photos are left as is."""
        if not photo.review:
            return photo
        photo.photo_quality = APPROVED_QUALITY
        photo.edited_at = timestamp()
        return self.save(photo)

    # -- files -----------------------------------------------------------

    def create_file(self, photo: Optional[Photo] = None, **kwargs) -> File:
        f = File(**kwargs)
        if photo is not None:
            f.photo_id = photo.id
            f.photo_uid = photo.photo_uid
        return self.save(f)

    def _files(self, with_photo: bool):
        q = self.session.query(File).filter(File.deleted_at.is_(None))
        if with_photo:
            q = q.options(joinedload(File.photo))
        return q

    def file_by_uid(self, file_uid: str, with_photo: bool = False) -> Optional[File]:
        if not file_uid:
            return None
        return self._files(with_photo).filter(File.file_uid == file_uid).first()

    def file_by_hash(self, file_hash: str, with_photo: bool = False) -> Optional[File]:
        """First file with the given content hash; hashes are not unique."""
        if not file_hash:
            return None
        return self._files(with_photo).filter(File.file_hash == file_hash).order_by(File.id).first()

    def file_by_name(self, file_root: str, file_name: str, with_photo: bool = False) -> Optional[File]:
        if not file_name:
            return None
        return (
            self._files(with_photo)
            .filter(File.file_root == file_root, File.file_name == file_name)
            .order_by(File.id)
            .first()
        )

    def file_by_photo_uid(self, photo_uid: str, with_photo: bool = False) -> Optional[File]:
        """The primary file of a photo."""
        return (
            self._files(with_photo)
            .filter(File.photo_uid == photo_uid, File.file_primary.is_(True))
            .first()
        )

    def video_by_photo_uid(self, photo_uid: str, with_photo: bool = False) -> Optional[File]:
        return (
            self._files(with_photo)
            .filter(File.photo_uid == photo_uid, File.file_video.is_(True))
            .first()
        )

    def files_by_uid(self, uids: list[str], limit: int = 100, offset: int = 0, with_photo: bool = False) -> list[File]:
        """Files named directly, plus the primary file of each photo named."""
        if not uids:
            return []
        return (
            self._files(with_photo)
            .filter(or_(
                and_(File.photo_uid.in_(uids), File.file_primary.is_(True)),
                File.file_uid.in_(uids),
            ))
            .order_by(File.id)
            .limit(limit)
            .offset(offset)
            .all()
        )

    def files_by_path(self, limit: int, offset: int, file_root: str, path: str) -> list[File]:
        """Present files of active photos stored in one originals folder."""
        path = path.lstrip("/")
        return (
            self.session.query(File)
            .join(Photo, and_(Photo.id == File.photo_id, Photo.deleted_at.is_(None)))
            .filter(
                File.deleted_at.is_(None),
                File.file_missing.is_(False),
                File.file_root == file_root,
                Photo.photo_path == path,
            )
            .order_by(File.file_name)
            .limit(limit)
            .offset(offset)
            .all()
        )

    def files(self, limit: int, offset: int, path: str = "", include_missing: bool = False) -> list[File]:
        """Indexed files sorted by id, optionally below a folder."""
        path = path.lstrip("/")
        q = self.session.query(File).filter(File.deleted_at.is_(None))
        if not include_missing:
            q = q.filter(File.file_missing.is_(False))
        if path:
            q = q.filter(File.file_name.like(path + "/%"))
        return q.order_by(File.id).limit(limit).offset(offset).all()

    def rename_file(self, src_root: str, src_name: str, dest_root: str, dest_name: str) -> int:
        """Point an indexed file at its new location; it is present and active afterwards."""
        if not (src_root and src_name and dest_root and dest_name):
            raise ValueError(f"can't rename {src_root}/{src_name} to {dest_root}/{dest_name}")
        try:
            count = (
                self.session.query(File)
                .filter(File.file_root == src_root, File.file_name == src_name)
                .update(
                    {
                        File.file_root: dest_root,
                        File.file_name: dest_name,
                        File.file_missing: False,
                        File.deleted_at: None,
                    },
                    synchronize_session=False,
                )
            )
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        self.session.expire_all()
        return count

    def set_file_error(self, file_uid: str, error: str) -> None:
        try:
            self.session.query(File).filter(File.file_uid == file_uid).update(
                {File.file_error: error[:512]}, synchronize_session=False
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.error("files: %s (set error for %s)", exc, file_uid)
            return
        self.session.expire_all()

    def file_count(self, photo_uid: str) -> int:
        return (
            self.session.query(func.count(File.id))
            .filter(File.photo_uid == photo_uid, File.file_missing.is_(False), File.deleted_at.is_(None))
            .scalar()
        ) or 0

    # -- albums and labels ----------------------------------------------

    def create_album(self, **kwargs) -> Album:
        return self.save(Album(**kwargs))

    def add_to_album(self, photo_uid: str, album_uid: str, hidden: bool = False) -> PhotoAlbum:
        return self.save(PhotoAlbum(photo_uid=photo_uid, album_uid=album_uid, hidden=hidden))

    def album_by_uid(self, album_uid: str) -> Optional[Album]:
        return self.session.query(Album).filter(Album.album_uid == album_uid).first()

    def create_label(self, name: str, slug: Optional[str] = None) -> Label:
        return self.save(Label(label_name=name, label_slug=slug or name.strip().lower().replace(" ", "-")))

    def add_label(self, photo: Photo, label: Label, uncertainty: int = 0) -> PhotoLabel:
        return self.save(PhotoLabel(photo_id=photo.id, label_id=label.id, uncertainty=uncertainty))

    def label_by_uid(self, label_uid: str, include_archived: bool = False) -> Optional[Label]:
        q = self.session.query(Label).filter(Label.label_uid == label_uid)
        if not include_archived:
            q = q.filter(Label.deleted_at.is_(None))
        return q.first()

    def delete_label(self, label: Label) -> None:
        """Archive a label and drop its photo assignments."""
        try:
            self.session.query(PhotoLabel).filter(PhotoLabel.label_id == label.id).delete(synchronize_session=False)
            label.deleted_at = timestamp()
            label.photo_count = 0
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def update_photo_counts(self) -> None:
        """Recompute album and label photo counts from active, visible photos."""
        album_count = (
            select(func.count())
            .select_from(PhotoAlbum)
            .join(Photo, Photo.photo_uid == PhotoAlbum.photo_uid)
            .where(
                PhotoAlbum.album_uid == Album.album_uid,
                PhotoAlbum.hidden.is_(False),
                Photo.deleted_at.is_(None),
                Photo.photo_private.is_(False),
            )
            .scalar_subquery()
        )
        label_count = (
            select(func.count())
            .select_from(PhotoLabel)
            .join(Photo, Photo.id == PhotoLabel.photo_id)
            .where(
                PhotoLabel.label_id == Label.id,
                Photo.deleted_at.is_(None),
                Photo.photo_private.is_(False),
            )
            .scalar_subquery()
        )
        try:
            self.session.execute(update(Album).values(photo_count=album_count).execution_options(synchronize_session=False))
            self.session.execute(update(Label).where(Label.deleted_at.is_(None)).values(photo_count=label_count).execution_options(synchronize_session=False))
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        self.session.expire_all()

    # -- duplicate ledger -----------------------------------------------

    def record_duplicate(self, file_root: str, file_name: str, file_hash: str, file_size: int, mod_time: int) -> Duplicate:
        """Insert or refresh the ledger row for a file found to duplicate indexed content."""
        row = self.session.get(Duplicate, (file_root, file_name))
        if row is None:
            row = Duplicate(file_root=file_root, file_name=file_name)
        row.file_hash = file_hash
        row.file_size = file_size
        row.mod_time = mod_time
        return self.save(row)
