import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from photoindex.errors import BadRequest, NoEligibleFile
from photoindex.models.file import File, JPEG_TYPE
from photoindex.models.photo import Photo
from photoindex.services.repository import Repository

log = logging.getLogger(__name__)


def primary_candidate(session: Session, photo_uid: str):
    """UID of the widest present JPEG file of a photo, or None."""
    row = (
        session.query(File.file_uid)
        .filter(
            File.photo_uid == photo_uid,
            File.file_missing.is_(False),
            File.deleted_at.is_(None),
            File.file_type == JPEG_TYPE,
        )
        .order_by(File.file_width.desc(), File.id.asc())
        .first()
    )
    return row[0] if row else None


def _eligible(session: Session, photo_uid: str, file_uid: str) -> bool:
    """Whether file_uid is a present, active file of the photo."""
    return (
        session.query(File.id)
        .filter(
            File.photo_uid == photo_uid,
            File.file_uid == file_uid,
            File.file_missing.is_(False),
            File.deleted_at.is_(None),
        )
        .first()
        is not None
    )


def set_photo_primary(session: Session, photo_uid: str, file_uid: str = "") -> str:
    """Mark exactly one file of a photo as primary and return its UID.

    Without `file_uid` the widest present JPEG is chosen. Other files lose the
    flag first, then the chosen file gets it, each in its own commit; between
    the two a reader may see no primary file. Concurrent calls for the same
    photo must be serialized by the caller (see lib.db_lock).

    Raises:
        BadRequest: photo_uid is empty
        NoEligibleFile: no candidate exists, or file_uid is not a present
            file of the photo; nothing was changed
    """
    if not photo_uid:
        raise BadRequest("photo uid is missing")

    if not file_uid:
        file_uid = primary_candidate(session, photo_uid)
        if not file_uid:
            raise NoEligibleFile(f"can't find primary file for {photo_uid}")
    elif not _eligible(session, photo_uid, file_uid):
        raise NoEligibleFile(f"{file_uid} is not a present file of {photo_uid}")

    try:
        session.query(File).filter(File.photo_uid == photo_uid, File.file_uid != file_uid).update(
            {File.file_primary: False}, synchronize_session=False
        )
        session.commit()
        session.query(File).filter(File.photo_uid == photo_uid, File.file_uid == file_uid).update(
            {File.file_primary: True}, synchronize_session=False
        )
        file_count = Repository(session).file_count(photo_uid)
        session.query(Photo).filter(Photo.photo_uid == photo_uid).update(
            {Photo.file_count: file_count}, synchronize_session=False
        )
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        log.exception("primary: failed to set %s for photo %s", file_uid, photo_uid)
        raise

    session.expire_all()
    log.debug("primary: %s is now the primary file of %s", file_uid, photo_uid)
    return file_uid
