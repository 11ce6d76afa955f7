"""Lifecycle transitions applied to a selection of photos, albums or labels.

Every operation checks access first, then the selection, then touches the
store. Archive, restore, privacy toggle and album deletion fail as a whole on
the first store error. Approve, label deletion and permanent deletion work
item by item: a failing item is logged and skipped, and only the items that
changed are reported to the notifier.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import case
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from photoindex.errors import BadRequest, FeatureDisabled, NotFound, SaveFailed, Unauthorized
from photoindex.models.album import Album, PhotoAlbum
from photoindex.models.label import Label
from photoindex.models.photo import Photo
from photoindex.services.acl import AccessControl, Action, Resource
from photoindex.services.events import LogNotifier, Notifier
from photoindex.services.removal import Remover
from photoindex.services.repository import Repository, timestamp

log = logging.getLogger(__name__)


@dataclass
class Selection:
    """UIDs a batch request targets, grouped by kind. Never persisted."""
    photos: list[str] = field(default_factory=list)
    albums: list[str] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Selection":
        """Build a selection from a decoded request body.

        Raises:
            BadRequest: the body is not an object of string lists
        """
        if not isinstance(data, dict):
            raise BadRequest("selection must be an object")
        kwargs = {}
        for key in ("photos", "albums", "labels"):
            value = data.get(key) or []
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise BadRequest(f"{key} must be a list of strings")
            kwargs[key] = value
        return cls(**kwargs)

    def __str__(self) -> str:
        parts = self.photos + self.albums + self.labels
        return ", ".join(parts) if parts else "empty selection"


@dataclass
class BatchResult:
    message: str
    uids: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.uids)


def _require(items: Any, what: str) -> list[str]:
    """Validate one group of a selection before any store access."""
    if not items:
        raise BadRequest(f"no {what} selected")
    if not isinstance(items, (list, tuple)) or not all(isinstance(v, str) and v for v in items):
        raise BadRequest(f"invalid {what} selection")
    return list(dict.fromkeys(items))


class BatchService:
    """Applies batch operations for one caller against one session.

    Args:
        session: SQLAlchemy session
        access: access control consulted before anything else
        notifier: receives one event per successful call
        gate: object with `deletion_allowed()`, required for permanent deletion
        remover: removes photos for good, required for permanent deletion
    """

    def __init__(
        self,
        session: Session,
        access: AccessControl,
        notifier: Optional[Notifier] = None,
        gate: Any = None,
        remover: Optional[Remover] = None,
    ):
        self.session = session
        self.repo = Repository(session)
        self.access = access
        self.notifier = notifier or LogNotifier()
        self.gate = gate
        self.remover = remover

    def _authorize(self, caller: Any, resource: Resource, action: Action) -> None:
        if not self.access.allowed(caller, resource, action):
            log.warning("%s: %s denied for %s", resource.value, action.value, caller)
            raise Unauthorized(f"{action.value} {resource.value} not allowed")

    def _update_counts(self) -> None:
        try:
            self.repo.update_photo_counts()
        except SQLAlchemyError as exc:
            log.error("photos: %s (update counts)", exc)

    def _fail(self, op: str, exc: Exception) -> SaveFailed:
        self.session.rollback()
        log.error("%s: %s", op, exc)
        return SaveFailed(f"{op} failed")

    def archive_photos(self, caller: Any, selection: Selection) -> BatchResult:
        self._authorize(caller, Resource.PHOTOS, Action.DELETE)
        uids = _require(selection.photos, "items")

        log.info("photos: archiving %s", selection)

        found = [p.photo_uid for p in self.repo.photo_selection(uids, include_archived=True)]
        if not found:
            raise NotFound("no photos found")

        try:
            self.session.query(Photo).filter(Photo.photo_uid.in_(found), Photo.deleted_at.is_(None)).update(
                {Photo.deleted_at: timestamp()}, synchronize_session=False
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("archive", exc) from exc

        try:
            self.session.query(PhotoAlbum).filter(PhotoAlbum.photo_uid.in_(found)).update(
                {PhotoAlbum.hidden: True}, synchronize_session=False
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.error("archive: %s (hide album entries)", exc)

        self._update_counts()
        self.session.expire_all()
        self.notifier.entities_archived("photos", found)
        return BatchResult("Selection archived", found)

    def restore_photos(self, caller: Any, selection: Selection) -> BatchResult:
        self._authorize(caller, Resource.PHOTOS, Action.DELETE)
        uids = _require(selection.photos, "items")

        log.info("photos: restoring %s", selection)

        found = [p.photo_uid for p in self.repo.photo_selection(uids, include_archived=True)]
        if not found:
            raise NotFound("no photos found")

        try:
            self.session.query(Photo).filter(Photo.photo_uid.in_(found)).update(
                {Photo.deleted_at: None}, synchronize_session=False
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("restore", exc) from exc

        self._update_counts()
        self.session.expire_all()
        self.notifier.entities_restored("photos", found)
        return BatchResult("Selection restored", found)

    def approve_photos(self, caller: Any, selection: Selection) -> BatchResult:
        self._authorize(caller, Resource.PHOTOS, Action.UPDATE)
        uids = _require(selection.photos, "items")

        log.info("photos: approving %s", selection)

        photos = self.repo.photo_selection(uids)
        if not photos:
            raise NotFound("no photos found")

        approved = []
        for uid in [p.photo_uid for p in photos]:
            try:
                photo = self.repo.photo_by_uid(uid)
                if photo is None:
                    log.warning("approve: photo %s disappeared", uid)
                    continue
                self.repo.approve_photo(photo)
            except SQLAlchemyError as exc:
                self.session.rollback()
                log.error("approve: %s (%s)", exc, uid)
            else:
                approved.append(uid)

        if approved:
            self.notifier.entities_updated("photos", approved)
        return BatchResult("Selection approved", approved)

    def delete_albums(self, caller: Any, selection: Selection) -> BatchResult:
        self._authorize(caller, Resource.ALBUMS, Action.DELETE)
        uids = _require(selection.albums, "albums")

        log.info("albums: deleting %s", selection)

        existing = {uid for (uid,) in self.session.query(Album.album_uid).filter(Album.album_uid.in_(uids))}
        if not existing:
            raise NotFound("no albums found")
        found = [uid for uid in uids if uid in existing]

        try:
            self.session.query(PhotoAlbum).filter(PhotoAlbum.album_uid.in_(found)).delete(synchronize_session=False)
            self.session.query(Album).filter(Album.album_uid.in_(found)).delete(synchronize_session=False)
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("albums", exc) from exc

        self.session.expire_all()
        self.notifier.entities_deleted("albums", found)
        return BatchResult("Albums deleted", found)

    def toggle_private(self, caller: Any, selection: Selection) -> BatchResult:
        self._authorize(caller, Resource.PHOTOS, Action.PRIVATE)
        uids = _require(selection.photos, "items")

        log.info("photos: updating private flag for %s", selection)

        found = [p.photo_uid for p in self.repo.photo_selection(uids)]
        if not found:
            raise NotFound("no photos found")

        try:
            self.session.query(Photo).filter(Photo.photo_uid.in_(found), Photo.deleted_at.is_(None)).update(
                {Photo.photo_private: case((Photo.photo_private.is_(True), False), else_=True)},
                synchronize_session=False,
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("private", exc) from exc

        self._update_counts()
        self.session.expire_all()
        self.notifier.entities_updated("photos", found)
        return BatchResult("Selection marked as private", found)

    def delete_labels(self, caller: Any, selection: Selection) -> BatchResult:
        self._authorize(caller, Resource.LABELS, Action.DELETE)
        uids = _require(selection.labels, "labels")

        log.info("labels: deleting %s", selection)

        labels = self.session.query(Label).filter(Label.label_uid.in_(uids), Label.deleted_at.is_(None)).all()
        if not labels:
            raise NotFound("no labels found")

        deleted = []
        for uid in [label.label_uid for label in labels]:
            try:
                label = self.repo.label_by_uid(uid)
                if label is None:
                    continue
                self.repo.delete_label(label)
            except SQLAlchemyError as exc:
                self.session.rollback()
                log.error("labels: %s (%s)", exc, uid)
            else:
                deleted.append(uid)

        if deleted:
            self.notifier.entities_deleted("labels", deleted)
        return BatchResult("Labels deleted", deleted)

    def delete_photos(self, caller: Any, selection: Selection) -> BatchResult:
        self._authorize(caller, Resource.PHOTOS, Action.DELETE)
        if self.gate is None or not self.gate.deletion_allowed() or self.remover is None:
            raise FeatureDisabled("permanent deletion is disabled")
        uids = _require(selection.photos, "items")

        log.info("photos: deleting %s", selection)

        photos = self.repo.photo_selection(uids, include_archived=True)
        if not photos:
            raise NotFound("no photos found")

        deleted = []
        for photo in photos:
            uid = photo.photo_uid
            try:
                self.remover.remove(photo)
            except Exception as exc:
                self.session.rollback()
                log.error("delete: %s (%s)", exc, uid)
            else:
                deleted.append(uid)

        if deleted:
            self._update_counts()
            self.session.expire_all()
            self.notifier.entities_deleted("photos", deleted)
        return BatchResult("Permanently deleted", deleted)
