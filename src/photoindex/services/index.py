"""Point-in-time lookups the indexer consults before touching a file.

`indexed_files()` answers "is this path indexed, and with which mod time?",
`file_hashes()` answers "is this content already known?". Both are copies
taken with a single query each and may be stale as soon as another writer
commits: treat them as hints, never as proof that something is absent.
"""
from __future__ import annotations

import enum
import logging
import posixpath
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from photoindex.models.duplicate import Duplicate
from photoindex.models.file import File

log = logging.getLogger(__name__)


def join_path(root: str, name: str) -> str:
    """Join root and name like a slash path, ignoring empty parts.

    >>> join_path("A", "b.jpg")
    'A/b.jpg'
    >>> join_path("/", "2020/b.jpg")
    '/2020/b.jpg'
    >>> join_path("", "b.jpg")
    'b.jpg'
    """
    parts = [p for p in (root, name) if p]
    if not parts:
        return ""
    path = posixpath.normpath("/".join(parts))
    # normpath keeps a leading "//"
    if path.startswith("//"):
        path = "/" + path.lstrip("/")
    return path


def indexed_files(session: Session) -> dict[str, int]:
    """Map of root/name -> mod time (unix seconds) for known duplicates and indexed files.

    Indexed files are applied last, so they supersede a stale ledger row for
    the same path.
    """
    result: dict[str, int] = {}

    for root, name, mod_time in session.query(Duplicate.file_root, Duplicate.file_name, Duplicate.mod_time):
        result[join_path(root, name)] = int(mod_time or 0)

    rows = session.query(File.file_root, File.file_name, File.mod_time).filter(
        File.file_missing.is_(False), File.deleted_at.is_(None)
    )
    for root, name, mod_time in rows:
        result[join_path(root, name)] = int(mod_time or 0)

    return result


def file_hashes(session: Session) -> set[str]:
    """Content hashes of all present, active files."""
    rows = session.query(File.file_hash).filter(File.file_missing.is_(False), File.deleted_at.is_(None))
    return {h for (h,) in rows if h}


class FileStatus(str, enum.Enum):
    NEW = "new"
    UNCHANGED = "unchanged"
    MODIFIED = "modified"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class IndexSnapshot:
    paths: dict[str, int] = field(default_factory=dict)
    hashes: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def build(cls, session: Session) -> "IndexSnapshot":
        paths = indexed_files(session)
        hashes = frozenset(file_hashes(session))
        log.debug("index: snapshot with %d paths and %d hashes", len(paths), len(hashes))
        return cls(paths=paths, hashes=hashes)

    def mod_time(self, root: str, name: str):
        return self.paths.get(join_path(root, name))

    def known_hash(self, file_hash: str) -> bool:
        return bool(file_hash) and file_hash in self.hashes

    def classify(self, root: str, name: str, mod_time: int, file_hash: str = "") -> FileStatus:
        """Suggest what the indexer should do with a file found on disk.

        A path seen with the same mod time is unchanged, with another mod time
        modified. An unseen path with a known hash is a duplicate; the caller
        decides whether to skip it, relink it or record it in the ledger.
        """
        seen = self.mod_time(root, name)
        if seen is not None:
            return FileStatus.UNCHANGED if seen == int(mod_time) else FileStatus.MODIFIED
        if self.known_hash(file_hash):
            return FileStatus.DUPLICATE
        return FileStatus.NEW
