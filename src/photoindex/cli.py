import argparse
import concurrent.futures
import logging
from pathlib import Path
from typing import Iterable, Optional

from photoindex.errors import BatchError, NoEligibleFile
from photoindex.lib.app_logging import configure_logging
from photoindex.lib.config import Settings, load_settings
from photoindex.lib.database import get_engine, get_sessionmaker, init_db
from photoindex.lib.db_lock import LockAcquisitionError, acquire_lock
from photoindex.lib.filetype import detect_media_type, file_type_for, is_sidecar, is_video
from photoindex.lib.hashing import sha1_file
from photoindex.lib.throttle import LinearDelay
from photoindex.services.acl import RoleAccess
from photoindex.services.batch import BatchService, Selection
from photoindex.services.events import LogNotifier
from photoindex.services.index import FileStatus, IndexSnapshot
from photoindex.services.primary import set_photo_primary
from photoindex.services.removal import OriginalsRemover
from photoindex.services.repository import Repository
from photoindex.services.users import bootstrap_default_users, find_user_by_name, invalid_password, set_password

log = logging.getLogger(__name__)


def _settings(args) -> Settings:
    settings = getattr(args, "settings", None)
    if settings is None:
        settings = load_settings(getattr(args, "config", None))
    return settings


def _session(args, settings: Settings):
    """Use the session injected by tests, or open one on the configured database."""
    session = getattr(args, "session", None)
    if session is not None:
        return session
    engine = get_engine(settings.database)
    init_db(engine)
    return get_sessionmaker(engine)()


def _iter_files(folder: Path) -> Iterable[Path]:
    """Yield regular files below folder, skipping the ones we can't stat."""
    for p in folder.rglob("*"):
        try:
            if p.is_file():
                yield p
        except OSError:
            continue


def init(args):
    settings = _settings(args)
    session = _session(args, settings)
    users = bootstrap_default_users(session)
    print(f"Database ready: {settings.database} ({len(users)} default accounts)")
    return 0


def scan(args):
    """Classify files below a folder against the index without changing it.

    With --record-duplicates, files whose content is already indexed are
    written to the duplicate ledger so the next scan skips them.
    """
    settings = _settings(args)
    session = _session(args, settings)
    folder = Path(args.folder or settings.originals_path)
    root = getattr(args, "root", None) or "/"
    workers = getattr(args, "workers", None) or 4

    snapshot = IndexSnapshot.build(session)
    print(f"Scanning {folder}: {len(snapshot.paths):,} indexed paths, {len(snapshot.hashes):,} known hashes")

    def _hash_worker(p: Path):
        try:
            st = p.stat()
            return p, int(st.st_mtime), st.st_size, sha1_file(str(p)), None
        except OSError as exc:
            return p, 0, 0, None, str(exc)

    candidates = []
    for p in _iter_files(folder):
        name = p.relative_to(folder).as_posix()
        try:
            mod_time = int(p.stat().st_mtime)
        except OSError as exc:
            log.warning("scan: skipping %s: %s", p, exc)
            continue
        # Unchanged files are not hashed again.
        if snapshot.classify(root, name, mod_time) == FileStatus.UNCHANGED:
            print(f"{FileStatus.UNCHANGED.value:>9}  {name}")
            continue
        candidates.append(p)

    repo = Repository(session)
    counts = {status: 0 for status in FileStatus}
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        for p, mod_time, size, file_hash, err in ex.map(_hash_worker, candidates):
            name = p.relative_to(folder).as_posix()
            if err:
                log.warning("scan: skipping %s: %s", p, err)
                continue
            status = snapshot.classify(root, name, mod_time, file_hash)
            counts[status] += 1
            media_type = detect_media_type(str(p))
            flags = "".join(
                f" {flag}" for flag, on in (("video", is_video(media_type)), ("sidecar", is_sidecar(media_type))) if on
            )
            print(f"{status.value:>9}  {name} type={file_type_for(media_type)}{flags} hash={file_hash}")
            if status == FileStatus.DUPLICATE and getattr(args, "record_duplicates", False):
                repo.record_duplicate(root, name, file_hash, size, mod_time)

    summary = ", ".join(f"{counts[s]} {s.value}" for s in FileStatus if s != FileStatus.UNCHANGED)
    print(f"Scan complete: {summary}")
    return 0


def primary(args):
    settings = _settings(args)
    session = _session(args, settings)
    try:
        with acquire_lock(session, f"primary:{args.photo_uid}", wait_for_lock=True):
            file_uid = set_photo_primary(session, args.photo_uid, getattr(args, "file", None) or "")
    except (NoEligibleFile, LockAcquisitionError, BatchError) as exc:
        print(f"ERROR: {exc}")
        return 1
    print(f"{args.photo_uid}: primary file is {file_uid}")
    return 0


_BATCH_ACTIONS = {
    "archive": ("archive_photos", "photos"),
    "restore": ("restore_photos", "photos"),
    "approve": ("approve_photos", "photos"),
    "private": ("toggle_private", "photos"),
    "delete": ("delete_photos", "photos"),
    "delete-albums": ("delete_albums", "albums"),
    "delete-labels": ("delete_labels", "labels"),
}


def batch(args):
    settings = _settings(args)
    session = _session(args, settings)
    caller = find_user_by_name(session, args.user)

    service = BatchService(
        session,
        access=RoleAccess(),
        notifier=getattr(args, "notifier", None) or LogNotifier(),
        gate=settings,
        remover=OriginalsRemover(session, settings.originals_path),
    )
    method, kind = _BATCH_ACTIONS[args.action]
    try:
        result = getattr(service, method)(caller, Selection(**{kind: list(args.uids)}))
    except BatchError as exc:
        print(f"ERROR: {exc.reason}: {exc.message}")
        return 1
    print(f"{result.message}: {result.count} {kind}")
    return 0


def users(args):
    settings = _settings(args)
    session = _session(args, settings)
    user = find_user_by_name(session, args.name)
    if user is None:
        print(f"ERROR: user {args.name!r} not found")
        return 1

    if args.users_cmd == "passwd":
        try:
            set_password(session, user, args.password)
        except ValueError as exc:
            print(f"ERROR: {exc}")
            return 1
        print(f"Password changed for {user}")
        return 0

    delay = LinearDelay(settings.login_delay_step, settings.login_delay_max)
    if invalid_password(session, user, args.password, delay=delay):
        print(f"Invalid password for {user} ({user.login_attempts} failed attempts)")
        return 1
    print(f"Password ok for {user}")
    return 0


def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(prog="photoindex")
    parser.add_argument("--config", help="Path to JSON config file (default: config.json)")
    sub = parser.add_subparsers(dest="cmd")

    p_init = sub.add_parser("init-db", help="Create tables and default accounts")
    p_init.set_defaults(func=init)

    p_scan = sub.add_parser("scan", help="Classify files on disk against the index")
    p_scan.add_argument("folder", nargs="?", help="Folder to scan (default: originals_path)")
    p_scan.add_argument("--root", default="/", help="file_root the folder is indexed under")
    p_scan.add_argument("--workers", type=int, help="Number of worker threads for hashing")
    p_scan.add_argument("--record-duplicates", action="store_true", help="Write duplicates to the ledger")
    p_scan.set_defaults(func=scan)

    p_primary = sub.add_parser("primary", help="Choose the primary file of a photo")
    p_primary.add_argument("photo_uid")
    p_primary.add_argument("--file", help="File UID to use instead of the widest JPEG")
    p_primary.set_defaults(func=primary)

    p_batch = sub.add_parser("batch", help="Apply a batch operation to a selection")
    p_batch.add_argument("action", choices=sorted(_BATCH_ACTIONS))
    p_batch.add_argument("uids", nargs="+")
    p_batch.add_argument("--user", default="admin", help="Act as this user")
    p_batch.set_defaults(func=batch)

    p_users = sub.add_parser("users", help="Manage account passwords")
    users_sub = p_users.add_subparsers(dest="users_cmd", required=True)
    for name in ("passwd", "login"):
        p = users_sub.add_parser(name)
        p.add_argument("name")
        p.add_argument("password")
    p_users.set_defaults(func=users)

    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1
    settings = load_settings(args.config)
    configure_logging(settings.log_level)
    args.settings = settings
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
