from photoindex.models import Duplicate
from photoindex.services.index import FileStatus, IndexSnapshot, file_hashes, indexed_files, join_path
from photoindex.services.repository import timestamp


def test_join_path():
    assert join_path("A", "b.jpg") == "A/b.jpg"
    assert join_path("/", "2020/b.jpg") == "/2020/b.jpg"
    assert join_path("A/", "/b.jpg") == "A/b.jpg"
    assert join_path("", "") == ""


def test_indexed_file_supersedes_ledger_entry(repo):
    repo.record_duplicate("A", "b.jpg", "h-old", 10, 100)
    repo.create_file(file_root="A", file_name="b.jpg", file_hash="h-new", mod_time=200)

    result = indexed_files(repo.session)

    assert result == {"A/b.jpg": 200}


def test_indexed_files_skip_missing_and_deleted(repo):
    repo.record_duplicate("/", "dup.jpg", "h0", 1, 50)
    repo.create_file(file_root="/", file_name="ok.jpg", file_hash="h1", mod_time=1)
    repo.create_file(file_root="/", file_name="missing.jpg", file_hash="h2", mod_time=2, file_missing=True)
    repo.create_file(file_root="/", file_name="deleted.jpg", file_hash="h3", mod_time=3, deleted_at=timestamp())

    assert indexed_files(repo.session) == {"/dup.jpg": 50, "/ok.jpg": 1}
    assert file_hashes(repo.session) == {"h1"}


def test_ledger_hashes_are_not_content_hashes(repo):
    repo.record_duplicate("/", "dup.jpg", "ledger-hash", 1, 50)
    assert file_hashes(repo.session) == set()


def test_classify(repo):
    repo.create_file(file_root="/", file_name="a.jpg", file_hash="ha", mod_time=100)
    snapshot = IndexSnapshot.build(repo.session)

    assert snapshot.classify("/", "a.jpg", 100) == FileStatus.UNCHANGED
    assert snapshot.classify("/", "a.jpg", 101, "ha") == FileStatus.MODIFIED
    assert snapshot.classify("/", "copy.jpg", 5, "ha") == FileStatus.DUPLICATE
    assert snapshot.classify("/", "other.jpg", 5, "hz") == FileStatus.NEW
    assert snapshot.classify("/", "other.jpg", 5) == FileStatus.NEW


def test_snapshot_is_a_copy(repo):
    snapshot = IndexSnapshot.build(repo.session)
    repo.create_file(file_root="/", file_name="late.jpg", file_hash="hl", mod_time=1)

    assert snapshot.mod_time("/", "late.jpg") is None
    assert not snapshot.known_hash("hl")
    assert IndexSnapshot.build(repo.session).known_hash("hl")


def test_record_duplicate_upserts(repo, session):
    repo.record_duplicate("/", "d.jpg", "h1", 10, 100)
    repo.record_duplicate("/", "d.jpg", "h1", 10, 150)

    rows = session.query(Duplicate).all()
    assert len(rows) == 1
    assert rows[0].mod_time == 150
