import pytest
from sqlalchemy.exc import OperationalError

from photoindex.errors import FeatureDisabled
from photoindex.lib.config import Settings
from photoindex.models import File, Label, Photo, PhotoAlbum, PhotoLabel
from photoindex.services.batch import BatchService, Selection
from photoindex.services.removal import OriginalsRemover
from fakes import AllowAll


@pytest.fixture
def originals(tmp_path):
    path = tmp_path / "originals"
    (path / "2021").mkdir(parents=True)
    return path


def _indexed_photo(repo, originals, name):
    photo = repo.create_photo(photo_path="2021", photo_name=name)
    disk = originals / "2021" / f"{name}.jpg"
    disk.write_bytes(b"jpeg")
    f = repo.create_file(photo=photo, file_root="/", file_name=f"2021/{name}.jpg", file_type="jpg")
    return photo, f, disk


def test_remove_deletes_files_and_rows(repo, session, originals):
    photo, _, disk = _indexed_photo(repo, originals, "IMG_1")
    other, _, other_disk = _indexed_photo(repo, originals, "IMG_2")
    album = repo.create_album(album_title="Trip")
    repo.add_to_album(photo.photo_uid, album.album_uid)
    label = repo.create_label("Beach")
    repo.add_label(photo, label)

    OriginalsRemover(session, str(originals)).remove(photo)

    assert not disk.exists()
    assert other_disk.exists()
    assert [p.photo_uid for p in session.query(Photo)] == [other.photo_uid]
    assert [f.photo_uid for f in session.query(File)] == [other.photo_uid]
    assert session.query(PhotoAlbum).count() == 0
    assert session.query(PhotoLabel).count() == 0
    assert session.query(Label).count() == 1


def test_remove_tolerates_file_already_gone(repo, session, originals):
    photo, _, disk = _indexed_photo(repo, originals, "IMG_1")
    disk.unlink()

    OriginalsRemover(session, str(originals)).remove(photo)

    assert session.query(Photo).count() == 0


def test_disk_path_stays_below_root(repo, originals):
    remover = OriginalsRemover(repo.session, str(originals), roots={"sidecar": str(originals / "sidecar")})

    assert remover.disk_path(File(file_root="/", file_name="2021/a.jpg")) == (originals / "2021" / "a.jpg").resolve()
    assert remover.disk_path(File(file_root="sidecar", file_name="a.json")) == (originals / "sidecar" / "a.json").resolve()
    with pytest.raises(ValueError):
        remover.disk_path(File(file_root="/", file_name="../../etc/passwd"))
    with pytest.raises(ValueError):
        remover.disk_path(File(file_root="import", file_name="a.jpg"))


def test_outside_path_keeps_photo(repo, session, originals, notifier):
    photo = repo.create_photo(photo_name="bad")
    repo.create_file(photo=photo, file_root="/", file_name="../outside.jpg")
    service = BatchService(
        session, access=AllowAll(), notifier=notifier,
        gate=Settings(feature_delete=True), remover=OriginalsRemover(session, str(originals)),
    )

    result = service.delete_photos(object(), Selection(photos=[photo.photo_uid]))

    assert result.count == 0
    assert session.query(Photo).count() == 1
    assert notifier.events == []


def test_batch_delete_with_settings_gate(repo, session, originals, notifier):
    photo, _, disk = _indexed_photo(repo, originals, "IMG_1")
    uid = photo.photo_uid
    remover = OriginalsRemover(session, str(originals))

    read_only = BatchService(session, access=AllowAll(), notifier=notifier,
                             gate=Settings(read_only=True), remover=remover)
    with pytest.raises(FeatureDisabled):
        read_only.delete_photos(object(), Selection(photos=[uid]))
    assert disk.exists()

    service = BatchService(session, access=AllowAll(), notifier=notifier, gate=Settings(), remover=remover)
    result = service.delete_photos(object(), Selection(photos=[uid]))

    assert result.uids == [uid]
    assert not disk.exists()
    assert notifier.events == [("deleted", "photos", [uid])]


def test_unknown_root_leaves_disk_untouched(repo, session, originals):
    photo, jpeg, disk = _indexed_photo(repo, originals, "IMG_1")
    repo.create_file(photo=photo, file_root="sidecar", file_name="2021/IMG_1.json")

    with pytest.raises(ValueError):
        OriginalsRemover(session, str(originals)).remove(photo)

    assert disk.exists()
    assert session.query(Photo).count() == 1
    assert [f.file_missing for f in session.query(File)] == [False, False]


def test_failed_row_delete_marks_files_missing(repo, session, originals, monkeypatch):
    photo, _, disk = _indexed_photo(repo, originals, "IMG_1")
    real_commit = session.commit
    commits = []

    def commit_fails_once():
        commits.append(1)
        if len(commits) == 1:
            raise OperationalError("DELETE FROM photos", {}, Exception("disk I/O error"))
        real_commit()

    monkeypatch.setattr(session, "commit", commit_fails_once)

    with pytest.raises(OperationalError):
        OriginalsRemover(session, str(originals)).remove(photo)

    assert not disk.exists()
    assert session.query(Photo).count() == 1
    assert [f.file_missing for f in session.query(File)] == [True]
