import pytest

from photoindex.lib.uid import UID_LENGTH, generate_uid, is_uid, ensure_uid


def test_generate_uid_format():
    uid = generate_uid("p", now=1_600_000_000)
    assert len(uid) == UID_LENGTH
    assert uid[0] == "p"
    assert uid[1:7] == "qgljwg"
    assert is_uid(uid, "p")
    assert not is_uid(uid, "f")


def test_generated_uids_differ():
    assert len({generate_uid("f") for _ in range(50)}) == 50


def test_is_uid_rejects_malformed():
    assert not is_uid(None, "p")
    assert not is_uid("", "p")
    assert not is_uid("p123", "p")
    assert not is_uid("pABCDEF123456789", "p")
    assert not is_uid("p-bcdef123456789", "p")


def test_invalid_prefix():
    with pytest.raises(ValueError):
        generate_uid("P")


def test_ensure_uid_keeps_valid_value():
    class Row:
        album_uid = "a0000000000000ab"

    row = Row()
    assert ensure_uid(row, "album_uid", "a") == "a0000000000000ab"

    row.album_uid = ""
    new = ensure_uid(row, "album_uid", "a")
    assert is_uid(new, "a")
    assert row.album_uid == new
