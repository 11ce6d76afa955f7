import hashlib
from pathlib import Path


def sha1_file(path: str) -> str:
    """Compute the SHA-1 hex digest of a file in streaming fashion.

    The digest is the content fingerprint stored in `files.file_hash` and
    `duplicates.file_hash`; equal digests are treated as identical content.
    """
    h = hashlib.sha1()
    p = Path(path)
    with p.open("rb") as fh:
        for chunk in iter(lambda: fh.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()
