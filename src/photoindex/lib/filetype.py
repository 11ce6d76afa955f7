"""File type detection using magic bytes (file signatures).

Types are detected from file content, not from the extension. The short type
code (e.g. 'jpg') is what `files.file_type` stores and what the primary file
resolver filters on.
"""
from typing import Optional
import magic

# MIME type -> short file type code
_TYPE_CODES = {
    'image/jpeg': 'jpg',
    'image/png': 'png',
    'image/gif': 'gif',
    'image/bmp': 'bmp',
    'image/tiff': 'tiff',
    'image/heic': 'heif',
    'image/heif': 'heif',
    'image/webp': 'webp',
    'image/x-canon-cr2': 'raw',
    'image/x-canon-cr3': 'raw',
    'image/x-nikon-nef': 'raw',
    'image/x-sony-arw': 'raw',
    'image/x-adobe-dng': 'raw',
    'video/mp4': 'mp4',
    'video/quicktime': 'mov',
    'video/x-matroska': 'mkv',
    'video/mpeg': 'mpg',
    'video/x-msvideo': 'avi',
    'application/json': 'json',
    'application/xml': 'xmp',
    'text/xml': 'xmp',
}


def detect_media_type(file_path: str) -> Optional[str]:
    """Detect the MIME type of a file from its magic bytes.

    Returns None when libmagic cannot read the file.

    Examples:
        >>> detect_media_type('/path/to/photo.jpg')
        'image/jpeg'
    """
    try:
        return magic.Magic(mime=True).from_file(file_path)
    except (OSError, magic.MagicException):
        return None


def file_type_for(media_type: Optional[str]) -> str:
    """Map a MIME type to the short type code stored on file rows.

    Examples:
        >>> file_type_for('image/jpeg')
        'jpg'
        >>> file_type_for('application/pdf')
        'other'
    """
    if not media_type:
        return 'other'
    return _TYPE_CODES.get(media_type, 'other')


def is_video(media_type: Optional[str]) -> bool:
    return bool(media_type) and media_type.startswith('video/')


def is_sidecar(media_type: Optional[str]) -> bool:
    """JSON and XMP metadata files travel alongside the image they describe."""
    return file_type_for(media_type) in ('json', 'xmp')
