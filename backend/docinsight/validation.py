from __future__ import annotations

from .errors import FileTooLarge, InvalidFileType
from .jobs import SelectedFile


MAX_FILE_BYTES = 20 * 1024 * 1024

ACCEPTED_MIME_TYPES = frozenset({"application/pdf", "image/png", "image/jpeg"})
# Some browsers report JPEGs as image/jpg.
MIME_ALIASES = {"image/jpg": "image/jpeg", "image/pjpeg": "image/jpeg"}

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def normalize_mime_type(mime_type: str | None) -> str | None:
    if not mime_type:
        return None
    # Drop parameters such as "; charset=binary".
    base = mime_type.split(";", 1)[0].strip().lower()
    return MIME_ALIASES.get(base, base)


def validate_file(
    name: str,
    size_bytes: int,
    mime_type: str | None,
    data: bytes = b"",
    *,
    max_bytes: int = MAX_FILE_BYTES,
) -> SelectedFile:
    """
    Accept a document for analysis or raise the reason it was rejected.

    The type check runs first, so a file that is both the wrong type and too
    large is reported as InvalidFileType.
    """
    normalized = normalize_mime_type(mime_type)
    if normalized not in ACCEPTED_MIME_TYPES:
        raise InvalidFileType(mime_type)
    if size_bytes > max_bytes:
        raise FileTooLarge(size_bytes, max_bytes)
    return SelectedFile(name=name, size_bytes=size_bytes, mime_type=normalized, data=data)


def format_file_size(num_bytes: int) -> str:
    if num_bytes <= 0:
        return "0 Bytes"
    i = 0
    value = float(num_bytes)
    while value >= 1024 and i < len(_SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    value = round(value, 2)
    return f"{value:g} {_SIZE_UNITS[i]}"
