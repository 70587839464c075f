"""Upload size and MIME-type checks, run before any storage or DB I/O.

The declared content type from the client is trusted as-is; there is no
content sniffing.
"""
from dashboard.exceptions import FileTooLargeError, UnsupportedTypeError

MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5MB

ALLOWED_MIME_TYPES = [
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/pdf",
    "text/plain",
    "text/csv",
]


def validate_upload(size: int, mime_type: str | None) -> None:
    """Raise FileTooLargeError or UnsupportedTypeError if the upload is not acceptable.

    Size is checked first, so an oversized file of a disallowed type
    reports the size error.
    """
    if size > MAX_UPLOAD_BYTES:
        raise FileTooLargeError(size, MAX_UPLOAD_BYTES)
    if mime_type not in ALLOWED_MIME_TYPES:
        raise UnsupportedTypeError(mime_type or "", ALLOWED_MIME_TYPES)
