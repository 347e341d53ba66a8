"""Filename sanitizing and upload whitelisting.

Both functions are pure: no I/O, and expected rejections are returned as
values rather than raised.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

ALLOWED_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/gif"})
ALLOWED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif"})
MAX_FILE_SIZE = 5 * 1024 * 1024  # 5 MiB

MAX_FILENAME_LENGTH = 120

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.\-]")


class RejectReason(str, Enum):
    """Why an upload was refused."""
    UNSUPPORTED_TYPE = "UnsupportedType"
    TOO_LARGE = "TooLarge"


REJECT_MESSAGES = {
    RejectReason.UNSUPPORTED_TYPE: "Unsupported file type",
    RejectReason.TOO_LARGE: "File too large (max 5MB)",
}


@dataclass(frozen=True)
class ValidationResult:
    accepted: bool
    reason: Optional[RejectReason] = None

    @property
    def message(self) -> Optional[str]:
        return REJECT_MESSAGES.get(self.reason) if self.reason else None


ACCEPT = ValidationResult(accepted=True)


def sanitize_filename(name: str) -> str:
    """
    Canonicalize an untrusted filename into a safe token.

    Every character outside ``[A-Za-z0-9_.-]`` becomes ``_`` and the result is
    truncated to 120 characters.
    """
    return _UNSAFE_FILENAME_CHARS.sub("_", name)[:MAX_FILENAME_LENGTH]


def is_allowed_type(content_type: Optional[str], extension: Optional[str]) -> bool:
    mime_allowed = (content_type or "") in ALLOWED_MIME_TYPES
    ext_allowed = (extension or "").lower() in ALLOWED_EXTENSIONS
    return mime_allowed and ext_allowed


def validate_upload(
    content_type: Optional[str],
    extension: Optional[str],
    size_bytes: int,
    check_size: bool = True,
) -> ValidationResult:
    """
    Decide whether an upload is acceptable.

    :param content_type: The declared MIME type, e.g. "image/png".
    :param extension: The file extension including the leading dot; compared case-insensitively.
    :param size_bytes: The size of the upload in bytes.
    :param check_size: Set to False when only the type whitelist should be enforced.
    """
    if not is_allowed_type(content_type, extension):
        return ValidationResult(accepted=False, reason=RejectReason.UNSUPPORTED_TYPE)
    if check_size and size_bytes > MAX_FILE_SIZE:
        return ValidationResult(accepted=False, reason=RejectReason.TOO_LARGE)
    return ACCEPT
