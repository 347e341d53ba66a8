import re

import pytest

from uploads_api.validation import (
    MAX_FILE_SIZE,
    RejectReason,
    sanitize_filename,
    validate_upload,
)

SAFE_CHARS = re.compile(r"^[A-Za-z0-9_.\-]*$")

AWKWARD_NAMES = [
    "",
    "holiday.png",
    "../../etc/passwd",
    "..\\..\\windows\\system32.jpg",
    "my photo (1).JPG",
    "résumé-été.gif",
    "emoji-🎉.png",
    "null\x00byte.png",
    "a" * 500 + ".png",
    "tabs\tand\nnewlines.jpeg",
]


@pytest.mark.parametrize("name", AWKWARD_NAMES)
def test_sanitize_filename_only_emits_safe_characters(name):
    sanitized = sanitize_filename(name)
    assert SAFE_CHARS.match(sanitized)
    assert len(sanitized) <= 120


def test_sanitize_filename_replaces_each_unsafe_character():
    assert sanitize_filename("my photo (1).JPG") == "my_photo__1_.JPG"
    assert sanitize_filename("../../etc/passwd") == ".._.._etc_passwd"
    assert sanitize_filename("émoji") == "_moji"


def test_sanitize_filename_keeps_safe_names_and_empty_input():
    assert sanitize_filename("holiday-2024_v2.png") == "holiday-2024_v2.png"
    assert sanitize_filename("") == ""


def test_sanitize_filename_truncates_to_120_characters():
    assert sanitize_filename("x" * 121) == "x" * 120


@pytest.mark.parametrize(
    "content_type, extension",
    [
        ("image/jpeg", ".jpg"),
        ("image/jpeg", ".jpeg"),
        ("image/png", ".png"),
        ("image/gif", ".gif"),
        ("image/png", ".PNG"),
        ("image/jpeg", ".JpEg"),
    ],
)
def test_validate_upload_accepts_whitelisted_types(content_type, extension):
    result = validate_upload(content_type, extension, 1024)
    assert result.accepted
    assert result.reason is None
    assert result.message is None


@pytest.mark.parametrize(
    "content_type, extension",
    [
        ("application/pdf", ".pdf"),
        ("application/pdf", ".png"),
        ("image/png", ".pdf"),
        ("image/webp", ".webp"),
        ("image/svg+xml", ".png"),
        ("image/png", ""),
        ("image/png", "png"),
        (None, ".png"),
        ("", ".jpg"),
    ],
)
def test_validate_upload_rejects_anything_off_the_whitelist(content_type, extension):
    result = validate_upload(content_type, extension, 1024)
    assert not result.accepted
    assert result.reason is RejectReason.UNSUPPORTED_TYPE
    assert result.message == "Unsupported file type"


def test_validate_upload_size_boundary():
    assert validate_upload("image/png", ".png", MAX_FILE_SIZE).accepted

    too_large = validate_upload("image/png", ".png", MAX_FILE_SIZE + 1)
    assert too_large.reason is RejectReason.TOO_LARGE
    assert too_large.message == "File too large (max 5MB)"


def test_validate_upload_type_only_skips_size_check():
    assert validate_upload("image/gif", ".gif", 50 * 1024 * 1024, check_size=False).accepted
    # the type whitelist still applies
    result = validate_upload("text/plain", ".txt", 10, check_size=False)
    assert result.reason is RejectReason.UNSUPPORTED_TYPE


def test_validate_upload_reports_type_before_size():
    result = validate_upload("application/pdf", ".pdf", MAX_FILE_SIZE * 2)
    assert result.reason is RejectReason.UNSUPPORTED_TYPE
