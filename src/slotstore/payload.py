"""Data-URL payloads: encode, classify, decode, and upload validation.

A payload is the string a browser's FileReader.readAsDataURL produces:

    data:<media-type>[;param=value...][;base64],<body>

Only the first fragment of a split record carries the prefix, so every
decoder here expects a whole (reassembled) payload.
"""

from __future__ import annotations

import base64
import binascii
import codecs
import mimetypes
import urllib.parse
from dataclasses import dataclass, field
from typing import Literal

from slotstore.errors import ValidationError

PayloadCategory = Literal["image", "pdf", "text", "other"]

MAX_FILE_SIZE_MB = 5
ACCEPTED_TYPES: tuple[str, ...] = ("image/", "application/pdf", "text/")

_DEFAULT_MEDIA_TYPE = "application/octet-stream"
_DEFAULT_CHARSET = "utf-8"

# Checked in order; first matching prefix wins.
_CATEGORY_PREFIXES: tuple[tuple[str, PayloadCategory], ...] = (
    ("data:image/", "image"),
    ("data:application/pdf", "pdf"),
    ("data:text/", "text"),
)


@dataclass
class DataUrl:
    """A parsed data URL."""

    media_type: str
    body: str
    is_base64: bool = False
    params: dict[str, str] = field(default_factory=dict)

    @property
    def charset(self) -> str:
        return self.params.get("charset", _DEFAULT_CHARSET)


def parse_data_url(data: str) -> DataUrl:
    """Split a data URL into media type, parameters, encoding flag and body.

    Raises ValueError if the string is not a data URL.
    """
    if not data.startswith("data:"):
        msg = "payload is not a data URL"
        raise ValueError(msg)
    header, sep, body = data[5:].partition(",")
    if not sep:
        msg = "data URL has no ',' separating header and body"
        raise ValueError(msg)

    parts = header.split(";")
    media_type = parts[0].strip().lower() or "text/plain"
    is_base64 = False
    params: dict[str, str] = {}
    for part in parts[1:]:
        part = part.strip()
        if part.lower() == "base64":
            is_base64 = True
        elif "=" in part:
            k, _, v = part.partition("=")
            params[k.strip().lower()] = v.strip().strip('"')
    return DataUrl(media_type=media_type, body=body, is_base64=is_base64, params=params)


def payload_category(data: str) -> PayloadCategory:
    """Classify a payload by its media-type prefix."""
    for prefix, category in _CATEGORY_PREFIXES:
        if data.startswith(prefix):
            return category
    return "other"


def decode_bytes(data: str) -> bytes:
    """Return the raw bytes carried by a data URL (base64 or percent-encoded)."""
    url = parse_data_url(data)
    if not url.is_base64:
        return urllib.parse.unquote_to_bytes(url.body)
    try:
        return base64.b64decode(url.body, validate=True)
    except binascii.Error as exc:
        msg = f"invalid base64 body: {exc}"
        raise ValueError(msg) from exc


def decode_text(data: str) -> str:
    """Strip the encoding layer off a text payload and return the plain text.

    Raises ValueError for non-text payloads and for bytes that do not decode
    in the declared charset.
    """
    if payload_category(data) != "text":
        msg = "payload is not a text/* data URL"
        raise ValueError(msg)
    url = parse_data_url(data)
    raw = decode_bytes(data)
    charset = url.charset
    try:
        codecs.lookup(charset)
    except LookupError:
        # Unknown charset label
        charset = _DEFAULT_CHARSET
    try:
        return raw.decode(charset)
    except UnicodeDecodeError as exc:
        msg = f"payload is not valid {charset} text: {exc.reason}"
        raise ValueError(msg) from exc


def encode_data_url(content: bytes, media_type: str | None = None) -> str:
    """Encode bytes the way readAsDataURL does: data:<type>;base64,<body>."""
    body = base64.b64encode(content).decode("ascii")
    return f"data:{media_type or _DEFAULT_MEDIA_TYPE};base64,{body}"


def guess_media_type(name: str) -> str:
    """Media type from the file extension, octet-stream when unknown."""
    media_type, _ = mimetypes.guess_type(name)
    return media_type or _DEFAULT_MEDIA_TYPE


def validate_upload(
    name: str,
    size: int,
    media_type: str,
    *,
    max_file_size_mb: float = MAX_FILE_SIZE_MB,
    accepted_types: tuple[str, ...] | list[str] = ACCEPTED_TYPES,
) -> None:
    """Reject oversized files and media types outside the allow-list.

    Raises ValidationError; a rejected file never becomes a FileRecord.
    """
    max_size_bytes = int(max_file_size_mb * 1024 * 1024)
    if size > max_size_bytes:
        raise ValidationError(name, f"exceeds the {max_file_size_mb:g} MB size limit")
    if not any(media_type.startswith(t) for t in accepted_types):
        raise ValidationError(name, f"unsupported file type {media_type or 'unknown'!r}")
