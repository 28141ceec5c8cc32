"""Tests for data-URL parsing, classification, decoding and upload validation."""

import pytest

from slotstore.errors import ValidationError
from slotstore.payload import (
    decode_bytes,
    decode_text,
    encode_data_url,
    guess_media_type,
    parse_data_url,
    payload_category,
    validate_upload,
)
from tests.helpers import text_payload


class TestParseDataUrl:

    def test_base64_with_params(self):
        url = parse_data_url("data:text/plain;charset=ISO-8859-1;base64,aGk=")

        assert url.media_type == "text/plain"
        assert url.is_base64 is True
        assert url.charset == "ISO-8859-1"
        assert url.body == "aGk="

    def test_plain_body_defaults(self):
        url = parse_data_url("data:,hello%20world")

        assert url.media_type == "text/plain"
        assert url.is_base64 is False
        assert url.charset == "utf-8"

    @pytest.mark.parametrize("data", ["hello", "data:text/plain;base64aGk="])
    def test_rejects_non_data_urls(self, data):
        with pytest.raises(ValueError):
            parse_data_url(data)


class TestPayloadCategory:

    @pytest.mark.parametrize(("data", "expected"), [
        ("data:image/png;base64,AAAA", "image"),
        ("data:image/svg+xml;base64,AAAA", "image"),
        ("data:application/pdf;base64,JVBER", "pdf"),
        ("data:text/plain;base64,aGk=", "text"),
        ("data:text/csv;base64,YSxi", "text"),
        ("data:application/zip;base64,UEs=", "other"),
        ("garbage", "other"),
    ])
    def test_category_by_prefix(self, data, expected):
        assert payload_category(data) == expected


class TestDecode:

    def test_decode_text_base64(self):
        assert decode_text(text_payload("héllo\nworld")) == "héllo\nworld"

    def test_decode_text_percent_encoded(self):
        assert decode_text("data:text/plain,hello%20world") == "hello world"

    def test_decode_text_honors_charset(self):
        assert decode_text("data:text/plain;charset=latin-1;base64,6Q==") == "é"

    def test_decode_text_unknown_charset_falls_back_to_utf8(self):
        assert decode_text("data:text/plain;charset=bogus;base64,aGk=") == "hi"

    def test_decode_text_rejects_non_text(self):
        with pytest.raises(ValueError):
            decode_text("data:image/png;base64,AAAA")

    def test_decode_text_rejects_undecodable_bytes(self):
        # 0xff is never valid UTF-8
        with pytest.raises(ValueError, match="not valid utf-8 text"):
            decode_text("data:text/plain;base64,/w==")

    def test_decode_bytes_invalid_base64(self):
        with pytest.raises(ValueError):
            decode_bytes("data:image/png;base64,@@@")

    def test_encode_then_decode_bytes(self):
        content = bytes(range(256))
        data = encode_data_url(content, "image/png")

        assert data.startswith("data:image/png;base64,")
        assert decode_bytes(data) == content

    def test_encode_without_media_type(self):
        assert encode_data_url(b"", None) == "data:application/octet-stream;base64,"


class TestGuessMediaType:

    @pytest.mark.parametrize(("name", "expected"), [
        ("notes.txt", "text/plain"),
        ("photo.png", "image/png"),
        ("report.pdf", "application/pdf"),
        ("blob.zzzunknown", "application/octet-stream"),
    ])
    def test_guess(self, name, expected):
        assert guess_media_type(name) == expected


class TestValidateUpload:

    def test_accepts_allowed_type_under_limit(self):
        validate_upload("a.png", 1024, "image/png")
        validate_upload("a.pdf", 5 * 1024 * 1024, "application/pdf")

    def test_rejects_oversized(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_upload("big.txt", 5 * 1024 * 1024 + 1, "text/plain")

        assert exc_info.value.name == "big.txt"
        assert "5 MB" in str(exc_info.value)

    def test_rejects_disallowed_type(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_upload("a.zip", 10, "application/zip")

        assert "unsupported file type" in exc_info.value.reason

    def test_custom_limits(self):
        validate_upload("a.zip", 10, "application/zip", accepted_types=["application/"])
        with pytest.raises(ValidationError):
            validate_upload("a.txt", 2 * 1024 * 1024, "text/plain", max_file_size_mb=1)
