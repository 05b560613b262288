from __future__ import annotations

from pylinestatus._redact import preview_payload, redact_headers


def test_redact_headers_masks_api_key_case_insensitively() -> None:
    redacted = redact_headers({"X-Api-Key": "secret", "user-agent": "pylinestatus"})

    assert redacted == {"X-Api-Key": "<redacted>", "user-agent": "pylinestatus"}


def test_preview_payload_truncates_long_bodies() -> None:
    payload = b"\x0a\x04" + b"x" * 200

    preview = preview_payload(payload, limit=10)

    assert preview.startswith(repr(payload[:10]))
    assert preview.endswith("<202b>")


def test_preview_payload_keeps_short_bodies() -> None:
    assert preview_payload(b"oops") == "b'oops'"
