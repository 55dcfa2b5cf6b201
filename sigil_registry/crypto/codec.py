"""
Base64url without padding, the external form of every key and signature.
"""

from __future__ import annotations

import base64
import binascii
import re

_URLSAFE = re.compile(r"[A-Za-z0-9_-]*")


class CodecError(ValueError):
    """Text is not valid unpadded base64url, or has the wrong decoded length."""


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(text: str) -> bytes:
    # Strict alphabet: no padding, no standard-base64 '+' or '/'
    if not _URLSAFE.fullmatch(text):
        raise CodecError("invalid base64url character")
    if len(text) % 4 == 1:
        raise CodecError("invalid base64url length")
    try:
        raw = base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
    except (binascii.Error, ValueError) as exc:
        raise CodecError(str(exc)) from exc
    # Unused trailing bits must be zero, so each value has exactly one text
    if b64url_encode(raw) != text:
        raise CodecError("non-canonical base64url")
    return raw


def decode_fixed(text: str, length: int, what: str = "value") -> bytes:
    """Decode and require exactly `length` bytes."""
    raw = b64url_decode(text)
    if len(raw) != length:
        raise CodecError(f"{what} must be {length} bytes, got {len(raw)}")
    return raw
