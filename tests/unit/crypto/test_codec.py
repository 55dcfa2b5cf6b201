"""
Unit tests for the base64url codec.
"""

from __future__ import annotations

import pytest

from sigil_registry.crypto.codec import CodecError, b64url_decode, b64url_encode, decode_fixed


class TestEncoding:
    def test_encode_has_no_padding(self):
        assert b64url_encode(b"\x00") == "AA"
        assert "=" not in b64url_encode(bytes(32))

    def test_uses_url_safe_alphabet(self):
        assert b64url_encode(b"\xfb\xff") == "-_8"

    def test_decode_accepts_unpadded_text(self):
        assert b64url_decode("-_8") == b"\xfb\xff"

    def test_public_key_length_encodes_to_43_chars(self):
        assert len(b64url_encode(bytes(32))) == 43


class TestRejection:
    @pytest.mark.parametrize("text", ["AA==", "+/8", "a b", "ab!c"])
    def test_rejects_characters_outside_alphabet(self, text):
        with pytest.raises(CodecError):
            b64url_decode(text)

    def test_rejects_impossible_length(self):
        with pytest.raises(CodecError):
            b64url_decode("AAAAA")

    def test_decode_fixed_enforces_length(self):
        with pytest.raises(CodecError, match="must be 32 bytes"):
            decode_fixed(b64url_encode(bytes(31)), 32, "public key")

    def test_decode_fixed_returns_bytes(self):
        assert decode_fixed(b64url_encode(bytes(64)), 64) == bytes(64)


class TestCanonicalForm:
    def test_rejects_nonzero_trailing_bits(self):
        # "AA" and "AB" would both decode to b"\x00"
        assert b64url_decode("AA") == b"\x00"
        with pytest.raises(CodecError, match="non-canonical"):
            b64url_decode("AB")

    def test_key_length_text_has_single_form(self):
        canonical = b64url_encode(bytes(32))
        assert decode_fixed(canonical, 32) == bytes(32)
        with pytest.raises(CodecError, match="non-canonical"):
            decode_fixed(canonical[:-1] + "B", 32)
