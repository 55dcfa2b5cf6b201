"""
SIGIL Registry — Ed25519 Signature Verification

Every pattern submission, policy submission, and vote carries a signature
produced by the submitter's private key over the canonical message for that
operation. The registry holds only public keys; it never signs on behalf of
a DID.

Failures are reported by category so clients can tell a badly encoded key
from a wrong signature:

  MalformedKey        key text is not base64url or not 32 bytes
  MalformedSignature  signature text is not base64url or not 64 bytes
  InvalidKey          32 bytes that are not a usable Ed25519 public key
  SignatureMismatch   the signature does not verify
"""

from __future__ import annotations

from cryptography.exceptions import InvalidSignature as _CryptoInvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from sigil_registry.crypto.codec import CodecError, b64url_encode, decode_fixed

PUBLIC_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64


class SignatureError(Exception):
    """Base for verifier failures."""


class MalformedKey(SignatureError):
    pass


class MalformedSignature(SignatureError):
    pass


class InvalidKey(SignatureError):
    pass


class SignatureMismatch(SignatureError):
    pass


def load_public_key(public_key_b64: str) -> Ed25519PublicKey:
    """Decode a base64url public key into a verifying key."""
    try:
        raw = decode_fixed(public_key_b64, PUBLIC_KEY_LENGTH, "public key")
    except CodecError as exc:
        raise MalformedKey(f"bad public key encoding: {exc}") from exc
    try:
        return Ed25519PublicKey.from_public_bytes(raw)
    except ValueError as exc:
        raise InvalidKey(f"invalid public key: {exc}") from exc


def verify_signature(public_key_b64: str, message: str, signature_b64: str) -> None:
    """
    Verify an Ed25519 signature over a canonical message.

    - `public_key_b64` — base64url-encoded 32-byte public key (from the DID record)
    - `message`        — the canonical message the client signed
    - `signature_b64`  — base64url-encoded 64-byte signature

    Returns None on success, raises a SignatureError subclass otherwise.
    The comparison itself is done by the underlying primitive.
    """
    public_key = load_public_key(public_key_b64)

    try:
        signature = decode_fixed(signature_b64, SIGNATURE_LENGTH, "signature")
    except CodecError as exc:
        raise MalformedSignature(f"bad signature encoding: {exc}") from exc

    try:
        public_key.verify(signature, message.encode("utf-8"))
    except _CryptoInvalidSignature as exc:
        raise SignatureMismatch("signature verification failed") from exc


# ─── Client-side helpers ──────────────────────────────────────────


def encode_public_key(public_key: Ed25519PublicKey) -> str:
    """The base64url form a DID is registered with."""
    return b64url_encode(public_key.public_bytes_raw())


def sign_message(private_key: Ed25519PrivateKey, message: str) -> str:
    """Sign a canonical message and return the base64url signature."""
    return b64url_encode(private_key.sign(message.encode("utf-8")))
