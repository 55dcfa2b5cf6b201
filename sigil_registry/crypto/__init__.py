"""
SIGIL Registry — Signing Protocol

Base64url codec, canonical message builders, and Ed25519 verification.
Together these are the wire contract every external signer implements.
"""

from sigil_registry.crypto.messages import pattern_message, policy_message, vote_message
from sigil_registry.crypto.signatures import (
    InvalidKey,
    MalformedKey,
    MalformedSignature,
    SignatureError,
    SignatureMismatch,
    verify_signature,
)

__all__ = [
    "InvalidKey",
    "MalformedKey",
    "MalformedSignature",
    "SignatureError",
    "SignatureMismatch",
    "pattern_message",
    "policy_message",
    "verify_signature",
    "vote_message",
]
