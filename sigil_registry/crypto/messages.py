"""
Canonical messages for the three signable operations.

The message is never transmitted: signer and verifier each rebuild it from
the request fields and must produce byte-identical strings. Fields are used
verbatim (no trimming, no case-folding). Changing the order, the delimiter,
or the set of fields breaks every existing client.

    {prefix}:pattern:{name}:{category}:{pattern}:{author_did}
    {prefix}:policy:{tool_name}:{risk_level}:{requires_trust}:{author_did}
    {prefix}:vote:{target_type}:{target_id}:{vote}:{voter_did}
"""

from __future__ import annotations

DEFAULT_PREFIX = "sigil-registry"


def pattern_message(
    name: str,
    category: str,
    pattern: str,
    author_did: str,
    *,
    prefix: str = DEFAULT_PREFIX,
) -> str:
    """Build the canonical message for a pattern submission."""
    return f"{prefix}:pattern:{name}:{category}:{pattern}:{author_did}"


def policy_message(
    tool_name: str,
    risk_level: str,
    requires_trust: str,
    author_did: str,
    *,
    prefix: str = DEFAULT_PREFIX,
) -> str:
    """Build the canonical message for a policy submission."""
    return f"{prefix}:policy:{tool_name}:{risk_level}:{requires_trust}:{author_did}"


def vote_message(
    target_type: str,
    target_id: str,
    vote: str,
    voter_did: str,
    *,
    prefix: str = DEFAULT_PREFIX,
) -> str:
    """Build the canonical message for a vote."""
    return f"{prefix}:vote:{target_type}:{target_id}:{vote}:{voter_did}"
