"""
SIGIL Registry

DID resolution plus a crowdsourced registry of scanner patterns and
tool-risk policies, where every write is authenticated by the
submitter's own Ed25519 key.
"""

__version__ = "0.3.0"
