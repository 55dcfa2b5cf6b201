"""
SIGIL Registry — Entries System

Scanner patterns and security policies: one generic store, configured
per kind.
"""

from sigil_registry.systems.entries.kinds import KINDS, PATTERN_KIND, POLICY_KIND, EntryKindSpec
from sigil_registry.systems.entries.repository import EntryRepository
from sigil_registry.systems.entries.store import EntryStore, PatternStore
from sigil_registry.systems.entries.types import (
    Bundle,
    BundleEntry,
    EntryKind,
    Page,
    PatternSubmission,
    PolicySubmission,
    ScannerPattern,
    SecurityPolicy,
)

__all__ = [
    "KINDS",
    "PATTERN_KIND",
    "POLICY_KIND",
    "Bundle",
    "BundleEntry",
    "EntryKind",
    "EntryKindSpec",
    "EntryRepository",
    "EntryStore",
    "Page",
    "PatternStore",
    "PatternSubmission",
    "PolicySubmission",
    "ScannerPattern",
    "SecurityPolicy",
]
