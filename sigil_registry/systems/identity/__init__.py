"""
SIGIL Registry — Identity System

DID directory, resolution cache, and the service combining them.
"""

from sigil_registry.systems.identity.cache import ResolutionCache
from sigil_registry.systems.identity.directory import IdentityDirectory
from sigil_registry.systems.identity.service import IdentityService
from sigil_registry.systems.identity.types import IdentityRecord, IdentityStatus, PublicKeyRecord

__all__ = [
    "IdentityDirectory",
    "IdentityRecord",
    "IdentityService",
    "IdentityStatus",
    "PublicKeyRecord",
    "ResolutionCache",
]
