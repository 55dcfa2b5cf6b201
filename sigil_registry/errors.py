"""
SIGIL Registry — Error Hierarchy

Every failure a core operation can report to its caller. Each class carries
the HTTP status and stable machine code the API layer maps it to.

  NotFound          404  identity or entry absent / inactive
  Conflict          409  identity string already registered (any status)
  Duplicate         409  unique entry field already taken
  ValidationFailed  400  malformed field or value outside an allow-list
  InvalidSignature  401  signature did not verify (reason attached)
  Unauthorized      401  registry key missing or wrong
  UnknownAuthor     403  signer is not a currently-active identity
  AlreadyVoted      409  voter already has a ledger row for this target
  InvalidVote       400  direction is neither "up" nor "down"
  StoreError        500  underlying database fault

Cache faults never appear here: they are absorbed where they happen.
"""

from __future__ import annotations

from typing import Any


class RegistryError(Exception):
    """Base for all errors surfaced by the registry core."""

    status: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code}


class NotFound(RegistryError):
    status = 404
    code = "NOT_FOUND"


class Conflict(RegistryError):
    status = 409
    code = "CONFLICT"


class Duplicate(RegistryError):
    status = 409
    code = "DUPLICATE"


class ValidationFailed(RegistryError):
    status = 400
    code = "VALIDATION_ERROR"


class InvalidSignature(RegistryError):
    """A verifier failure, collapsed at the core boundary."""

    status = 401
    code = "INVALID_SIGNATURE"

    def __init__(self, reason: Exception | str) -> None:
        self.reason = reason
        self.category = type(reason).__name__ if isinstance(reason, Exception) else None
        super().__init__(f"Invalid signature: {reason}")

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        if self.category:
            body["reason"] = self.category
        return body


class Unauthorized(RegistryError):
    status = 401
    code = "UNAUTHORIZED"


class UnknownAuthor(RegistryError):
    status = 403
    code = "UNKNOWN_AUTHOR"

    def __init__(self, did: str) -> None:
        self.did = did
        super().__init__(f"Unknown or inactive author DID: {did}")


class AlreadyVoted(RegistryError):
    status = 409
    code = "ALREADY_VOTED"

    def __init__(self, message: str = "This DID has already voted on this entry") -> None:
        super().__init__(message)


class InvalidVote(RegistryError):
    status = 400
    code = "INVALID_VOTE"

    def __init__(self, message: str = "vote must be 'up' or 'down'") -> None:
        super().__init__(message)


class StoreError(RegistryError):
    status = 500
    code = "INTERNAL_ERROR"
