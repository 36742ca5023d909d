"""Domain errors (typed) for the cat pic store.

Why: Unified error family for the Application layer, without Infra leaks.
"""


class DomainError(Exception):
    """Base class for domain-specific errors."""


class ValidationError(DomainError):
    """Invalid input/domain state."""


class NoFileProvided(ValidationError):
    """Caller omitted the content an operation requires."""


class NotFound(DomainError):
    """Referenced blob id is not currently stored."""

    def __init__(self, blob_id: str) -> None:
        self.blob_id = blob_id
        super().__init__(f"Blob not found: {blob_id}")


class StorageFault(DomainError):
    """Storage medium failed on an operation that should have succeeded."""
