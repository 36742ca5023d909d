"""Blob store port for id -> content persistence."""

from typing import Protocol, runtime_checkable

from meow_api.domain.errors import DomainError
from meow_api.domain.types import BlobId, Result


@runtime_checkable
class BlobStorePort(Protocol):
    """Port for blob storage operations.

    The store is the sole authority on which ids exist. Failures are
    returned as ``NotFound`` or ``StorageFault``, never raised.
    """

    def put(self, original_name: str, content: bytes) -> Result[BlobId, DomainError]:
        """Allocate a fresh id, persist content under it, return the id."""
        ...

    def exists(self, blob_id: BlobId) -> bool:
        """True iff a blob is currently persisted under ``blob_id``."""
        ...

    def get(self, blob_id: BlobId) -> Result[bytes, DomainError]:
        """Get blob content by id."""
        ...

    def remove(self, blob_id: BlobId) -> Result[None, DomainError]:
        """Delete the blob stored under ``blob_id``."""
        ...

    def list_ids(self) -> Result[list[BlobId], DomainError]:
        """Snapshot of all currently stored ids (order not significant)."""
        ...
