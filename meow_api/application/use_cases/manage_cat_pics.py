"""Cat pic resource operations on top of the blob store.

Why: Defines what each client-visible action means in terms of store calls
     and which failure kind each outcome maps to.
"""

from typing import Literal

import structlog

from meow_api.application.dtos import CatPicContent, CatPicReceipt, CatPicSummary, UploadedFile
from meow_api.application.ports.blob_store_port import BlobStorePort
from meow_api.domain.errors import DomainError, NoFileProvided, NotFound, StorageFault
from meow_api.domain.types import Result
from meow_api.log_config import get_logger

UpdatePolicy = Literal["remove-first", "validate-first"]

UPLOADED_MESSAGE = "Cat pic uploaded successfully"
UPDATED_MESSAGE = "Cat pic updated successfully"
DELETED_MESSAGE = "Cat pic deleted successfully"


def _has_content(upload: UploadedFile | None) -> bool:
    return upload is not None and len(upload.content) > 0


class ManageCatPics:
    """Create, read, list, update and delete cat pics.

    Every store failure is returned unchanged as one of ``NoFileProvided``,
    ``NotFound`` or ``StorageFault``. Nothing is retried.

    Update policies:
    - ``remove-first``: check existence, remove the old blob, then validate
      the upload and write it. A rejected upload leaves the old id gone.
    - ``validate-first``: validate, write the replacement, then remove the
      old blob (rolling the replacement back if removal fails).
    """

    def __init__(
        self,
        store: BlobStorePort,
        update_policy: UpdatePolicy = "remove-first",
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize with a blob store.

        Args:
            store: Port for blob persistence
            update_policy: Ordering of the update steps (see class docstring)
            log: Logger (default: module logger)
        """
        if update_policy not in ("remove-first", "validate-first"):
            raise ValueError(f"Unknown update policy: {update_policy!r}")
        self.store = store
        self.update_policy = update_policy
        self.log = log or get_logger(__name__)

    def create(self, upload: UploadedFile | None) -> Result[CatPicReceipt, DomainError]:
        """Store a new cat pic and return its id."""
        if not _has_content(upload):
            self.log.error("No file uploaded")
            return Result.failure(NoFileProvided("No file uploaded"))
        assert upload is not None

        r_put = self.store.put(upload.filename, upload.content)
        if not r_put.ok:
            assert r_put.error is not None
            self.log.error("Error storing file", filename=upload.filename, error=str(r_put.error))
            return Result.failure(r_put.error)
        assert r_put.value is not None

        self.log.info("Received file", id=r_put.value, size=len(upload.content))
        return Result.success(CatPicReceipt(id=r_put.value, message=UPLOADED_MESSAGE))

    def read(self, blob_id: str) -> Result[CatPicContent, DomainError]:
        """Return the stored bytes for ``blob_id``."""
        if not self.store.exists(blob_id):
            self.log.error("Error retrieving file", id=blob_id, error="not found")
            return Result.failure(NotFound(blob_id))

        r_get = self.store.get(blob_id)
        if not r_get.ok:
            assert r_get.error is not None
            self.log.error("Error retrieving file", id=blob_id, error=str(r_get.error))
            return Result.failure(r_get.error)
        assert r_get.value is not None

        self.log.info("Retrieved file", id=blob_id)
        return Result.success(CatPicContent(id=blob_id, content=r_get.value))

    def list_all(self) -> Result[list[CatPicSummary], DomainError]:
        """Return every currently stored cat pic id."""
        r_ids = self.store.list_ids()
        if not r_ids.ok:
            assert r_ids.error is not None
            self.log.error("Error reading uploads directory", error=str(r_ids.error))
            return Result.failure(r_ids.error)
        assert r_ids.value is not None

        cats = [CatPicSummary(id=blob_id) for blob_id in r_ids.value]
        self.log.info("Retrieved list of cat pics", count=len(cats))
        return Result.success(cats)

    def update(
        self, blob_id: str, upload: UploadedFile | None
    ) -> Result[CatPicReceipt, DomainError]:
        """Replace ``blob_id`` with new content under a brand-new id."""
        if not self.store.exists(blob_id):
            self.log.error("File not found", id=blob_id)
            return Result.failure(NotFound(blob_id))

        if self.update_policy == "validate-first":
            return self._update_validate_first(blob_id, upload)

        r_rm = self.store.remove(blob_id)
        if not r_rm.ok:
            assert r_rm.error is not None
            self.log.error("Error updating file", id=blob_id, error=str(r_rm.error))
            return Result.failure(r_rm.error)

        # old blob is already gone from here on
        if not _has_content(upload):
            self.log.error("No file uploaded", id=blob_id)
            return Result.failure(NoFileProvided("No file uploaded"))
        assert upload is not None

        r_put = self.store.put(upload.filename, upload.content)
        if not r_put.ok:
            assert r_put.error is not None
            self.log.error("Error updating file", id=blob_id, error=str(r_put.error))
            return Result.failure(r_put.error)
        assert r_put.value is not None

        self.log.info("Updated file", id=blob_id, new_id=r_put.value)
        return Result.success(CatPicReceipt(id=r_put.value, message=UPDATED_MESSAGE))

    def _update_validate_first(
        self, blob_id: str, upload: UploadedFile | None
    ) -> Result[CatPicReceipt, DomainError]:
        if not _has_content(upload):
            self.log.error("No file uploaded", id=blob_id)
            return Result.failure(NoFileProvided("No file uploaded"))
        assert upload is not None

        r_put = self.store.put(upload.filename, upload.content)
        if not r_put.ok:
            assert r_put.error is not None
            self.log.error("Error updating file", id=blob_id, error=str(r_put.error))
            return Result.failure(r_put.error)
        assert r_put.value is not None
        new_id = r_put.value
        if new_id == blob_id:
            # removing the old id now would delete the replacement
            self.log.error("Error updating file", id=blob_id, error="store reused the old id")
            return Result.failure(StorageFault(f"Replacement reused id {blob_id}"))

        r_rm = self.store.remove(blob_id)
        if not r_rm.ok:
            assert r_rm.error is not None
            self.log.error("Error updating file", id=blob_id, error=str(r_rm.error))
            r_undo = self.store.remove(new_id)
            if not r_undo.ok:
                self.log.error(
                    "Error rolling back replacement", id=new_id, error=str(r_undo.error)
                )
            return Result.failure(r_rm.error)

        self.log.info("Updated file", id=blob_id, new_id=new_id)
        return Result.success(CatPicReceipt(id=new_id, message=UPDATED_MESSAGE))

    def delete(self, blob_id: str) -> Result[str, DomainError]:
        """Remove ``blob_id``. Not idempotent: a second delete fails."""
        r_rm = self.store.remove(blob_id)
        if not r_rm.ok:
            assert r_rm.error is not None
            self.log.error("Error deleting file", id=blob_id, error=str(r_rm.error))
            return Result.failure(r_rm.error)

        self.log.info("Deleted file", id=blob_id)
        return Result.success(DELETED_MESSAGE)
