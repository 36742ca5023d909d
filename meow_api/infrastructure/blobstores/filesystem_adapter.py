"""Filesystem blob store adapter: one directory, one file per blob.

Why: The directory listing is the source of truth. There is no index file
     and no metadata sidecar, so store and metadata cannot drift apart.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from meow_api.application.ports.blob_store_port import BlobStorePort
from meow_api.application.ports.id_generator_port import IdGeneratorPort
from meow_api.domain.errors import DomainError, NotFound, StorageFault
from meow_api.domain.types import BlobId, Result

_TMP_PREFIX = ".upload-"
_MAX_ID_ATTEMPTS = 3


@dataclass
class FilesystemConfig:
    """Configuration for the filesystem blob store."""

    root: Path
    create_root: bool = True


class FilesystemBlobStoreAdapter(BlobStorePort):
    """Store each blob as ``<root>/<id>``.

    Features:
    - Atomic, non-overwriting writes (temp file in the same directory, then
      ``os.link`` to the id); an id that is already taken is never reused
    - Ids that are hidden, nested, symlinks or escape the root are treated
      as absent
    - No in-process locking: concurrent same-id races are decided by the
      filesystem, the loser observes ``NotFound``
    """

    def __init__(self, cfg: FilesystemConfig, id_generator: IdGeneratorPort) -> None:
        """Initialize the store handle.

        Args:
            cfg: FilesystemConfig with the root directory
            id_generator: Strategy for allocating new ids

        Raises:
            StorageFault: If the root directory cannot be created
        """
        self._root = Path(cfg.root)
        self._ids = id_generator
        if cfg.create_root:
            try:
                self._root.mkdir(parents=True, exist_ok=True)
            except OSError as ex:
                raise StorageFault(f"Cannot create upload dir {self._root}: {ex}") from ex

    @property
    def root(self) -> Path:
        """Return the root directory path."""
        return self._root

    def _resolve_path(self, blob_id: BlobId) -> Path | None:
        """Return ``<root>/<blob_id>`` if it names a direct, non-symlink child of the root.

        The returned path is not resolved, so unlink acts on the entry itself.
        """
        if not blob_id or blob_id.startswith(".") or "/" in blob_id or "\\" in blob_id:
            return None
        if "\x00" in blob_id:
            return None
        candidate = self._root / blob_id
        if candidate.parent.resolve() != self._root.resolve():
            return None
        if candidate.is_symlink():
            return None
        return candidate

    def put(self, original_name: str, content: bytes) -> Result[BlobId, DomainError]:
        """Allocate a fresh id and write ``content`` under it.

        An id that is already taken is never overwritten: the generator is asked
        again, and after a few collisions the put fails.

        Args:
            original_name: Client-supplied filename (becomes part of the id)
            content: Binary data to store

        Returns:
            Result with the new id or StorageFault
        """
        tmp_name: str | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=_TMP_PREFIX, dir=self._root)
            with os.fdopen(fd, "wb") as fh:
                fh.write(content)

            for _ in range(_MAX_ID_ATTEMPTS):
                blob_id = self._ids.next_id(original_name)
                path = self._resolve_path(blob_id)
                if path is None:
                    return Result.failure(
                        StorageFault(f"Generated id {blob_id!r} is not storable")
                    )
                try:
                    os.link(tmp_name, path)
                except FileExistsError:
                    continue
                return Result.success(blob_id)

            return Result.failure(
                StorageFault(
                    f"id collision for {original_name!r} after {_MAX_ID_ATTEMPTS} attempts"
                )
            )
        except OSError as ex:
            return Result.failure(StorageFault(f"put failed for {original_name!r}: {ex}"))
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    def exists(self, blob_id: BlobId) -> bool:
        path = self._resolve_path(blob_id)
        if path is None:
            return False
        try:
            return path.is_file()
        except OSError:
            return False

    def get(self, blob_id: BlobId) -> Result[bytes, DomainError]:
        """Read blob content by id.

        Returns:
            Result with the bytes, NotFound or StorageFault
        """
        path = self._resolve_path(blob_id)
        if path is None:
            return Result.failure(NotFound(blob_id))
        try:
            return Result.success(path.read_bytes())
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return Result.failure(NotFound(blob_id))
        except OSError as ex:
            return Result.failure(StorageFault(f"get failed for {blob_id}: {ex}"))

    def remove(self, blob_id: BlobId) -> Result[None, DomainError]:
        """Delete blob by id.

        Returns:
            Result with None, NotFound or StorageFault
        """
        path = self._resolve_path(blob_id)
        if path is None:
            return Result.failure(NotFound(blob_id))
        try:
            path.unlink()
            return Result.success(None)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return Result.failure(NotFound(blob_id))
        except OSError as ex:
            return Result.failure(StorageFault(f"remove failed for {blob_id}: {ex}"))

    def list_ids(self) -> Result[list[BlobId], DomainError]:
        """List ids of all stored blobs (directory enumeration order).

        Returns:
            Result with ids or StorageFault
        """
        try:
            with os.scandir(self._root) as entries:
                ids = [
                    entry.name
                    for entry in entries
                    if not entry.name.startswith(".")
                    and not entry.is_symlink()
                    and entry.is_file()
                ]
        except OSError as ex:
            return Result.failure(StorageFault(f"list failed: {ex}"))
        return Result.success(ids)
