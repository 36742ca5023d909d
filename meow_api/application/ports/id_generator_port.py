from __future__ import annotations

from abc import ABC, abstractmethod


class IdGeneratorPort(ABC):
    """Strategy for allocating fresh blob ids.

    Why: Collision resistance can be swapped (timestamp, uuid, ...) without
    touching the store adapter.
    """

    @abstractmethod
    def next_id(self, original_name: str) -> str:
        """Return a new id for content uploaded as ``original_name``."""
        ...
