"""Id generation strategies for the blob store.

Ids double as filenames, so both strategies keep the original filename as a
suffix (human-traceable) and strip any directory part from it.
"""

from __future__ import annotations

import uuid
from pathlib import PurePosixPath, PureWindowsPath

from ...application.ports.clock_port import ClockPort
from ...application.ports.id_generator_port import IdGeneratorPort


def safe_basename(original_name: str) -> str:
    """Return the final path component of a client-supplied filename."""
    # PureWindowsPath splits on both "/" and "\\"
    name = PureWindowsPath(PurePosixPath(original_name or "").name).name
    return name.replace("\x00", "")


class TimestampIdGenerator(IdGeneratorPort):
    """``<epoch millis>-<filename>``: sortable by creation order.

    Two uploads with the same filename in the same millisecond collide.
    """

    def __init__(self, clock: ClockPort) -> None:
        self._clock = clock

    def next_id(self, original_name: str) -> str:
        millis = int(self._clock.now().timestamp() * 1000)
        return f"{millis}-{safe_basename(original_name)}"


class UuidIdGenerator(IdGeneratorPort):
    """``<uuid4 hex>-<filename>``: collision resistant, not time ordered."""

    def next_id(self, original_name: str) -> str:
        return f"{uuid.uuid4().hex}-{safe_basename(original_name)}"
