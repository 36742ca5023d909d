"""Application DTOs for the cat pic operations.

Why: Clean input/output contracts between the HTTP adapter and the use case.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class UploadedFile:
    """Decoded multipart upload."""

    filename: str
    content: bytes


@dataclass(frozen=True)
class CatPicReceipt:
    """Outcome of a create or update: the (new) id plus a user message."""

    id: str
    message: str


@dataclass(frozen=True)
class CatPicContent:
    id: str
    content: bytes


@dataclass(frozen=True)
class CatPicSummary:
    id: str
