"""Application ports package."""

from meow_api.application.ports.blob_store_port import BlobStorePort
from meow_api.application.ports.clock_port import ClockPort
from meow_api.application.ports.id_generator_port import IdGeneratorPort

__all__ = [
    "BlobStorePort",
    "ClockPort",
    "IdGeneratorPort",
]
