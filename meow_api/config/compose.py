"""Dependency injection container with environment-driven wiring.

Why: Single place for wiring; domain and application layers stay pure.
"""

from pathlib import Path

from meow_api.application.ports import BlobStorePort, ClockPort, IdGeneratorPort
from meow_api.application.use_cases.manage_cat_pics import ManageCatPics
from meow_api.config.settings import AppSettings


class Container:
    """Dependency injection container for application components.

    Responsibilities:
    1. Read settings from environment (via AppSettings)
    2. Choose adapters based on settings (id_strategy)
    3. Inject dependencies into the use case
    4. Apply feature flags (update_policy)
    """

    def __init__(self, settings: AppSettings | None = None) -> None:
        """Initialize container with settings.

        Args:
            settings: Application settings (default: load from environment)
        """
        self.settings = settings or AppSettings()
        self._clock: ClockPort | None = None
        self._id_generator: IdGeneratorPort | None = None
        self._blob_store: BlobStorePort | None = None
        self._cat_pics: ManageCatPics | None = None

    # ===== Adapters =====

    def get_clock(self) -> ClockPort:
        if self._clock is None:
            from meow_api.infrastructure.time.system_clock import SystemClock

            self._clock = SystemClock()
        return self._clock

    def get_id_generator(self) -> IdGeneratorPort:
        """Get or create the id strategy based on settings."""
        if self._id_generator is None:
            self._id_generator = self._build_id_generator()
        return self._id_generator

    def get_blob_store(self) -> BlobStorePort:
        """Get or create the filesystem blob store (creates upload_dir)."""
        if self._blob_store is None:
            self._blob_store = self._build_blob_store()
        return self._blob_store

    # ===== Use Cases =====

    def get_cat_pics_use_case(self) -> ManageCatPics:
        """Build the cat pic use case with all dependencies."""
        if self._cat_pics is None:
            self._cat_pics = ManageCatPics(
                store=self.get_blob_store(),
                update_policy=self.settings.update_policy,  # type: ignore[arg-type]
            )
        return self._cat_pics

    # ===== Private Builder Methods =====

    def _build_id_generator(self) -> IdGeneratorPort:
        """Build id generator based on settings.id_strategy.

        Supports: timestamp | uuid
        """
        from meow_api.infrastructure.ids.generators import (
            TimestampIdGenerator,
            UuidIdGenerator,
        )

        strategy = self.settings.id_strategy
        if strategy == "timestamp":
            return TimestampIdGenerator(self.get_clock())
        elif strategy == "uuid":
            return UuidIdGenerator()
        raise ValueError(f"Unknown ID_STRATEGY: {strategy!r}")

    def _build_blob_store(self) -> BlobStorePort:
        from meow_api.infrastructure.blobstores.filesystem_adapter import (
            FilesystemBlobStoreAdapter,
            FilesystemConfig,
        )

        cfg = FilesystemConfig(root=Path(self.settings.upload_dir).resolve())
        return FilesystemBlobStoreAdapter(cfg, self.get_id_generator())


# ===== Convenience Functions =====


def build_container(settings: AppSettings | None = None) -> Container:
    """Build dependency injection container with settings.

    Example:
        container = build_container()
        cat_pics = container.get_cat_pics_use_case()
        result = cat_pics.list_all()
    """
    return Container(settings)
