"""Application settings with environment-driven configuration.

Why: Single place that reads the environment; feature flags toggle the
     compatibility behaviours (update ordering, delete status code).
"""

import os
from dataclasses import dataclass, field


# names uvicorn accepts for log_level
LOG_LEVELS = ("critical", "error", "warning", "info", "debug", "trace")
_LOG_LEVEL_ALIASES = {"warn": "warning", "fatal": "critical"}


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables.

    This is the ONLY place where environment variables are read.
    All other layers receive settings via dependency injection.

    Feature Flags:
    - update_policy: "remove-first" reproduces the legacy non-transactional
      update, "validate-first" rejects a missing upload before touching storage
    - delete_missing_as_404: answer 404 instead of 500 when deleting an
      unknown id
    """

    # ===== Storage Configuration =====
    upload_dir: str = field(default_factory=lambda: os.getenv("UPLOAD_DIR", "uploads"))

    id_strategy: str = field(
        default_factory=lambda: os.getenv("ID_STRATEGY", "timestamp").lower()
    )
    # Supported: "timestamp" | "uuid"

    # ===== Behaviour Flags =====
    update_policy: str = field(
        default_factory=lambda: os.getenv("UPDATE_POLICY", "remove-first").lower()
    )
    # Supported: "remove-first" | "validate-first"

    delete_missing_as_404: bool = field(
        default_factory=lambda: _env_bool("DELETE_MISSING_AS_404", "false")
    )

    # ===== Server Configuration =====
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "3000")))
    app_env: str = field(default_factory=lambda: os.getenv("APP_ENV", "development").lower())

    # ===== Logging Configuration =====
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "info").lower())
    log_json: bool = field(default_factory=lambda: _env_bool("LOG_JSON", "false"))

    def __post_init__(self) -> None:
        level = _LOG_LEVEL_ALIASES.get(self.log_level.lower(), self.log_level.lower())
        if level not in LOG_LEVELS:
            raise ValueError(
                f"Unknown LOG_LEVEL: {self.log_level!r} (expected one of {LOG_LEVELS})"
            )
        # frozen dataclass: normalise in place
        object.__setattr__(self, "log_level", level)
