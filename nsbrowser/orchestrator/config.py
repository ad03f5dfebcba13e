"""
OrchestratorConfig — Configuration for background resolution

Loads worker settings from environment variables.
Provides sensible defaults that work on any machine.

Environment variables:
- NSB_PARALLEL_ENABLED: Run host calls on worker threads (default: true)
- NSB_RESOLVE_WORKERS: Thread pool size (default: 4)
- NSB_RESOLVE_TIMEOUT: Seconds before a resolution is reported failed (default: 30)
- NSB_SHUTDOWN_TIMEOUT: Pool shutdown timeout in seconds (default: 5)
"""

import os
from dataclasses import dataclass


@dataclass
class OrchestratorConfig:
    """
    Configuration for the resolution orchestrator.

    Loaded from environment variables with sensible defaults.
    """

    # Feature toggle; when off, tasks run inline on the caller's thread
    enabled: bool = True

    # Worker pool size
    workers: int = 4

    # Timeouts
    task_timeout: float = 30.0             # Resolution deadline (seconds)
    shutdown_timeout: float = 5.0          # Pool shutdown timeout (seconds)

    @classmethod
    def from_env(cls) -> 'OrchestratorConfig':
        """Load configuration from environment variables."""
        return cls(
            enabled=_get_bool_env("NSB_PARALLEL_ENABLED", True),
            workers=_get_int_env("NSB_RESOLVE_WORKERS", 4),
            task_timeout=_get_float_env("NSB_RESOLVE_TIMEOUT", 30.0),
            shutdown_timeout=_get_float_env("NSB_SHUTDOWN_TIMEOUT", 5.0),
        )

    def validate(self) -> None:
        """Validate configuration values."""
        if self.workers < 1:
            raise ValueError("NSB_RESOLVE_WORKERS must be >= 1")
        if self.task_timeout <= 0:
            raise ValueError("NSB_RESOLVE_TIMEOUT must be > 0")
        if self.shutdown_timeout < 0:
            raise ValueError("NSB_SHUTDOWN_TIMEOUT must be >= 0")

    def to_dict(self) -> dict:
        """Serialize for display/logging."""
        return {
            "enabled": self.enabled,
            "workers": self.workers,
            "task_timeout": self.task_timeout,
            "shutdown_timeout": self.shutdown_timeout,
        }


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean from environment variable."""
    value = os.environ.get(key, "").lower()
    if value in ("true", "1", "yes", "on"):
        return True
    if value in ("false", "0", "no", "off"):
        return False
    return default


def _get_int_env(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.environ.get(key, "")
    if value:
        try:
            return int(value)
        except ValueError:
            pass
    return default


def _get_float_env(key: str, default: float) -> float:
    """Get float from environment variable."""
    value = os.environ.get(key, "")
    if value:
        try:
            return float(value)
        except ValueError:
            pass
    return default
