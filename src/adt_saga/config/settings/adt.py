"""Config settings – connection settings for the repository server."""
from __future__ import annotations

import dataclasses
from urllib.parse import urlparse

from adt_saga.config.settings.base import Settings
from adt_saga.config.validation import InvalidSettingValueError

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclasses.dataclass
class AdtSettings(Settings):
    """Settings read from ``ADT_*`` environment variables.

    ``ADT_URL`` is the only required one. ``ADT_LOCK_REGISTRY_DIR`` turns on
    the file-backed lock registry.
    """

    _prefix = "ADT"

    url: str
    username: str | None = None
    password: str | None = None
    client: str | None = None
    timeout_seconds: float = 30.0
    log_level: str = "INFO"
    lock_registry_dir: str | None = None
    client_cache_size: int = 8

    def _validate(self) -> None:
        parsed = urlparse(self.url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidSettingValueError("ADT_URL", self.url, "must be an http(s) URL")
        self.url = self.url.rstrip("/")
        if self.timeout_seconds <= 0:
            raise InvalidSettingValueError("ADT_TIMEOUT_SECONDS", self.timeout_seconds, "must be positive")
        if self.client_cache_size < 1:
            raise InvalidSettingValueError("ADT_CLIENT_CACHE_SIZE", self.client_cache_size, "must be at least 1")
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise InvalidSettingValueError("ADT_LOG_LEVEL", self.log_level, "unknown log level")
        if self.client is not None and not (self.client.isdigit() and len(self.client) == 3):
            raise InvalidSettingValueError("ADT_CLIENT", self.client, "must be a three-digit client number")


__all__ = ["AdtSettings"]
