"""In-memory view of one repository's configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from minivcs.config.constants import CONFIG_FILE_NAME
from minivcs.config.providers import ConfigProvider, LocalFileConfigProvider
from minivcs.platforms import FileAccess
from minivcs.utils.logger import get_logger

logger = get_logger("config.manager")


class ConfigManager:
    def __init__(self, provider: ConfigProvider):
        self.provider = provider
        self._config: dict[str, Any] = {}

    def initialize(self) -> None:
        self._config = self.provider.load()
        logger.debug("Configuration initialized", keys=sorted(self._config))

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def get_all(self) -> dict[str, Any]:
        return dict(self._config)


def create_config_manager(
    metadata_dir: Path,
    *,
    defaults: dict[str, Any] | None = None,
    files: FileAccess | None = None,
    create_if_missing: bool = False,
) -> ConfigManager:
    """Build and load a manager for ``<metadata_dir>/config.json``."""
    manager = ConfigManager(
        LocalFileConfigProvider(
            metadata_dir / CONFIG_FILE_NAME,
            defaults=defaults,
            files=files,
            create_if_missing=create_if_missing,
        )
    )
    manager.initialize()
    return manager
