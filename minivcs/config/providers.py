"""Where repository configuration is read from and written to."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from minivcs.config.schema import deep_merge, validate_config
from minivcs.platforms import FileAccess, LocalFileAccess
from minivcs.utils.logger import get_logger

logger = get_logger("config.providers")


class ConfigProvider(ABC):
    @abstractmethod
    def load(self) -> dict[str, Any]:
        """Return the validated configuration, defaults included."""

    @abstractmethod
    def save(self, config: dict[str, Any]) -> None:
        """Persist ``config`` as given."""


class LocalFileConfigProvider(ConfigProvider):
    """``.minivcs/config.json`` layered over built-in defaults.

    Only keys the user actually set are kept in ``_user_config`` and written
    back, so a later change of a default still reaches old repositories.
    """

    def __init__(
        self,
        config_path: Path,
        defaults: dict[str, Any] | None = None,
        *,
        files: FileAccess | None = None,
        create_if_missing: bool = False,
    ):
        self.config_path = config_path
        self.defaults = defaults or {}
        self.files = files or LocalFileAccess()
        self.create_if_missing = create_if_missing
        self._user_config: dict[str, Any] | None = None

    def _read_user_config(self) -> dict[str, Any]:
        if not self.files.exists(self.config_path):
            if self.create_if_missing:
                logger.info("Writing default config", path=str(self.config_path))
                self.save(dict(self.defaults))
            return {}

        raw = self.files.read(self.config_path)
        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(
                "Config is not valid JSON, falling back to defaults",
                path=str(self.config_path),
                error=str(e),
            )
            return {}
        if not isinstance(parsed, dict):
            logger.error(
                "Config must be a JSON object, falling back to defaults",
                path=str(self.config_path),
            )
            return {}
        return parsed

    def load(self) -> dict[str, Any]:
        """Raises ConfigValidationError when a key holds an unusable value."""
        self._user_config = self._read_user_config()
        config = validate_config(deep_merge(self.defaults, self._user_config))
        logger.debug(
            "Config loaded", path=str(self.config_path), user_keys=sorted(self._user_config)
        )
        return config

    def save(self, config: dict[str, Any]) -> None:
        data = json.dumps(config, ensure_ascii=False, indent=2, sort_keys=True) + "\n"
        self.files.write(self.config_path, data.encode("utf-8"))
        logger.debug("Config saved", path=str(self.config_path))
