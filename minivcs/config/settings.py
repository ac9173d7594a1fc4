"""Typed access to repository settings with MINIVCS_* environment fallbacks."""

from __future__ import annotations

import os
from typing import Any

from minivcs.config.manager import ConfigManager


class Settings:
    """Repository settings.

    Values come from the repository's ConfigManager when one is attached;
    otherwise from MINIVCS_* environment variables, then built-in defaults.
    Environment variables listed in ``_ENV_OVERRIDES`` win over the config
    file so a single invocation can raise log verbosity.
    """

    _ENV_OVERRIDES = ("log_level", "log_format")

    def __init__(self, config_manager: ConfigManager | None = None):
        self._config_manager = config_manager

    def _get(
        self,
        key: str,
        default: Any,
        env_key: str | None = None,
    ) -> Any:
        """Get config value from env override, manager, env fallback, then default."""
        env_val = os.getenv(env_key) if env_key else None
        if env_val and key in self._ENV_OVERRIDES:
            return env_val.lower()
        if self._config_manager:
            return self._config_manager.get(key, default)
        if env_val:
            if isinstance(default, bool):
                return env_val.lower() in ("true", "1", "yes", "on")
            return env_val
        return default

    @property
    def default_branch(self) -> str:
        return self._get("default_branch", "master", "MINIVCS_DEFAULT_BRANCH")

    @property
    def initial_message(self) -> str:
        return self._get("initial_message", "initial commit")

    @property
    def ignore_file(self) -> str:
        return self._get("ignore_file", ".minivcsignore", "MINIVCS_IGNORE_FILE")

    # Logging
    @property
    def log_level(self) -> str:
        return self._get("log_level", "warning", "MINIVCS_LOG_LEVEL")

    @property
    def log_format(self) -> str:
        return self._get("log_format", "pretty", "MINIVCS_LOG_FORMAT")

    @property
    def log_colors(self) -> bool:
        return self._get("log_colors", True, "MINIVCS_LOG_COLORS")
