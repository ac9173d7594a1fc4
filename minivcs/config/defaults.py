"""Default configuration values for minivcs repositories."""

from typing import Any

from minivcs.config.schema import RepoConfig


def get_default_config() -> dict[str, Any]:
    """Return the configuration written by ``init`` for a new repository."""
    return RepoConfig().model_dump(mode="json")
