"""Validated shape of ``.minivcs/config.json``."""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

# No whitespace and no path separators; branch names end up in HEAD verbatim.
_BRANCH_NAME_RE = re.compile(r"^[^\s/\\]+$")

_ERROR_TEMPLATES = {
    "string_type": "'{loc}' must be a string",
    "bool_type": "'{loc}' must be true or false",
    "literal_error": "'{loc}' has an unsupported value: {msg}",
}


def is_valid_branch_name(name: str) -> bool:
    return bool(_BRANCH_NAME_RE.match(name))


def deep_merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``updates`` laid over it; nested dicts merge key by key."""
    merged = dict(base)
    for key, value in updates.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


class RepoConfig(BaseModel):
    default_branch: str = "master"
    initial_message: str = "initial commit"
    ignore_file: str = ".minivcsignore"
    log_level: Literal["debug", "info", "warning", "error"] = "warning"
    log_format: Literal["pretty", "json"] = "pretty"
    log_colors: bool = True

    # Unknown keys are ignored
    model_config = ConfigDict(extra="ignore")

    @field_validator("default_branch")
    @classmethod
    def check_branch_name(cls, value: str) -> str:
        if not is_valid_branch_name(value):
            raise ValueError(f"Invalid default branch name '{value}'")
        return value

    @field_validator("initial_message")
    @classmethod
    def check_initial_message(cls, value: str) -> str:
        if not value:
            raise ValueError("Initial commit message must not be empty")
        return value


class ConfigValidationError(Exception):
    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


def validate_config(config: dict[str, Any]) -> dict[str, Any]:
    """Check ``config`` against RepoConfig and return it normalized.

    Raises:
        ConfigValidationError: One readable message per invalid key.
    """
    try:
        return RepoConfig.model_validate(config).model_dump(mode="json")
    except ValidationError as e:
        raise ConfigValidationError(_extract_validation_errors(e)) from e


def _extract_validation_errors(exc: ValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "config"
        msg = err["msg"].removeprefix("Value error, ")
        template = _ERROR_TEMPLATES.get(err["type"])
        if template is not None:
            messages.append(template.format(loc=loc, msg=msg))
        elif err["type"] == "value_error":
            messages.append(msg)
        else:
            messages.append(f"{loc}: {msg}")
    return messages or ["Invalid configuration"]
