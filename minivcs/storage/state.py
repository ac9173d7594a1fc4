"""Load and persist the small mutable state records (index, branches, HEAD)."""

from __future__ import annotations

from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from minivcs.core.errors import CorruptStateError
from minivcs.platforms import FileAccess

M = TypeVar("M", bound=BaseModel)


def load_record(files: FileAccess, path: Path, model: type[M]) -> M:
    """Decode ``path`` as ``model``; a missing file yields the model defaults.

    Raises:
        CorruptStateError: The file exists but does not validate.
    """
    if not files.exists(path):
        return model()
    try:
        return model.model_validate_json(files.read(path))
    except ValidationError as e:
        raise CorruptStateError(
            f"Cannot decode {path.name}: {e.error_count()} error(s)"
        ) from e


def save_record(files: FileAccess, path: Path, record: BaseModel) -> None:
    files.write(path, (record.model_dump_json(indent=2) + "\n").encode("utf-8"))


def read_scalar(files: FileAccess, path: Path) -> str:
    """Read a one-line text record such as HEAD."""
    try:
        value = files.read(path).decode("utf-8").strip()
    except UnicodeDecodeError as e:
        raise CorruptStateError(f"Cannot decode {path.name}") from e
    if not value:
        raise CorruptStateError(f"{path.name} is empty")
    return value


def write_scalar(files: FileAccess, path: Path, value: str) -> None:
    files.write(path, f"{value}\n".encode())
