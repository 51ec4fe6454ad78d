# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Repository configuration read from ``[tool.fwlib]`` in ``pyproject.toml``."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .naming import FileSystemNamingStrategy
from .repository import FileSystemLibraryRepository

PYPROJECT_FILE: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "fwlib"

NamingKey = Literal["name", "name@version", "direct"]
LayoutVersion = Literal[1, 2]


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


class RepositoryConfig(BaseModel):
    """Settings describing which repository the tools operate on."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    root: Path = Field(default_factory=Path)
    naming: NamingKey = "name"
    layout: LayoutVersion = 2
    emoji: bool = True
    color: bool = True

    def build_repository(self) -> FileSystemLibraryRepository:
        """Return a filesystem repository rooted at ``root`` using ``naming``."""

        return FileSystemLibraryRepository(self.root, FileSystemNamingStrategy.from_key(self.naming))


def read_pyproject_section(project_root: Path) -> dict[str, Any]:
    """Return the ``[tool.fwlib]`` table of ``project_root/pyproject.toml``.

    A missing file or a file without the table yields an empty mapping.

    Raises:
        ConfigError: If the file cannot be parsed or the table is not a table.
    """

    pyproject = project_root / PYPROJECT_FILE
    if not pyproject.is_file():
        return {}
    try:
        with pyproject.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {pyproject}: {exc}") from exc
    section = data.get(PYPROJECT_TOOL_KEY, {}).get(PYPROJECT_SECTION_KEY, {})
    if not isinstance(section, Mapping):
        raise ConfigError(f"[{PYPROJECT_TOOL_KEY}.{PYPROJECT_SECTION_KEY}] in {pyproject} must be a table")
    return dict(section)


def load_repository_config(
    project_root: Path,
    overrides: Mapping[str, Any] | None = None,
) -> RepositoryConfig:
    """Load and validate the repository configuration for ``project_root``.

    A relative ``root`` in the file is resolved against ``project_root``.
    Overrides whose value is ``None`` are ignored.

    Args:
        project_root: Directory holding ``pyproject.toml``.
        overrides: Values taking precedence over the file, typically CLI options.

    Returns:
        RepositoryConfig: The validated configuration.

    Raises:
        ConfigError: If the file or the merged values are invalid.
    """

    payload = read_pyproject_section(project_root)
    if "root" in payload:
        payload["root"] = project_root / Path(str(payload["root"]))
    else:
        payload["root"] = project_root
    for key, value in (overrides or {}).items():
        if value is not None:
            payload[key] = value
    try:
        return RepositoryConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid fwlib configuration: {exc}") from exc


__all__ = (
    "ConfigError",
    "RepositoryConfig",
    "load_repository_config",
    "read_pyproject_section",
)
