# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Naming strategies mapping descriptors to identifiers and filesystem paths."""

from __future__ import annotations

import os
import stat
from collections.abc import Mapping
from typing import Any, ClassVar, Final, Protocol

from .filesystem import get_dirs
from .library import LibraryDescriptor


class NamingRepository(Protocol):
    """Repository surface consulted by naming strategies when listing names."""

    path: str

    def descriptor_file_v2(self, name: str) -> str:
        """Return the v2 descriptor path for ``name``."""

    def file_stat(self, path: str) -> os.stat_result | None:
        """Return the stat result for ``path`` or ``None``."""

    def read_descriptor_v2(self, name: str, path: str) -> LibraryDescriptor:
        """Read and validate the v2 descriptor at ``path`` for ``name``."""


class NamingStrategy:
    """Policy mapping a descriptor to an identifier and an identifier to a path fragment."""

    key: ClassVar[str] = ""

    def to_name(self, descriptor: Mapping[str, Any]) -> str:
        """Return the identifier derived from ``descriptor``.

        Raises:
            NotImplementedError: Concrete strategies must override this method.
        """

        raise NotImplementedError("not implemented")

    def name_to_filesystem(self, name: str) -> str:
        """Return the directory fragment addressing the library ``name``."""

        return name

    def matches_name(self, descriptor: Mapping[str, Any], name: str) -> bool:
        """Return ``True`` when ``descriptor`` is addressed by ``name``."""

        return self.to_name(descriptor) == name

    def names(self, repository: NamingRepository) -> list[str]:
        """Return the subdirectories of the repository holding a v2 descriptor.

        Args:
            repository: Repository whose root directory is scanned.

        Returns:
            list[str]: Directory names, in sorted order, that contain a
            regular ``library.properties`` file.
        """

        names: list[str] = []
        for directory in get_dirs(repository.path):
            descriptor_stat = repository.file_stat(repository.descriptor_file_v2(directory))
            if descriptor_stat is not None and stat.S_ISREG(descriptor_stat.st_mode):
                names.append(directory)
        return names

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ByNameStrategy(NamingStrategy):
    """Identifies libraries by their name; one directory per name."""

    key: ClassVar[str] = "name"

    def to_name(self, descriptor: Mapping[str, Any]) -> str:
        return str(descriptor.get("name", ""))


class ByNameAtVersionStrategy(NamingStrategy):
    """Identifies libraries as ``name@version`` so versions coexist as siblings."""

    key: ClassVar[str] = "name@version"

    def to_name(self, descriptor: Mapping[str, Any]) -> str:
        return f"{descriptor.get('name', '')}@{descriptor.get('version', '')}"


class DirectStrategy(NamingStrategy):
    """Treats the repository root itself as the one library it holds.

    The empty identifier is an alias for whichever library lives at the root.
    """

    key: ClassVar[str] = "direct"

    def to_name(self, descriptor: Mapping[str, Any]) -> str:
        return str(descriptor.get("name", ""))

    def name_to_filesystem(self, name: str) -> str:
        return ""

    def matches_name(self, descriptor: Mapping[str, Any], name: str) -> bool:
        return not name or super().matches_name(descriptor, name)

    def names(self, repository: NamingRepository) -> list[str]:
        """Return the name of the library at the repository root, if any."""

        descriptor_path = repository.descriptor_file_v2("")
        descriptor_stat = repository.file_stat(descriptor_path)
        if descriptor_stat is None or not stat.S_ISREG(descriptor_stat.st_mode):
            return []
        descriptor = repository.read_descriptor_v2("", descriptor_path)
        return [self.to_name(descriptor)]


class FileSystemNamingStrategy:
    """Shared strategy instances, addressable by their configuration key."""

    BY_NAME: Final[NamingStrategy] = ByNameStrategy()
    BY_NAME_AT_VERSION: Final[NamingStrategy] = ByNameAtVersionStrategy()
    DIRECT: Final[NamingStrategy] = DirectStrategy()

    @classmethod
    def from_key(cls, key: str) -> NamingStrategy:
        """Return the strategy registered under ``key``.

        Raises:
            ValueError: If ``key`` does not name a strategy.
        """

        for strategy in (cls.BY_NAME, cls.BY_NAME_AT_VERSION, cls.DIRECT):
            if strategy.key == key:
                return strategy
        raise ValueError(f"unknown naming strategy '{key}'")


__all__ = (
    "ByNameAtVersionStrategy",
    "ByNameStrategy",
    "DirectStrategy",
    "FileSystemNamingStrategy",
    "NamingRepository",
    "NamingStrategy",
)
