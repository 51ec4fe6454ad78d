# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Map a library example and its library onto a standalone project namespace."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass, field
from os import PathLike
from typing import Final

from .descriptor import LIBRARY_PROPERTIES
from .errors import LibraryRepositoryError
from .filesystem import absolute_path, collect_directory, regular_files, relative_path
from .naming import FileSystemNamingStrategy
from .repository import LAYOUT_V2, FileSystemLibraryRepository

EXAMPLES_DIRECTORY: Final[str] = "examples"
PROJECT_PROPERTIES: Final[str] = "project.properties"
PROJECT_SOURCES: Final[str] = "src"
LIBRARY_SOURCES: Final[str] = "src"
LIBRARY_DEPENDENCIES: Final[str] = "lib"

_Pathish = str | PathLike[str]


@dataclass(slots=True)
class FileMapping:
    """Destination-to-source file map for a synthesised build namespace.

    Keys of ``map`` are paths in the build namespace; values are source paths
    relative to ``base_path``.
    """

    base_path: str = ""
    map: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class LibraryExample:
    """An example located inside a v2 library.

    Attributes:
        base_path: Absolute directory the other paths are relative to.
        library_path: Library root relative to ``base_path`` (``""`` when equal).
        example: Example file, or example directory ending with a separator,
            relative to ``base_path``.
    """

    base_path: str
    library_path: str
    example: str

    def build_files(self, files: FileMapping | None = None) -> FileMapping:
        """Populate ``files`` with the project layout for this example.

        The example becomes the project's ``src/``, ``library.properties``
        becomes ``project.properties`` and the library's ``src/`` and ``lib/``
        keep their names when present.

        Args:
            files: Mapping to populate; a new one is created when omitted.

        Returns:
            FileMapping: The populated mapping.

        Raises:
            FileNotFoundError: If the example or ``library.properties`` is missing.
        """

        target = files if files is not None else FileMapping()
        target.base_path = self.base_path
        self._map(target, self.example, PROJECT_SOURCES, mandatory=True)
        self._map(target, os.path.join(self.library_path, LIBRARY_PROPERTIES), PROJECT_PROPERTIES, mandatory=True)
        self._map(target, os.path.join(self.library_path, LIBRARY_SOURCES), LIBRARY_SOURCES, mandatory=False)
        self._map(target, os.path.join(self.library_path, LIBRARY_DEPENDENCIES), LIBRARY_DEPENDENCIES, mandatory=False)
        return target

    def _map(self, target: FileMapping, source: str, destination: str, *, mandatory: bool) -> None:
        """Add ``source`` to ``target`` under ``destination``.

        A directory source is expanded file by file beneath ``destination``. A
        single file destined for ``src`` keeps its file name inside it.
        """

        absolute = absolute_path(source, cwd=self.base_path)
        try:
            source_stat = os.stat(absolute)
        except FileNotFoundError:
            if mandatory:
                raise
            return
        if stat.S_ISDIR(source_stat.st_mode):
            for path in collect_directory(absolute, regular_files, recursive=True):
                relative = relative_path(absolute, path)
                target.map[os.path.join(destination, relative)] = os.path.normpath(os.path.join(source, relative))
            return
        if destination == PROJECT_SOURCES:
            destination = os.path.join(destination, os.path.basename(absolute))
        target.map[destination] = os.path.normpath(source)


def is_library_example(path: _Pathish, cwd: _Pathish | None = None) -> LibraryExample | None:
    """Return the example at ``path`` when it lies inside a v2 library.

    An example is a directory directly under a library's ``examples/``
    directory, or a file inside such a directory.

    Args:
        path: Example file or directory, absolute or relative to ``cwd``.
        cwd: Base directory; defaults to the current working directory.

    Returns:
        LibraryExample | None: The example mapping, or ``None`` when ``path``
        is not an example of a v2 library.

    Raises:
        OSError: If ``path`` does not exist.
    """

    base_path = absolute_path(cwd if cwd is not None else os.getcwd())
    absolute = absolute_path(os.fspath(path), cwd=base_path)
    is_dir = stat.S_ISDIR(os.stat(absolute).st_mode)

    example_dir = absolute if is_dir else os.path.dirname(absolute)
    examples_dir = os.path.dirname(example_dir)
    if os.path.basename(examples_dir) != EXAMPLES_DIRECTORY:
        return None
    library_dir = os.path.dirname(examples_dir)

    repo = FileSystemLibraryRepository(library_dir, FileSystemNamingStrategy.DIRECT)
    try:
        layout = repo.get_library_layout("")
    except LibraryRepositoryError:
        return None
    if layout != LAYOUT_V2:
        return None

    example = relative_path(base_path, absolute)
    if is_dir and not example.endswith(os.sep):
        example += os.sep
    return LibraryExample(
        base_path=base_path,
        library_path=relative_path(base_path, library_dir),
        example=example,
    )


__all__ = (
    "FileMapping",
    "LibraryExample",
    "is_library_example",
)
