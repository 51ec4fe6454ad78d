# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Library repository backed by a directory tree."""

from __future__ import annotations

import logging
import os
import shutil
import stat
from collections.abc import Callable, Mapping
from os import PathLike
from pathlib import Path
from typing import Any, BinaryIO, Final

from . import descriptor as descriptors
from .adapters import add_adapters
from .descriptor import LIBRARY_PROPERTIES, SPARK_DOT_JSON
from .errors import (
    LibraryDescriptorShapeError,
    LibraryFormatError,
    LibraryNotFoundError,
    LibraryRepositoryError,
)
from .filesystem import collect_directory, create_directory, file_stat, mkdir_if_needed
from .library import (
    EXAMPLE_KIND,
    OTHER_KIND,
    PERSISTED_KINDS,
    SOURCE_KIND,
    TEST_KIND,
    AbstractLibrary,
    AbstractLibraryRepository,
    Library,
    LibraryDescriptor,
    LibraryFile,
)
from .migration import LayoutMigrator, migrate_sourcecode
from .naming import FileSystemNamingStrategy, NamingStrategy

LOGGER = logging.getLogger(__name__)

LAYOUT_V1: Final[int] = 1
LAYOUT_V2: Final[int] = 2
SUPPORTED_LAYOUTS: Final[tuple[int, ...]] = (LAYOUT_V1, LAYOUT_V2)

HEADER_EXTENSIONS: Final[frozenset[str]] = frozenset({"h", "hpp", "hxx", "h++"})
SOURCE_EXTENSIONS: Final[frozenset[str]] = HEADER_EXTENSIONS | frozenset({"c", "cc", "cpp", "cxx", "ino"})
DESCRIPTOR_FILES: Final[frozenset[str]] = frozenset({LIBRARY_PROPERTIES, SPARK_DOT_JSON})

_Pathish = str | PathLike[str]


def extension(filename: str) -> tuple[str, str]:
    """Split ``filename`` into ``(extension, base)``.

    Only the final path component is inspected. A trailing dot yields an
    empty extension and a leading dot is part of the base name.

    Args:
        filename: File name, optionally with leading directories.

    Returns:
        tuple[str, str]: Extension without the dot, and the name without it.
    """

    head, tail = os.path.split(filename)
    base, dot, ext = tail.rpartition(".")
    if not dot or not base:
        return "", filename
    return ext, os.path.join(head, base) if head else base


class FileSystemLibraryFile(LibraryFile):
    """Library file stored on disk; content is read when streamed."""

    def __init__(self, path: _Pathish, name: str, kind: str, extension: str = "") -> None:
        super().__init__(name, kind, extension)
        self.path = os.fspath(path)

    def content(self, stream: BinaryIO) -> BinaryIO:
        """Copy the on-disk content into ``stream`` chunk by chunk.

        Args:
            stream: Binary sink receiving the content.

        Returns:
            BinaryIO: The ``stream`` argument.
        """

        with open(self.path, "rb") as handle:
            shutil.copyfileobj(handle, stream)
        return stream


class FileSystemLibraryRepository(AbstractLibraryRepository):
    """Repository of libraries stored beneath a root directory.

    The naming strategy decides how identifiers map onto subdirectories of
    the root. Each library directory holds either a v1 (``spark.json``) or a
    v2 (``library.properties``) layout.
    """

    def __init__(self, path: _Pathish, naming_strategy: NamingStrategy | None = None) -> None:
        """Create a repository rooted at ``path``.

        Args:
            path: Root directory of the repository.
            naming_strategy: Identifier policy; defaults to naming by library name.
        """

        root = os.fspath(path)
        self.path = root if root.endswith(os.sep) else root + os.sep
        self.naming_strategy = naming_strategy or FileSystemNamingStrategy.BY_NAME

    def __str__(self) -> str:
        return self.path

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self.path!r}, naming_strategy={self.naming_strategy!r})"

    # ------------------------------------------------------------------
    # Addressing
    # ------------------------------------------------------------------

    def directory(self, name: str) -> str:
        """Return the directory ``name`` beneath the root, with a trailing separator."""

        return self.path + name + os.sep if name else self.path

    def name_to_fs(self, name: str) -> str:
        """Return the filesystem fragment for the identifier ``name``."""

        return self.naming_strategy.name_to_filesystem(name)

    def library_directory(self, name: str) -> str:
        """Return the directory holding the library ``name``."""

        return self.directory(self.name_to_fs(name))

    def descriptor_file_v1(self, name: str) -> str:
        """Return the path of the legacy ``spark.json`` descriptor."""

        return self.library_directory(name) + SPARK_DOT_JSON

    def descriptor_file_v2(self, name: str) -> str:
        """Return the path of the ``library.properties`` descriptor."""

        return self.library_directory(name) + LIBRARY_PROPERTIES

    def library_file_name(self, name: str, base: str, ext: str = "") -> str:
        """Return the path of file ``base.ext`` inside the library ``name``."""

        filename = f"{base}.{ext}" if ext else base
        return self.library_directory(name) + filename

    # ------------------------------------------------------------------
    # Filesystem helpers
    # ------------------------------------------------------------------

    def file_stat(self, path: _Pathish) -> os.stat_result | None:
        """Return the stat result for ``path``, or ``None`` when it is missing."""

        return file_stat(path)

    def mkdir_if_needed(self, path: _Pathish) -> None:
        """Create the directory ``path`` unless it already exists."""

        mkdir_if_needed(path)

    def create_directory(self, path: _Pathish) -> None:
        """Create the directory ``path`` together with any missing parents."""

        create_directory(path)

    @staticmethod
    def extension(filename: str) -> tuple[str, str]:
        """Split ``filename`` into ``(extension, base)``."""

        return extension(filename)

    def is_source_file_name(self, filename: str) -> bool:
        """Return ``True`` when ``filename`` has a C/C++ source or header extension."""

        return extension(filename)[0] in SOURCE_EXTENSIONS

    def is_header_file(self, filename: str) -> bool:
        """Return ``True`` when ``filename`` has a header extension."""

        return extension(filename)[0] in HEADER_EXTENSIONS

    @staticmethod
    def remove_id(descriptor: Mapping[str, Any]) -> LibraryDescriptor:
        """Return ``descriptor`` without its server-assigned ``id``."""

        return descriptors.remove_id(descriptor)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def get_library_layout(self, name: str) -> int:
        """Return the layout version of the library ``name``.

        Args:
            name: Identifier of the library.

        Returns:
            int: ``1`` when a regular ``spark.json`` exists, otherwise ``2``
            when a regular ``library.properties`` exists.

        Raises:
            LibraryNotFoundError: If the library directory or its descriptor is
                missing. The I/O error is chained as the cause.
            LibraryDescriptorShapeError: If the descriptor path is not a
                regular file.
        """

        directory = self.library_directory(name)
        try:
            directory_stat = os.stat(directory)
        except OSError as exc:
            raise LibraryNotFoundError(self, name) from exc
        if not stat.S_ISDIR(directory_stat.st_mode):
            raise LibraryNotFoundError(self, name)

        v1_stat = self.file_stat(self.descriptor_file_v1(name))
        if v1_stat is not None and stat.S_ISREG(v1_stat.st_mode):
            return LAYOUT_V1

        try:
            v2_stat = os.stat(self.descriptor_file_v2(name))
        except OSError as exc:
            raise LibraryNotFoundError(self, name) from exc
        if stat.S_ISREG(v2_stat.st_mode):
            return LAYOUT_V2
        raise LibraryDescriptorShapeError(self, name, "library descriptor is not a regular file")

    def set_library_layout(self, name: str, layout: int) -> None:
        """Convert the library ``name`` to ``layout``.

        Only the v1 to v2 migration is supported; requesting the current
        layout is a no-op.

        Raises:
            LibraryRepositoryError: If the requested transition is not supported.
        """

        current = self.get_library_layout(name)
        if current == layout:
            return
        if current == LAYOUT_V1 and layout == LAYOUT_V2:
            self.migrate_v2(name)
            return
        raise LibraryRepositoryError(
            self,
            f"cannot migrate library '{name}' from layout {current} to layout {layout}",
        )

    def migrate_v2(self, name: str) -> None:
        """Migrate the v1 library ``name`` to the v2 layout in place."""

        LayoutMigrator(self).migrate_v2(name)

    @staticmethod
    def migrate_sourcecode(source: str, libname: str) -> str:
        """Drop the redundant ``libname/`` prefix from include directives in ``source``."""

        return migrate_sourcecode(source, libname)

    # ------------------------------------------------------------------
    # Descriptors
    # ------------------------------------------------------------------

    def _read_text(self, name: str, path: _Pathish) -> str:
        try:
            return Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise LibraryNotFoundError(self, name) from exc

    def _parse_json(self, text: str) -> LibraryDescriptor:
        return descriptors.parse_descriptor_v1(text)

    def read_file_json(self, name: str, path: _Pathish) -> LibraryDescriptor:
        """Read and parse the JSON document at ``path``.

        Raises:
            LibraryNotFoundError: If the file cannot be read.
            LibraryFormatError: If the content is not a JSON object.
        """

        text = self._read_text(name, path)
        try:
            return self._parse_json(text)
        except ValueError as exc:
            raise LibraryFormatError(self, name, f'error parsing "{os.fspath(path)}"') from exc

    def read_descriptor_v1(self, name: str, path: _Pathish) -> LibraryDescriptor:
        """Read the legacy ``spark.json`` descriptor at ``path``."""

        return self.read_file_json(name, path)

    def read_descriptor_v2(self, name: str, path: _Pathish) -> LibraryDescriptor:
        """Read the ``library.properties`` descriptor at ``path`` for ``name``.

        Raises:
            LibraryNotFoundError: If the file cannot be read.
            LibraryFormatError: If the descriptor does not match ``name``.
        """

        descriptor = descriptors.parse_descriptor_v2(self._read_text(name, path))
        if not self.naming_strategy.matches_name(descriptor, name):
            raise LibraryFormatError(self, name, "name in descriptor does not match directory name")
        return descriptor

    @staticmethod
    def prepare_descriptor_v2(descriptor: Mapping[str, Any]) -> LibraryDescriptor:
        """Return ``descriptor`` with ``sentence`` defaulted from ``description``."""

        return descriptors.prepare_descriptor_v2(descriptor)

    @staticmethod
    def build_v2_descriptor(descriptor: Mapping[str, Any], with_comments: bool = False) -> str:
        """Return ``library.properties`` content for ``descriptor``."""

        return descriptors.build_v2_descriptor(descriptor, with_comments)

    def write_descriptor_v1(self, name: str, descriptor: Mapping[str, Any]) -> None:
        """Write ``descriptor`` to the library's ``spark.json``."""

        Path(self.descriptor_file_v1(name)).write_text(descriptors.build_v1_descriptor(descriptor), encoding="utf-8")

    def write_descriptor_v2(self, name: str, descriptor: Mapping[str, Any], with_comments: bool = False) -> None:
        """Write ``descriptor`` to the library's ``library.properties``."""

        content = descriptors.build_v2_descriptor(descriptor, with_comments)
        Path(self.descriptor_file_v2(name)).write_text(content, encoding="utf-8")

    # ------------------------------------------------------------------
    # Repository contract
    # ------------------------------------------------------------------

    def names(self) -> list[str]:
        """Return the identifiers of the libraries available in this repository."""

        return self.naming_strategy.names(self)

    def fetch(self, name: str) -> AbstractLibrary:
        """Return the library addressed by ``name``.

        The returned library is named by the identifier derived from its
        descriptor, so aliases resolve to the canonical name.

        Raises:
            LibraryNotFoundError: If the descriptor is missing or invalid.
        """

        try:
            descriptor = self.read_descriptor_v2(name, self.descriptor_file_v2(name))
        except (LibraryRepositoryError, OSError, ValueError) as exc:
            raise LibraryNotFoundError(self, name) from exc
        canonical = self.naming_strategy.to_name(descriptor)
        LOGGER.debug("fetched library %s as %s from %s", name or "<root>", canonical, self.path)
        return AbstractLibrary(canonical, descriptor, self)

    def definition(self, lib: Library) -> LibraryDescriptor:
        """Return the descriptor captured when ``lib`` was fetched."""

        metadata = getattr(lib, "metadata", None)
        if metadata is None:
            return self.read_descriptor_v2(lib.name, self.descriptor_file_v2(lib.name))
        return dict(metadata)

    def files(self, lib: Library) -> list[LibraryFile]:
        """Return the files of ``lib``, excluding its descriptor, sorted by relative path.

        Raises:
            LibraryNotFoundError: If the library directory cannot be listed.
        """

        root = Path(self.library_directory(lib.name))
        try:
            paths = collect_directory(root, _regular_non_descriptor(root), recursive=True)
        except OSError as exc:
            raise LibraryNotFoundError(self, lib.name) from exc
        paths.sort(key=lambda path: path.relative_to(root).as_posix())
        return [self._library_file(root, path) for path in paths]

    def _library_file(self, root: Path, path: Path) -> FileSystemLibraryFile:
        relative = path.relative_to(root).as_posix()
        ext, base = extension(relative)
        return FileSystemLibraryFile(path, base, self._classify(relative, ext), ext)

    @staticmethod
    def _classify(relative: str, ext: str) -> str:
        directories = relative.split("/")[:-1]
        if "examples" in directories:
            return EXAMPLE_KIND
        if "test" in directories:
            return TEST_KIND
        if ext in SOURCE_EXTENSIONS:
            return SOURCE_KIND
        return OTHER_KIND

    def add(self, library: Library, layout: int = LAYOUT_V2) -> None:
        """Write ``library`` into this repository.

        The descriptor is written in the requested layout and every file of
        kind ``source`` or ``header`` is materialised beneath the library
        directory. Files of other kinds are skipped.

        Args:
            library: Library to copy, typically fetched from another repository.
            layout: Descriptor layout to write, ``1`` or ``2``.

        Raises:
            LibraryRepositoryError: If the repository cannot hold new libraries,
                the layout is unsupported or writing fails.
        """

        metadata = getattr(library, "metadata", None)
        name = self.naming_strategy.to_name(metadata) if metadata else library.name
        if not self.name_to_fs(name):
            raise LibraryRepositoryError(self, f"repository '{self.path}' is not writable")
        if layout not in SUPPORTED_LAYOUTS:
            raise LibraryRepositoryError(self, f"unsupported library layout {layout}")

        try:
            self.create_directory(self.library_directory(name))
            definition = library.definition()
            if layout == LAYOUT_V1:
                self.write_descriptor_v1(name, definition)
            else:
                self.write_descriptor_v2(name, definition)
            for library_file in library.files():
                if library_file.kind in PERSISTED_KINDS:
                    self._write_library_file(name, library_file)
        except OSError as exc:
            raise LibraryRepositoryError(self, f"unable to add library '{name}'") from exc
        LOGGER.debug("added library %s to %s using layout %d", name, self.path, layout)

    def _write_library_file(self, name: str, library_file: LibraryFile) -> None:
        destination = self.library_file_name(name, library_file.name, library_file.extension)
        self.create_directory(os.path.dirname(destination))
        with open(destination, "wb") as handle:
            library_file.content(handle)

    def add_adapters(
        self,
        name: str,
        target_dir: _Pathish,
        callback: Callable[[Path], None] | None = None,
    ) -> list[Path]:
        """Write include adapters for the v2 library ``name`` into ``target_dir``.

        See :func:`fwlib.adapters.add_adapters`.
        """

        return add_adapters(self, name, target_dir, callback)


def _regular_non_descriptor(root: Path) -> Callable[[Path, os.stat_result], Path | None]:
    def classify(entry: Path, entry_stat: os.stat_result) -> Path | None:
        if not stat.S_ISREG(entry_stat.st_mode):
            return None
        if entry.parent == root and entry.name in DESCRIPTOR_FILES:
            return None
        return entry

    return classify


__all__ = (
    "DESCRIPTOR_FILES",
    "HEADER_EXTENSIONS",
    "LAYOUT_V1",
    "LAYOUT_V2",
    "SOURCE_EXTENSIONS",
    "FileSystemLibraryFile",
    "FileSystemLibraryRepository",
    "extension",
)
