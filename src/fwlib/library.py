# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Backend-agnostic library and repository contracts."""

from __future__ import annotations

import io
import shutil
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, BinaryIO, Final, Generic, TypeVar

from .errors import LibraryNotFoundError

LibraryDescriptor = dict[str, Any]
"""Mapping of named descriptor fields (name, version, author, ...)."""

SOURCE_KIND: Final[str] = "source"
HEADER_KIND: Final[str] = "header"
EXAMPLE_KIND: Final[str] = "example"
TEST_KIND: Final[str] = "test"
OTHER_KIND: Final[str] = "other"

PERSISTED_KINDS: Final[frozenset[str]] = frozenset({SOURCE_KIND, HEADER_KIND})


class LibraryFile:
    """Logical file belonging to a library.

    ``name`` is the file's path relative to the library root without its
    extension, ``kind`` classifies the file and ``extension`` excludes the dot.
    """

    def __init__(self, name: str, kind: str, extension: str = "") -> None:
        self.name = name
        self.kind = kind
        self.extension = extension

    @property
    def filename(self) -> str:
        """Return ``name`` joined with ``extension`` when one is present."""

        return f"{self.name}.{self.extension}" if self.extension else self.name

    def content(self, stream: BinaryIO) -> BinaryIO:
        """Stream the file content into ``stream`` and return it.

        The base file has no content, so nothing is written.
        """

        return stream

    def read_bytes(self) -> bytes:
        """Return the full content of the file."""

        buffer = io.BytesIO()
        self.content(buffer)
        return buffer.getvalue()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, kind={self.kind!r}, extension={self.extension!r})"


class MemoryLibraryFile(LibraryFile):
    """Library file whose content is held in memory."""

    def __init__(
        self,
        name: str,
        kind: str,
        extension: str,
        string_content: str | bytes,
        id: object = None,  # noqa: A002 - matches the catalog field name
    ) -> None:
        super().__init__(name, kind, extension)
        self.string_content = string_content
        self.id = id

    def content(self, stream: BinaryIO) -> BinaryIO:
        """Copy the in-memory content into ``stream``.

        Args:
            stream: Binary sink receiving the content.

        Returns:
            BinaryIO: The ``stream`` argument.
        """

        payload = self.string_content
        data = payload.encode("utf-8") if isinstance(payload, str) else payload
        shutil.copyfileobj(io.BytesIO(data), stream)
        return stream


class Library:
    """A library uniquely identified by its name within a repository."""

    def __init__(self, name: str = "") -> None:
        self._name = name

    @property
    def name(self) -> str:
        """Return the library identifier."""

        return self._name

    def definition(self) -> LibraryDescriptor:
        """Return the descriptor for this library.

        Raises:
            LibraryNotFoundError: Always, since the base library has no backing store.
        """

        raise LibraryNotFoundError(None, self._name, "not implemented")

    def files(self) -> list[LibraryFile]:
        """Return the files making up this library."""

        return []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"


class CacheState(Enum):
    """Lifecycle of a lazily populated library field."""

    NOT_LOADED = "not-loaded"
    LOADED = "loaded"
    FAILED = "failed"


ValueT = TypeVar("ValueT")


@dataclass(slots=True)
class CachedField(Generic[ValueT]):
    """Loaded-once holder for a value fetched from a repository.

    A failed load records the error but leaves the value unset so that the
    next access retries.
    """

    state: CacheState = CacheState.NOT_LOADED
    value: ValueT | None = None
    error: BaseException | None = field(default=None, repr=False)

    def get(self, loader: Callable[[], ValueT]) -> ValueT:
        """Return the cached value, invoking ``loader`` on first successful access.

        Args:
            loader: Callable producing the processed value.

        Returns:
            ValueT: Cached or freshly loaded value.
        """

        if self.state is CacheState.LOADED:
            return self.value  # type: ignore[return-value]
        try:
            value = loader()
        except Exception as exc:
            self.state = CacheState.FAILED
            self.error = exc
            raise
        self.state = CacheState.LOADED
        self.value = value
        self.error = None
        return value


class AbstractLibrary(Library):
    """Library delegating retrieval of its descriptor and files to its repository.

    The repository's ``definition(lib)`` and ``files(lib)`` results pass through
    :meth:`process_definition` and :meth:`process_files` and are cached for the
    lifetime of the instance. Callers needing fresh data fetch a new library.
    """

    def __init__(self, name: str, metadata: LibraryDescriptor | None, repo: Any) -> None:
        super().__init__(name)
        self.metadata = metadata
        self.repo = repo
        self._definition: CachedField[LibraryDescriptor] = CachedField()
        self._files: CachedField[list[LibraryFile]] = CachedField()

    def definition(self) -> LibraryDescriptor:
        return self._definition.get(lambda: self.process_definition(self.repo.definition(self)))

    def files(self) -> list[LibraryFile]:
        return self._files.get(lambda: self.process_files(self.repo.files(self)))

    @property
    def definition_state(self) -> CacheState:
        """Return the cache state of the descriptor."""

        return self._definition.state

    @property
    def files_state(self) -> CacheState:
        """Return the cache state of the file list."""

        return self._files.state

    def process_definition(self, definition: LibraryDescriptor) -> LibraryDescriptor:
        """Hook applied once to the descriptor returned by the repository."""

        return definition

    def process_files(self, files: list[LibraryFile]) -> list[LibraryFile]:
        """Hook applied once to the files returned by the repository."""

        return files


class LibraryRepository:
    """A store of uniquely named libraries."""

    def fetch(self, name: str) -> Library:
        """Return the library called ``name``.

        Raises:
            LibraryNotFoundError: When the library does not exist.
        """

        raise LibraryNotFoundError(self, name)

    def names(self) -> list[str]:
        """Return the identifiers of the libraries in this repository."""

        return []


class AbstractLibraryRepository(LibraryRepository):
    """Repository providing the retrieval contract used by :class:`AbstractLibrary`."""

    def definition(self, lib: Library) -> LibraryDescriptor:
        """Return the descriptor of ``lib``; by default only its name."""

        return {"name": lib.name}

    def files(self, lib: Library) -> list[LibraryFile]:
        """Return the files of ``lib``; by default none."""

        return []

    def extract_names(self, libs: Iterable[Any]) -> list[str]:
        """Return the identifier of every entry in ``libs``."""

        return [self.extract_name(lib) for lib in libs]

    def extract_name(self, lib: Any) -> str:
        """Return the identifier of ``lib``."""

        return lib.name


__all__ = (
    "EXAMPLE_KIND",
    "HEADER_KIND",
    "OTHER_KIND",
    "PERSISTED_KINDS",
    "SOURCE_KIND",
    "TEST_KIND",
    "AbstractLibrary",
    "AbstractLibraryRepository",
    "CacheState",
    "CachedField",
    "Library",
    "LibraryDescriptor",
    "LibraryFile",
    "LibraryRepository",
    "MemoryLibraryFile",
)
