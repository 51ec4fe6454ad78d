# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Adapter headers letting v1-style ``#include "lib/header.h"`` resolve in v2 libraries."""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Callable
from os import PathLike
from pathlib import Path
from typing import TYPE_CHECKING, Final

from .errors import LibraryFormatError, LibraryRepositoryError
from .filesystem import collect_directory, create_directory, is_directory

if TYPE_CHECKING:
    from .repository import FileSystemLibraryRepository

LOGGER = logging.getLogger(__name__)

ADAPTER_HEADER_EXTENSIONS: Final[frozenset[str]] = frozenset({".h", ".hpp", ".hxx", ".h++"})

_Pathish = str | PathLike[str]
AdapterCallback = Callable[[Path], None]


def require_v2_format(repo: FileSystemLibraryRepository, name: str) -> LibraryFormatError:
    """Return the error raised when adapters are requested for a non-v2 library."""

    return LibraryFormatError(repo, name, f"library '{name}' must be migrated to v2 format")


def target_directory_does_not_exist(repo: FileSystemLibraryRepository, target_dir: _Pathish) -> LibraryRepositoryError:
    """Return the error raised when the adapter target directory is missing."""

    return LibraryRepositoryError(repo, f"target directory '{os.fspath(target_dir)}' does not exist")


def add_adapters(
    repo: FileSystemLibraryRepository,
    name: str,
    target_dir: _Pathish,
    callback: AdapterCallback | None = None,
) -> list[Path]:
    """Write adapter headers for the library ``name`` into ``target_dir``.

    ``target_dir`` is a v2 library root. For every header below its ``src/``
    directory an adapter is written to ``src/<library name>/`` that includes
    the real header by relative path.

    Args:
        repo: Repository holding the library.
        name: Identifier of the library.
        target_dir: Library root receiving the adapters.
        callback: Optional callable invoked with each adapter path written.

    Returns:
        list[Path]: Adapter files written, in traversal order.

    Raises:
        LibraryFormatError: If the library is not in the v2 layout.
        LibraryRepositoryError: If ``target_dir`` is not a directory.
    """

    if repo.get_library_layout(name) != 2:
        raise require_v2_format(repo, name)
    if not is_directory(target_dir):
        raise target_directory_does_not_exist(repo, target_dir)
    library = repo.fetch(name)
    sources = Path(target_dir) / "src"
    return write_adapters(sources / library.name, sources, callback)


def _is_header(entry: Path, entry_stat: os.stat_result) -> Path | None:
    if stat.S_ISREG(entry_stat.st_mode) and entry.suffix in ADAPTER_HEADER_EXTENSIONS:
        return entry
    return None


def write_adapters(adapter_dir: Path, source_dir: Path, callback: AdapterCallback | None = None) -> list[Path]:
    """Mirror every header under ``source_dir`` into ``adapter_dir`` as an include shim.

    ``adapter_dir`` itself is not traversed, so existing adapters are never
    adapted again.

    Args:
        adapter_dir: Directory receiving the adapter headers.
        source_dir: Directory holding the real headers.
        callback: Optional callable invoked with each adapter path written.

    Returns:
        list[Path]: Adapter files written.
    """

    adapter_root = adapter_dir.absolute()
    headers = collect_directory(
        source_dir,
        _is_header,
        recursive=True,
        prune=lambda entry: entry.absolute() == adapter_root,
    )
    written: list[Path] = []
    for header in headers:
        adapter = adapter_dir / header.relative_to(source_dir)
        create_directory(adapter.parent)
        include = Path(os.path.relpath(header, adapter.parent)).as_posix()
        adapter.write_text(f'#include "{include}"\n', encoding="utf-8")
        LOGGER.debug("wrote adapter %s for %s", adapter, header)
        written.append(adapter)
        if callback is not None:
            callback(adapter)
    return written


__all__ = (
    "ADAPTER_HEADER_EXTENSIONS",
    "add_adapters",
    "require_v2_format",
    "target_directory_does_not_exist",
    "write_adapters",
)
