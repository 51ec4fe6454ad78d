# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
from collections.abc import Callable
from pathlib import Path

import pytest

from fwlib.library import Library, MemoryLibraryFile, SOURCE_KIND
from fwlib.naming import FileSystemNamingStrategy
from fwlib.repository import FileSystemLibraryRepository

LIBRARY_NAME = "uber-library-example"

CopyLibrary = Callable[[str], Path]


@pytest.fixture
def fixtures_root() -> Path:
    """Return the directory holding the on-disk fixture libraries."""
    return Path(__file__).resolve().parent / "fixtures" / "libraries"


@pytest.fixture
def copy_library(tmp_path: Path, fixtures_root: Path) -> CopyLibrary:
    """Return a helper copying a fixture library to ``tmp_path/repo/<library name>``."""

    def _copy(fixture: str) -> Path:
        destination = tmp_path / "repo" / LIBRARY_NAME
        shutil.copytree(fixtures_root / fixture, destination)
        return destination

    return _copy


@pytest.fixture
def v2_repo(copy_library: CopyLibrary) -> FileSystemLibraryRepository:
    """Return a by-name repository holding the v2 fixture library."""
    library_dir = copy_library("library-v2")
    return FileSystemLibraryRepository(library_dir.parent, FileSystemNamingStrategy.BY_NAME)


@pytest.fixture
def v1_repo(copy_library: CopyLibrary) -> FileSystemLibraryRepository:
    """Return a by-name repository holding the v1 fixture library."""
    library_dir = copy_library("library-v1")
    return FileSystemLibraryRepository(library_dir.parent, FileSystemNamingStrategy.BY_NAME)


class StaticLibrary(Library):
    """In-memory library used as the source of ``add`` operations."""

    def __init__(self, descriptor: dict[str, object], files: list[MemoryLibraryFile]) -> None:
        super().__init__(str(descriptor.get("name", "")))
        self.metadata = descriptor
        self._files = files

    def definition(self) -> dict[str, object]:
        return dict(self.metadata)

    def files(self) -> list[MemoryLibraryFile]:
        return list(self._files)


@pytest.fixture
def memory_library() -> StaticLibrary:
    """Return a small library held entirely in memory."""
    return StaticLibrary(
        {"name": "mylib", "version": "1.2.3", "author": "Jane Doe", "license": "MIT", "sentence": "A test library"},
        [
            MemoryLibraryFile("src/mylib", SOURCE_KIND, "cpp", '#include "mylib.h"\n'),
            MemoryLibraryFile("src/mylib", SOURCE_KIND, "h", "#pragma once\n"),
            MemoryLibraryFile("README", "other", "md", "# mylib\n"),
        ],
    )
