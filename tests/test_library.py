# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the library contract and its loaded-once caching."""

from __future__ import annotations

import io

import pytest

from fwlib.errors import LibraryNotFoundError
from fwlib.library import (
    AbstractLibrary,
    AbstractLibraryRepository,
    CachedField,
    CacheState,
    Library,
    LibraryFile,
    LibraryRepository,
    MemoryLibraryFile,
)


class CountingRepository(AbstractLibraryRepository):
    def __init__(self, failures: int = 0) -> None:
        self.definition_calls = 0
        self.files_calls = 0
        self.failures = failures

    def definition(self, lib: Library) -> dict[str, object]:
        self.definition_calls += 1
        if self.failures:
            self.failures -= 1
            raise LibraryNotFoundError(self, lib.name)
        return {"name": lib.name, "version": "1.0.0"}

    def files(self, lib: Library) -> list[LibraryFile]:
        self.files_calls += 1
        return [LibraryFile("src/main", "source", "cpp")]


def test_base_library_definition_is_not_implemented() -> None:
    library = Library("mylib")

    with pytest.raises(LibraryNotFoundError, match="not implemented"):
        library.definition()
    assert library.files() == []


def test_base_repository_contract() -> None:
    repo = LibraryRepository()

    with pytest.raises(LibraryNotFoundError):
        repo.fetch("mylib")
    assert repo.names() == []


def test_abstract_repository_defaults() -> None:
    repo = AbstractLibraryRepository()
    library = Library("mylib")

    assert repo.definition(library) == {"name": "mylib"}
    assert repo.files(library) == []
    assert repo.extract_names([Library("a"), Library("b")]) == ["a", "b"]


def test_definition_is_loaded_once() -> None:
    repo = CountingRepository()
    library = AbstractLibrary("mylib", None, repo)
    assert library.definition_state is CacheState.NOT_LOADED

    first = library.definition()
    second = library.definition()

    assert first is second
    assert repo.definition_calls == 1
    assert library.definition_state is CacheState.LOADED


def test_files_are_loaded_once() -> None:
    repo = CountingRepository()
    library = AbstractLibrary("mylib", None, repo)

    assert library.files() is library.files()
    assert repo.files_calls == 1
    assert library.files_state is CacheState.LOADED


def test_failed_load_is_retried() -> None:
    repo = CountingRepository(failures=1)
    library = AbstractLibrary("mylib", None, repo)

    with pytest.raises(LibraryNotFoundError):
        library.definition()
    assert library.definition_state is CacheState.FAILED

    assert library.definition()["version"] == "1.0.0"
    assert repo.definition_calls == 2
    assert library.definition_state is CacheState.LOADED


def test_process_hooks_apply_once() -> None:
    class UpperLibrary(AbstractLibrary):
        calls = 0

        def process_definition(self, definition: dict[str, object]) -> dict[str, object]:
            UpperLibrary.calls += 1
            return {key: str(value).upper() for key, value in definition.items()}

    library = UpperLibrary("mylib", None, CountingRepository())

    assert library.definition()["name"] == "MYLIB"
    library.definition()
    assert UpperLibrary.calls == 1


def test_cached_field_keeps_error_until_success() -> None:
    cached: CachedField[int] = CachedField()

    with pytest.raises(ValueError):
        cached.get(lambda: int("x"))
    assert isinstance(cached.error, ValueError)

    assert cached.get(lambda: 3) == 3
    assert cached.error is None
    assert cached.get(lambda: 4) == 3


def test_library_file_filename() -> None:
    assert LibraryFile("src/main", "source", "cpp").filename == "src/main.cpp"
    assert LibraryFile("LICENSE", "other").filename == "LICENSE"


def test_base_library_file_has_no_content() -> None:
    assert LibraryFile("src/main", "source", "cpp").read_bytes() == b""


def test_memory_library_file_streams_text_and_bytes() -> None:
    text_file = MemoryLibraryFile("src/main", "source", "cpp", "int main() {}\n", id=7)
    bytes_file = MemoryLibraryFile("data", "other", "bin", b"\x00\xff")

    stream = io.BytesIO()
    assert text_file.content(stream) is stream
    assert stream.getvalue() == b"int main() {}\n"
    assert bytes_file.read_bytes() == b"\x00\xff"
    assert text_file.id == 7
