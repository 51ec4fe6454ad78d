# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the filesystem library repository."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from fwlib.errors import (
    LibraryDescriptorShapeError,
    LibraryFormatError,
    LibraryNotFoundError,
    LibraryRepositoryError,
)
from fwlib.library import EXAMPLE_KIND, OTHER_KIND, SOURCE_KIND, TEST_KIND, Library
from fwlib.naming import FileSystemNamingStrategy
from fwlib.repository import FileSystemLibraryRepository, extension

LIBRARY = "uber-library-example"


def test_path_always_has_trailing_separator(tmp_path: Path) -> None:
    repo = FileSystemLibraryRepository(tmp_path)

    assert repo.path == str(tmp_path) + os.sep
    assert str(repo) == repo.path
    assert repo.library_directory("mylib") == repo.path + "mylib" + os.sep
    assert repo.descriptor_file_v2("mylib") == repo.path + "mylib" + os.sep + "library.properties"
    assert repo.library_file_name("mylib", "src/main", "cpp") == repo.path + "mylib" + os.sep + "src/main.cpp"


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("main.cpp", ("cpp", "main")),
        ("src/main.cpp", ("cpp", "src/main")),
        ("archive.tar.gz", ("gz", "archive.tar")),
        ("Makefile", ("", "Makefile")),
        (".gitignore", ("", ".gitignore")),
        ("trailing.", ("", "trailing")),
    ],
)
def test_extension(filename: str, expected: tuple[str, str]) -> None:
    assert extension(filename) == expected


def test_source_and_header_detection(tmp_path: Path) -> None:
    repo = FileSystemLibraryRepository(tmp_path)

    assert repo.is_source_file_name("main.cpp")
    assert repo.is_source_file_name("sketch.ino")
    assert repo.is_source_file_name("lib.h")
    assert not repo.is_source_file_name("README.md")
    assert repo.is_header_file("lib.hpp")
    assert not repo.is_header_file("lib.cpp")


def test_layout_v1_for_spark_json(v1_repo: FileSystemLibraryRepository) -> None:
    assert v1_repo.get_library_layout(LIBRARY) == 1


def test_layout_v2_for_library_properties(v2_repo: FileSystemLibraryRepository) -> None:
    assert v2_repo.get_library_layout(LIBRARY) == 2


def test_layout_prefers_spark_json_when_both_descriptors_exist(v2_repo: FileSystemLibraryRepository) -> None:
    library_dir = Path(v2_repo.library_directory(LIBRARY))
    (library_dir / "spark.json").write_text('{"name": "uber-library-example"}\n', encoding="utf-8")

    assert v2_repo.get_library_layout(LIBRARY) == 1



def test_layout_of_missing_library(tmp_path: Path) -> None:
    repo = FileSystemLibraryRepository(tmp_path)

    with pytest.raises(LibraryNotFoundError) as excinfo:
        repo.get_library_layout("missing")
    assert isinstance(excinfo.value.cause, FileNotFoundError)


def test_layout_of_file_instead_of_directory(tmp_path: Path) -> None:
    (tmp_path / "mylib").write_text("", encoding="utf-8")

    with pytest.raises(LibraryNotFoundError):
        FileSystemLibraryRepository(tmp_path).get_library_layout("mylib")


def test_layout_without_descriptor(tmp_path: Path) -> None:
    (tmp_path / "mylib").mkdir()

    with pytest.raises(LibraryNotFoundError):
        FileSystemLibraryRepository(tmp_path).get_library_layout("mylib")


def test_layout_with_descriptor_directory(tmp_path: Path) -> None:
    (tmp_path / "mylib" / "library.properties").mkdir(parents=True)

    with pytest.raises(LibraryDescriptorShapeError) as excinfo:
        FileSystemLibraryRepository(tmp_path).get_library_layout("mylib")
    assert isinstance(excinfo.value, LibraryFormatError)
    assert isinstance(excinfo.value, LibraryNotFoundError)


def test_names_lists_v2_libraries_only(tmp_path: Path, fixtures_root: Path) -> None:
    repo = FileSystemLibraryRepository(fixtures_root)

    names = repo.names()

    assert "library-v2" in names
    assert "library-v1" not in names
    assert names == sorted(names)


def test_fetch_returns_library_with_descriptor(v2_repo: FileSystemLibraryRepository) -> None:
    library = v2_repo.fetch(LIBRARY)

    assert library.name == LIBRARY
    definition = library.definition()
    assert definition["version"] == "1.0.0"
    assert definition["sentence"] == "An example library"
    assert definition["description"] == "An example library"


def test_fetch_missing_library(tmp_path: Path) -> None:
    with pytest.raises(LibraryNotFoundError) as excinfo:
        FileSystemLibraryRepository(tmp_path).fetch("missing")
    assert excinfo.value.cause is not None


def test_fetch_v1_library_is_not_found(v1_repo: FileSystemLibraryRepository) -> None:
    with pytest.raises(LibraryNotFoundError):
        v1_repo.fetch(LIBRARY)


def test_fetch_rejects_mismatched_descriptor_name(tmp_path: Path) -> None:
    (tmp_path / "mylib").mkdir()
    (tmp_path / "mylib" / "library.properties").write_text("name=otherlib\n", encoding="utf-8")

    with pytest.raises(LibraryNotFoundError) as excinfo:
        FileSystemLibraryRepository(tmp_path).fetch("mylib")
    assert isinstance(excinfo.value.cause, LibraryFormatError)
    assert "does not match directory name" in str(excinfo.value.cause)


def test_fetch_by_name_at_version(tmp_path: Path) -> None:
    (tmp_path / "mylib@1.0.0").mkdir()
    (tmp_path / "mylib@1.0.0" / "library.properties").write_text("name=mylib\nversion=1.0.0\n", encoding="utf-8")
    repo = FileSystemLibraryRepository(tmp_path, FileSystemNamingStrategy.BY_NAME_AT_VERSION)

    assert repo.names() == ["mylib@1.0.0"]
    assert repo.fetch("mylib@1.0.0").name == "mylib@1.0.0"


def test_direct_repository_resolves_alias(copy_library) -> None:
    library_dir = copy_library("library-v2")
    repo = FileSystemLibraryRepository(library_dir, FileSystemNamingStrategy.DIRECT)

    assert repo.get_library_layout("") == 2
    assert repo.fetch("").name == LIBRARY
    assert repo.fetch(LIBRARY).name == LIBRARY
    with pytest.raises(LibraryNotFoundError):
        repo.fetch("other")


def test_files_classifies_library_content(v2_repo: FileSystemLibraryRepository) -> None:
    library_dir = Path(v2_repo.library_directory(LIBRARY))
    (library_dir / "README.md").write_text("# readme\n", encoding="utf-8")

    files = {library_file.filename: library_file.kind for library_file in v2_repo.fetch(LIBRARY).files()}

    assert files == {
        "README.md": OTHER_KIND,
        "examples/blink-an-led/blink-an-led.cpp": EXAMPLE_KIND,
        "src/uber-library-example.cpp": SOURCE_KIND,
        "src/uber-library-example.h": SOURCE_KIND,
        "test/unit/test.cpp": TEST_KIND,
    }


def test_files_stream_disk_content(v2_repo: FileSystemLibraryRepository) -> None:
    library_dir = Path(v2_repo.library_directory(LIBRARY))
    header = next(item for item in v2_repo.fetch(LIBRARY).files() if item.extension == "h")

    assert header.read_bytes() == (library_dir / "src" / "uber-library-example.h").read_bytes()


def test_files_are_sorted_by_relative_path(tmp_path: Path) -> None:
    library_dir = tmp_path / "mylib"
    (library_dir / "a").mkdir(parents=True)
    (library_dir / "library.properties").write_text("name=mylib\n", encoding="utf-8")
    (library_dir / "a" / "x.h").write_text("", encoding="utf-8")
    (library_dir / "a-b.h").write_text("", encoding="utf-8")
    (library_dir / "b.h").write_text("", encoding="utf-8")
    repo = FileSystemLibraryRepository(tmp_path)

    names = [item.filename for item in repo.fetch("mylib").files()]

    assert names == ["a-b.h", "a/x.h", "b.h"]


def test_add_writes_descriptor_and_sources(tmp_path: Path, memory_library: Library) -> None:
    repo = FileSystemLibraryRepository(tmp_path)

    repo.add(memory_library)

    library_dir = tmp_path / "mylib"
    assert (library_dir / "library.properties").read_text(encoding="utf-8") == (
        "name=mylib\nversion=1.2.3\nlicense=MIT\nauthor=Jane Doe\nsentence=A test library\n"
    )
    assert (library_dir / "src" / "mylib.cpp").read_text(encoding="utf-8") == '#include "mylib.h"\n'
    assert (library_dir / "src" / "mylib.h").read_text(encoding="utf-8") == "#pragma once\n"
    assert not (library_dir / "README.md").exists()
    assert repo.names() == ["mylib"]
    assert repo.fetch("mylib").definition()["version"] == "1.2.3"


def test_add_then_fetch_returns_added_descriptor_without_id(tmp_path: Path, memory_library) -> None:
    added = dict(memory_library.metadata)
    memory_library.metadata["id"] = "5f1e2d3c"
    repo = FileSystemLibraryRepository(tmp_path)

    repo.add(memory_library)

    assert repo.fetch("mylib").definition() == {**added, "description": added["sentence"]}


def test_add_layout_v1_then_read_returns_added_descriptor_without_id(tmp_path: Path, memory_library) -> None:
    added = dict(memory_library.metadata)
    memory_library.metadata["id"] = "5f1e2d3c"
    repo = FileSystemLibraryRepository(tmp_path)

    repo.add(memory_library, layout=1)

    assert repo.read_descriptor_v1("mylib", repo.descriptor_file_v1("mylib")) == added


def test_add_layout_v1_writes_spark_json(tmp_path: Path, memory_library: Library) -> None:
    repo = FileSystemLibraryRepository(tmp_path)

    repo.add(memory_library, layout=1)

    descriptor = json.loads((tmp_path / "mylib" / "spark.json").read_text(encoding="utf-8"))
    assert descriptor["name"] == "mylib"
    assert repo.get_library_layout("mylib") == 1


def test_add_then_fetch_round_trips_sources(v2_repo: FileSystemLibraryRepository, tmp_path: Path) -> None:
    target = FileSystemLibraryRepository(tmp_path / "copy")
    os.mkdir(target.path)

    target.add(v2_repo.fetch(LIBRARY))

    copied = {item.filename: item.read_bytes() for item in target.fetch(LIBRARY).files()}
    original = {
        item.filename: item.read_bytes() for item in v2_repo.fetch(LIBRARY).files() if item.kind == SOURCE_KIND
    }
    assert copied == original


def test_add_rejects_unsupported_layout(tmp_path: Path, memory_library: Library) -> None:
    with pytest.raises(LibraryRepositoryError, match="unsupported library layout"):
        FileSystemLibraryRepository(tmp_path).add(memory_library, layout=3)


@pytest.mark.parametrize("name", ["mylib", ""])
def test_add_to_direct_repository_always_fails(tmp_path: Path, name: str) -> None:
    repo = FileSystemLibraryRepository(tmp_path, FileSystemNamingStrategy.DIRECT)

    with pytest.raises(LibraryRepositoryError, match="is not writable"):
        repo.add(Library(name))
    assert os.listdir(tmp_path) == []


def test_set_library_layout_same_layout_is_noop(v2_repo: FileSystemLibraryRepository) -> None:
    v2_repo.set_library_layout(LIBRARY, 2)

    assert v2_repo.get_library_layout(LIBRARY) == 2


def test_set_library_layout_rejects_downgrade(v2_repo: FileSystemLibraryRepository) -> None:
    with pytest.raises(LibraryRepositoryError, match="cannot migrate"):
        v2_repo.set_library_layout(LIBRARY, 1)
