# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Conversion of legacy (v1) library directories to the v2 layout."""

from __future__ import annotations

import logging
import os
import re
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Final

from .descriptor import remove_id
from .errors import LibraryRepositoryError
from .filesystem import collect_directory, create_directory, is_directory, regular_files
from .library import LibraryDescriptor

if TYPE_CHECKING:
    from .repository import FileSystemLibraryRepository

LOGGER = logging.getLogger(__name__)

FIRMWARE_DIR: Final[str] = "firmware"
EXAMPLES_DIR: Final[str] = "examples"
SOURCES_DIR: Final[str] = "src"
TEST_DIR: Final[str] = "test"
UNIT_TEST_DIR: Final[str] = "unit"

_SOURCE_ENCODING: Final[str] = "utf-8"
_SOURCE_ERRORS: Final[str] = "surrogateescape"


def migrate_sourcecode(source: str, libname: str) -> str:
    """Remove the leading ``libname`` segment from include directives.

    ``#include "libname/rest"`` and ``#include 'libname\\rest'`` both become
    an include of ``rest`` with the original quote character. Includes of
    other libraries are left untouched.

    Args:
        source: Source text to rewrite.
        libname: Library include name, matched literally.

    Returns:
        str: The rewritten source.
    """

    pattern = re.compile(r"(#include\s*[\"'])" + re.escape(libname) + r"[\\/]")
    return pattern.sub(r"\1", source)


class LayoutMigrator:
    """Restructure a v1 library directory into the v2 layout.

    The steps run in sequence and are not transactional: a failure leaves the
    steps completed so far in place. Writing the descriptor, moving tests and
    rewriting sources can be re-run against the same v1 content.
    """

    def __init__(self, repo: FileSystemLibraryRepository) -> None:
        self.repo = repo

    def migrate_v2(self, name: str) -> None:
        """Migrate the library ``name`` from layout 1 to layout 2.

        Args:
            name: Identifier of the library within the repository.

        Raises:
            LibraryRepositoryError: If any step fails; the underlying error is
                chained as the cause.
        """

        repo = self.repo
        library_dir = Path(repo.library_directory(name))
        v1_file = repo.descriptor_file_v1(name)
        v1_descriptor = repo.read_descriptor_v1(name, v1_file)
        include_name = str(v1_descriptor.get("name") or name)

        try:
            repo.write_descriptor_v2(name, self.v2_descriptor(v1_descriptor), with_comments=True)
            self.migrate_tests(library_dir)
            self.migrate_sources(library_dir, include_name)
            self.migrate_examples(library_dir, include_name)
            self.remove_v1(library_dir, Path(v1_file))
        except OSError as exc:
            raise LibraryRepositoryError(repo, f"migration of library '{name}' to layout 2 failed") from exc
        LOGGER.debug("migrated library %s in %s to layout 2", include_name, library_dir)

    @staticmethod
    def v2_descriptor(v1_descriptor: LibraryDescriptor) -> LibraryDescriptor:
        """Return the v2 descriptor fields derived from a v1 descriptor."""

        return remove_id(v1_descriptor)

    def migrate_tests(self, library_dir: Path) -> None:
        """Move ``firmware/test`` to ``test/unit`` when it exists."""

        legacy_tests = library_dir / FIRMWARE_DIR / TEST_DIR
        if not is_directory(legacy_tests):
            return
        test_dir = library_dir / TEST_DIR
        create_directory(test_dir)
        os.rename(legacy_tests, test_dir / UNIT_TEST_DIR)
        LOGGER.debug("moved %s to %s", legacy_tests, test_dir / UNIT_TEST_DIR)

    def migrate_sources(self, library_dir: Path, include_name: str) -> None:
        """Rewrite the files directly under ``firmware/`` into ``src/``."""

        firmware = library_dir / FIRMWARE_DIR
        if not is_directory(firmware):
            return
        sources = library_dir / SOURCES_DIR
        create_directory(sources)
        for path in collect_directory(firmware, regular_files):
            self.migrate_source_file(path, sources / path.name, include_name)

    def migrate_examples(self, library_dir: Path, include_name: str) -> None:
        """Rewrite every file under ``firmware/examples`` into its own example directory.

        A file ``firmware/examples/**/blink.cpp`` becomes
        ``examples/blink/blink.cpp``.
        """

        legacy_examples = library_dir / FIRMWARE_DIR / EXAMPLES_DIR
        if not is_directory(legacy_examples):
            return
        examples = library_dir / EXAMPLES_DIR
        for path in collect_directory(legacy_examples, regular_files, recursive=True):
            destination = examples / path.stem / path.name
            create_directory(destination.parent)
            self.migrate_source_file(path, destination, include_name)

    @staticmethod
    def migrate_source_file(source: Path, destination: Path, include_name: str) -> None:
        """Write ``source`` to ``destination`` with its includes rewritten.

        Bytes that are not valid UTF-8 and line endings are preserved.
        """

        text = source.read_bytes().decode(_SOURCE_ENCODING, _SOURCE_ERRORS)
        rewritten = migrate_sourcecode(text, include_name)
        destination.write_bytes(rewritten.encode(_SOURCE_ENCODING, _SOURCE_ERRORS))

    @staticmethod
    def remove_v1(library_dir: Path, v1_file: Path) -> None:
        """Delete ``firmware/`` and the legacy descriptor."""

        firmware = library_dir / FIRMWARE_DIR
        if is_directory(firmware):
            shutil.rmtree(firmware)
        v1_file.unlink()


__all__ = (
    "EXAMPLES_DIR",
    "FIRMWARE_DIR",
    "SOURCES_DIR",
    "LayoutMigrator",
    "migrate_sourcecode",
)
