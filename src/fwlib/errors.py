# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Exceptions raised by library repositories."""

from __future__ import annotations


class LibraryRepositoryError(RuntimeError):
    """Base class of errors raised by a library repository.

    A bare instance signals an operational constraint violation, such as
    writing into a repository that is not writable or requesting an
    unsupported layout migration.
    """

    def __init__(self, repo: object = None, message: str | None = None) -> None:
        """Create the error for ``repo`` with an optional ``message``.

        Args:
            repo: Repository that raised the error, kept for context.
            message: Human-readable description of the failure.
        """

        super().__init__(message or "")
        self.repo = repo

    @property
    def cause(self) -> BaseException | None:
        """Return the underlying error this one was raised from, if any."""

        return self.__cause__


def not_found_message(repo: object, library: str) -> str:
    """Return the message used for libraries that cannot be located."""

    return f"library '{library}' not found in repo '{repo}'."


class LibraryNotFoundError(LibraryRepositoryError):
    """Raised when an identifier has no resolvable library."""

    def __init__(self, repo: object = None, library: str = "", message: str | None = None) -> None:
        """Create the error for ``library`` in ``repo``.

        Args:
            repo: Repository that was searched.
            library: Identifier that could not be resolved.
            message: Optional detail prefixed to the standard message.
        """

        standard = not_found_message(repo, library)
        LibraryRepositoryError.__init__(self, repo, f"{message}: {standard}" if message else standard)
        self.library = library


class LibraryFormatError(LibraryRepositoryError):
    """Raised when a library resolves but its content is structurally invalid."""

    def __init__(self, repo: object = None, library: str = "", message: str | None = None) -> None:
        """Create the error for ``library`` in ``repo``.

        Args:
            repo: Repository holding the malformed library.
            library: Identifier of the malformed library.
            message: Description of the structural problem.
        """

        LibraryRepositoryError.__init__(self, repo, message)
        self.library = library


class LibraryDescriptorShapeError(LibraryNotFoundError, LibraryFormatError):
    """Raised when a descriptor path exists but is not a regular file."""

    def __init__(self, repo: object = None, library: str = "", message: str | None = None) -> None:
        LibraryNotFoundError.__init__(self, repo, library, message)


__all__ = (
    "LibraryDescriptorShapeError",
    "LibraryFormatError",
    "LibraryNotFoundError",
    "LibraryRepositoryError",
    "not_found_message",
)
