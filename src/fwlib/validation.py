# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Validation of library descriptors and library layouts."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from .repository import FileSystemLibraryRepository

REQUIRED_FIELDS: Final[tuple[str, ...]] = ("name", "version", "author")
BLANK_MESSAGE: Final[str] = "can't be blank"
NOT_V2_MESSAGE: Final[str] = "must be migrated to v2 format"


@dataclass(frozen=True, slots=True)
class FieldPattern:
    """Regular expression a field value must match, with the error reported otherwise."""

    pattern: re.Pattern[str]
    message: str


PATTERNS: Final[dict[str, FieldPattern]] = {
    "name": FieldPattern(
        re.compile(r"^[A-Za-z0-9][A-Za-z0-9-_]+$"),
        "must only contain letters, numbers, dashes and underscores",
    ),
    "version": FieldPattern(re.compile(r"^\d+\.\d+\.\d+$"), "must be formatted like 1.0.0"),
}


@dataclass(slots=True)
class ValidationResult:
    """Outcome of a validation run.

    Attributes:
        valid: ``True`` when no errors were recorded.
        errors: Mapping of field name to error message.
    """

    valid: bool = True
    errors: dict[str, str] = field(default_factory=dict)

    def add_error(self, name: str, message: str) -> None:
        """Record ``message`` against ``name`` and mark the result invalid."""

        self.valid = False
        self.errors[name] = message

    def merge(self, other: ValidationResult) -> None:
        """Fold the errors of ``other`` into this result."""

        for name, message in other.errors.items():
            self.add_error(name, message)


def validate_field(name: str, value: Any) -> ValidationResult:
    """Validate a single descriptor field.

    Args:
        name: Field name.
        value: Field value; ``None`` and ``""`` count as blank.

    Returns:
        ValidationResult: The result for this field only.
    """

    result = ValidationResult()
    if name in REQUIRED_FIELDS and not value:
        result.add_error(name, BLANK_MESSAGE)
        return result
    rule = PATTERNS.get(name)
    if rule is not None and value is not None and rule.pattern.match(str(value)) is None:
        result.add_error(name, rule.message)
    return result


def validate_descriptor(descriptor: Mapping[str, Any]) -> ValidationResult:
    """Validate every field of ``descriptor``, including absent required fields."""

    result = ValidationResult()
    for name in (*REQUIRED_FIELDS, *(key for key in descriptor if key not in REQUIRED_FIELDS)):
        result.merge(validate_field(name, descriptor.get(name)))
    return result


def validate_library(repo: FileSystemLibraryRepository, name: str = "") -> ValidationResult:
    """Validate the layout and descriptor of the library ``name`` in ``repo``.

    Args:
        repo: Repository holding the library.
        name: Library identifier; ``""`` addresses the root library of a
            direct-naming repository.

    Returns:
        ValidationResult: A single ``library`` error when the library is not
        in the v2 layout, otherwise the descriptor validation result.

    Raises:
        LibraryNotFoundError: If the library cannot be located.
    """

    if repo.get_library_layout(name) != 2:
        result = ValidationResult()
        result.add_error("library", NOT_V2_MESSAGE)
        return result
    return validate_descriptor(repo.fetch(name).definition())


__all__ = (
    "PATTERNS",
    "REQUIRED_FIELDS",
    "FieldPattern",
    "ValidationResult",
    "validate_descriptor",
    "validate_field",
    "validate_library",
)
