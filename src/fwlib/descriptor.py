# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Codecs for the v1 (``spark.json``) and v2 (``library.properties``) descriptors."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any, Final

from .library import LibraryDescriptor

SPARK_DOT_JSON: Final[str] = "spark.json"
LIBRARY_PROPERTIES: Final[str] = "library.properties"

# Fields serialised into library.properties, in output order, with the
# description written for each absent field when comments are requested.
V2_FIELDS: Final[tuple[tuple[str, str], ...]] = (
    ("name", "the name of the library, letters, numbers, dashes and underscores only"),
    ("version", "the version of the library, like 1.0.0"),
    ("license", "the license for the library, like MIT"),
    ("author", "the author of the library, like Jane Doe <jane@example.com>"),
    ("sentence", "a one sentence description of this library"),
    ("paragraph", "a longer description of this library, always prepended with sentence when shown"),
    ("url", "the url for the project"),
    ("repository", "git repository for the project, like https://github.com/mygithub_user/my_repo.git"),
    ("architectures", "a list of supported hardware architectures, like particle-photon,particle-electron"),
)

_PROPERTY_LINE: Final[re.Pattern[str]] = re.compile(r"^\s*([^=:\s]+)\s*[=:]\s*(.*?)\s*$")
_COMMENT_PREFIXES: Final[tuple[str, ...]] = ("#", "!")


def remove_id(descriptor: Mapping[str, Any]) -> LibraryDescriptor:
    """Return a copy of ``descriptor`` without the server-assigned ``id`` key."""

    return {key: value for key, value in descriptor.items() if key != "id"}


def parse_descriptor_v1(text: str) -> LibraryDescriptor:
    """Parse a ``spark.json`` document.

    Raises:
        ValueError: If the document is not a JSON object.
    """

    document = json.loads(text)
    if not isinstance(document, dict):
        raise ValueError("descriptor must be a JSON object")
    return document


def build_v1_descriptor(descriptor: Mapping[str, Any]) -> str:
    """Serialise ``descriptor`` as ``spark.json`` content, dropping ``id``."""

    return json.dumps(remove_id(descriptor), indent=2) + "\n"


def parse_properties(text: str) -> dict[str, str]:
    """Parse line-oriented ``key=value`` properties.

    Blank lines and lines starting with ``#`` or ``!`` are ignored. Keys may
    contain dots and are kept verbatim.

    Args:
        text: Properties file content.

    Returns:
        dict[str, str]: Parsed keys and values in file order.
    """

    properties: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(_COMMENT_PREFIXES):
            continue
        match = _PROPERTY_LINE.match(line)
        if match is None:
            properties[line] = ""
            continue
        key, value = match.groups()
        properties[key] = value
    return properties


def parse_descriptor_v2(text: str) -> LibraryDescriptor:
    """Parse ``library.properties`` content into a descriptor.

    ``sentence`` is mirrored into ``description`` and ``architectures`` is
    split into a list.
    """

    descriptor: LibraryDescriptor = dict(parse_properties(text))
    if "sentence" in descriptor:
        descriptor["description"] = descriptor["sentence"]
    architectures = descriptor.get("architectures")
    if isinstance(architectures, str):
        descriptor["architectures"] = [item.strip() for item in architectures.split(",") if item.strip()]
    return descriptor


def prepare_descriptor_v2(descriptor: Mapping[str, Any]) -> LibraryDescriptor:
    """Return a copy of ``descriptor`` with ``sentence`` defaulted from ``description``."""

    prepared = dict(descriptor)
    if prepared.get("sentence") is None and prepared.get("description") is not None:
        prepared["sentence"] = prepared["description"]
    return prepared


def _format_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return str(value)


def build_v2_descriptor(descriptor: Mapping[str, Any], with_comments: bool = False) -> str:
    """Serialise ``descriptor`` as ``library.properties`` content.

    Args:
        descriptor: Descriptor fields to write.
        with_comments: When ``True``, emit a commented placeholder describing
            every absent field.

    Returns:
        str: Properties text, one field per line in the fixed field order.
    """

    prepared = prepare_descriptor_v2(descriptor)
    lines: list[str] = []
    for key, purpose in V2_FIELDS:
        value = prepared.get(key)
        if value is not None:
            lines.append(f"{key}={_format_value(value)}\n")
        elif with_comments:
            lines.append(f"# {key}={purpose}\n")
    return "".join(lines)


__all__ = (
    "LIBRARY_PROPERTIES",
    "SPARK_DOT_JSON",
    "V2_FIELDS",
    "build_v1_descriptor",
    "build_v2_descriptor",
    "parse_descriptor_v1",
    "parse_descriptor_v2",
    "parse_properties",
    "prepare_descriptor_v2",
    "remove_id",
)
