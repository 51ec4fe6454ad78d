# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers for reasoning about filesystem paths."""

from __future__ import annotations

import os
from collections.abc import MutableSequence, Sequence
from os import PathLike
from typing import Final

_Pathish = str | PathLike[str]
_SEPARATOR: Final[str] = os.sep


def absolute_path(path: _Pathish, *, cwd: _Pathish | None = None) -> str:
    """Return ``path`` as a normalised absolute path.

    Symbolic links are not resolved, so the result mirrors the lexical path
    the caller supplied.

    Args:
        path: Absolute path, or path relative to ``cwd``.
        cwd: Base directory for relative paths. Defaults to ``os.getcwd()``.

    Returns:
        str: Normalised absolute path without a trailing separator.
    """

    base = os.getcwd() if cwd is None else os.fspath(cwd)
    return os.path.normpath(os.path.join(os.path.abspath(base), os.fspath(path)))


def relative_path(base: _Pathish, target: _Pathish) -> str:
    """Return ``target`` relative to ``base``, or ``""`` when they are the same.

    Args:
        base: Absolute directory the result is relative to.
        target: Absolute path to express relative to ``base``.

    Returns:
        str: Relative path using the platform separator.
    """

    relative = os.path.relpath(os.fspath(target), os.fspath(base))
    return "" if relative == os.curdir else relative


def with_trailing_separator(path: str) -> str:
    """Return ``path`` ending with exactly one trailing separator."""

    return path if path.endswith(_SEPARATOR) else path + _SEPARATOR


def _path_segments(path: str) -> list[str]:
    """Split an absolute path into its segments, root first."""

    return path.split(_SEPARATOR)


def paths_common_prefix(
    paths: Sequence[_Pathish],
    relative_out: MutableSequence[str] | None = None,
    cwd: _Pathish | None = None,
) -> str:
    """Return the longest directory prefix shared by ``paths``.

    Every path is made absolute against ``cwd``; paths that are not
    directories are reduced to the directory containing them. The common
    prefix is folded segment by segment across all inputs.

    Args:
        paths: Files or directories to compare.
        relative_out: Optional list receiving each input's path relative to
            the prefix, in input order.
        cwd: Base directory for relative inputs. Defaults to ``os.getcwd()``.

    Returns:
        str: The shared prefix, or ``""`` when ``paths`` is empty or the
        inputs share no root segment.
    """

    if not paths:
        return ""

    absolutes = [absolute_path(path, cwd=cwd) for path in paths]
    common: list[str] | None = None
    for absolute in absolutes:
        directory = absolute if os.path.isdir(absolute) else os.path.dirname(absolute)
        segments = _path_segments(directory)
        if common is None:
            common = segments
            continue
        length = 0
        for left, right in zip(common, segments):
            if left != right:
                break
            length += 1
        common = common[:length]

    prefix = _SEPARATOR.join(common or [])
    if relative_out is not None:
        relative_out.extend(relative_path(prefix, absolute) if prefix else absolute for absolute in absolutes)
    return prefix


__all__ = (
    "absolute_path",
    "paths_common_prefix",
    "relative_path",
    "with_trailing_separator",
)
