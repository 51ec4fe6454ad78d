# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Directory traversal and creation helpers shared by repository features."""

from __future__ import annotations

import os
import stat
from collections.abc import Callable
from os import PathLike
from pathlib import Path
from typing import TypeVar

_Pathish = str | PathLike[str]

EntryT = TypeVar("EntryT")
AccumT = TypeVar("AccumT")


def file_stat(path: _Pathish) -> os.stat_result | None:
    """Return the stat result for ``path`` or ``None`` when it cannot be stat'ed."""

    try:
        return os.stat(path)
    except (OSError, ValueError):
        return None


def is_regular_file(path: _Pathish) -> bool:
    """Return ``True`` when ``path`` exists and is a regular file."""

    result = file_stat(path)
    return result is not None and stat.S_ISREG(result.st_mode)


def is_directory(path: _Pathish) -> bool:
    """Return ``True`` when ``path`` exists and is a directory."""

    result = file_stat(path)
    return result is not None and stat.S_ISDIR(result.st_mode)


def fold_directory(
    directory: _Pathish,
    classify: Callable[[Path, os.stat_result], EntryT | None],
    reducer: Callable[[AccumT, EntryT], AccumT],
    initial: AccumT,
    *,
    recursive: bool = False,
    prune: Callable[[Path], bool] | None = None,
) -> AccumT:
    """List, stat and classify the entries of ``directory`` and fold the results.

    Entries are visited in sorted name order. Subdirectories are descended
    into after being classified when ``recursive`` is set, unless ``prune``
    returns ``True`` for them.

    Args:
        directory: Directory whose entries are visited.
        classify: Per-entry classifier; ``None`` results are skipped.
        reducer: Folds a classified value into the accumulator.
        initial: Starting accumulator.
        recursive: Whether to descend into subdirectories.
        prune: Optional predicate excluding subdirectories from descent.

    Returns:
        AccumT: The folded accumulator.

    Raises:
        OSError: If ``directory`` cannot be listed.
    """

    accumulator = initial
    root = Path(directory)
    for name in sorted(os.listdir(root)):
        entry = root / name
        entry_stat = file_stat(entry)
        if entry_stat is None:
            continue
        value = classify(entry, entry_stat)
        if value is not None:
            accumulator = reducer(accumulator, value)
        if recursive and stat.S_ISDIR(entry_stat.st_mode) and not (prune and prune(entry)):
            accumulator = fold_directory(
                entry,
                classify,
                reducer,
                accumulator,
                recursive=True,
                prune=prune,
            )
    return accumulator


def collect_directory(
    directory: _Pathish,
    classify: Callable[[Path, os.stat_result], EntryT | None],
    *,
    recursive: bool = False,
    prune: Callable[[Path], bool] | None = None,
) -> list[EntryT]:
    """Return the classified entries of ``directory`` as a list.

    Args:
        directory: Directory whose entries are visited.
        classify: Per-entry classifier; ``None`` results are skipped.
        recursive: Whether to descend into subdirectories.
        prune: Optional predicate excluding subdirectories from descent.

    Returns:
        list[EntryT]: Classified values in visiting order.
    """

    def _append(items: list[EntryT], value: EntryT) -> list[EntryT]:
        items.append(value)
        return items

    return fold_directory(directory, classify, _append, [], recursive=recursive, prune=prune)


def regular_files(entry: Path, entry_stat: os.stat_result) -> Path | None:
    """Classifier keeping regular files."""

    return entry if stat.S_ISREG(entry_stat.st_mode) else None


def directories(entry: Path, entry_stat: os.stat_result) -> Path | None:
    """Classifier keeping directories."""

    return entry if stat.S_ISDIR(entry_stat.st_mode) else None


def get_dirs(root: _Pathish) -> list[str]:
    """Return the names of the immediate subdirectories of ``root``."""

    return [entry.name for entry in collect_directory(root, directories)]


def mkdir_if_needed(path: _Pathish) -> None:
    """Create ``path`` treating an existing entry as success.

    Raises:
        OSError: For any failure other than the path already existing.
    """

    try:
        os.mkdir(path)
    except FileExistsError:
        pass


def create_directory(path: _Pathish) -> None:
    """Create ``path`` and any missing parents; safe to call repeatedly."""

    normalized = os.path.normpath(path)
    parent = os.path.dirname(normalized)
    if parent and parent != normalized and not os.path.isdir(parent):
        create_directory(parent)
    mkdir_if_needed(path)


__all__ = (
    "collect_directory",
    "create_directory",
    "directories",
    "file_stat",
    "fold_directory",
    "get_dirs",
    "is_directory",
    "is_regular_file",
    "mkdir_if_needed",
    "regular_files",
)
