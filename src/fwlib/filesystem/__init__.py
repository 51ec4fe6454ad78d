# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Filesystem utilities for traversal and path handling."""

from __future__ import annotations

from .paths import absolute_path, paths_common_prefix, relative_path, with_trailing_separator
from .walk import (
    collect_directory,
    create_directory,
    directories,
    file_stat,
    fold_directory,
    get_dirs,
    is_directory,
    is_regular_file,
    mkdir_if_needed,
    regular_files,
)

__all__ = [
    "absolute_path",
    "collect_directory",
    "create_directory",
    "directories",
    "file_stat",
    "fold_directory",
    "get_dirs",
    "is_directory",
    "is_regular_file",
    "mkdir_if_needed",
    "paths_common_prefix",
    "regular_files",
    "relative_path",
    "with_trailing_separator",
]
