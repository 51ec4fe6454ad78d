# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command line interface for inspecting and converting library repositories."""

from __future__ import annotations

from .app import app

__all__ = ["app"]
