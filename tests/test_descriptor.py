# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the spark.json and library.properties codecs."""

from __future__ import annotations

import json

import pytest

from fwlib.descriptor import (
    build_v1_descriptor,
    build_v2_descriptor,
    parse_descriptor_v1,
    parse_descriptor_v2,
    parse_properties,
    prepare_descriptor_v2,
    remove_id,
)


def test_remove_id_returns_copy_without_id() -> None:
    descriptor = {"id": 12, "name": "mylib"}

    result = remove_id(descriptor)

    assert result == {"name": "mylib"}
    assert descriptor == {"id": 12, "name": "mylib"}


def test_parse_descriptor_v1_rejects_non_objects() -> None:
    with pytest.raises(ValueError):
        parse_descriptor_v1("[1, 2]")
    with pytest.raises(ValueError):
        parse_descriptor_v1("{not json")


def test_build_v1_descriptor_drops_id() -> None:
    text = build_v1_descriptor({"id": "abc", "name": "mylib", "version": "1.0.0"})

    assert json.loads(text) == {"name": "mylib", "version": "1.0.0"}
    assert text.endswith("}\n")


def test_parse_properties_skips_comments_and_blank_lines() -> None:
    text = "# comment\n! also a comment\n\nname = mylib\nversion:1.0.0\nsentence=Hello = world  \n"

    assert parse_properties(text) == {"name": "mylib", "version": "1.0.0", "sentence": "Hello = world"}


def test_parse_descriptor_v2_mirrors_sentence_and_splits_architectures() -> None:
    descriptor = parse_descriptor_v2("name=mylib\nsentence=A library\narchitectures=photon, electron\n")

    assert descriptor["description"] == "A library"
    assert descriptor["architectures"] == ["photon", "electron"]


def test_prepare_descriptor_v2_defaults_sentence() -> None:
    assert prepare_descriptor_v2({"description": "Short"})["sentence"] == "Short"
    assert prepare_descriptor_v2({"description": "Short", "sentence": "Kept"})["sentence"] == "Kept"


def test_build_v2_descriptor_orders_fields() -> None:
    text = build_v2_descriptor(
        {"author": "Jane", "name": "mylib", "version": "1.0.0", "architectures": ["photon", "electron"], "extra": 1}
    )

    assert text == "name=mylib\nversion=1.0.0\nauthor=Jane\narchitectures=photon,electron\n"


def test_build_v2_descriptor_with_comments_describes_missing_fields() -> None:
    text = build_v2_descriptor({"name": "mylib"}, with_comments=True)
    lines = text.splitlines()

    assert lines[0] == "name=mylib"
    assert lines[1] == "# version=the version of the library, like 1.0.0"
    assert len(lines) == 9
    assert all(line.startswith("# ") for line in lines[1:])


def test_v2_descriptor_survives_reparse() -> None:
    original = {"name": "mylib", "version": "2.0.0", "sentence": "Lib", "architectures": ["photon"]}

    reparsed = parse_descriptor_v2(build_v2_descriptor(original, with_comments=True))

    assert reparsed == {**original, "description": "Lib"}
