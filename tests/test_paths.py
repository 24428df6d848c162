"""Unit tests for the materialized-path helpers."""

import re

import pytest

from box_organizer.core.paths import (
    build_location_path,
    format_breadcrumb,
    is_descendant,
    parent_path,
    path_depth,
    rebase_path,
    regenerate_path,
    sanitize_segment,
    segment_for_name,
    transliterate_polish,
)

POLISH_PAIRS = {
    "ą": "a", "ć": "c", "ę": "e", "ł": "l", "ń": "n", "ó": "o", "ś": "s", "ź": "z", "ż": "z",
    "Ą": "A", "Ć": "C", "Ę": "E", "Ł": "L", "Ń": "N", "Ó": "O", "Ś": "S", "Ź": "Z", "Ż": "Z",
}

SAMPLES = [
    "",
    "Garage",
    "Półka #1",
    "polka!1",
    "  __Leading and trailing__  ",
    "Shelf---A",
    "a__b",
    "ÄÖÜ straße",
    "Zażółć gęślą jaźń",
    "123",
    "!!!",
    "mixed_Case_Name",
    "tab\tand\nnewline",
]

VALID_SEGMENT = re.compile(r"^[a-z0-9_]*$")


@pytest.mark.parametrize("char,expected", POLISH_PAIRS.items())
def test_transliterates_each_polish_letter(char: str, expected: str) -> None:
    assert transliterate_polish(char) == expected
    assert sanitize_segment(char) == expected.lower()


def test_characters_outside_table_pass_through() -> None:
    assert transliterate_polish("äöü ß é") == "äöü ß é"


@pytest.mark.parametrize("text", SAMPLES)
def test_sanitized_segment_shape(text: str) -> None:
    segment = sanitize_segment(text)
    assert VALID_SEGMENT.match(segment)
    assert "__" not in segment
    assert not segment.startswith("_")
    assert not segment.endswith("_")


@pytest.mark.parametrize("text", SAMPLES)
def test_sanitize_is_idempotent(text: str) -> None:
    once = sanitize_segment(text)
    assert sanitize_segment(once) == once


def test_sanitize_examples() -> None:
    assert sanitize_segment("") == ""
    assert sanitize_segment("Garaż Metalowy") == "garaz_metalowy"
    assert sanitize_segment("Półka #1") == sanitize_segment("polka!1") == "polka_1"
    assert sanitize_segment("ÄÖÜ straße") == "stra_e"


def test_empty_segment_falls_back() -> None:
    assert segment_for_name("!!!") == "location"
    assert build_location_path(None, "***") == "root.location"


def test_build_and_regenerate_paths() -> None:
    assert build_location_path(None, "Garage") == "root.garage"
    assert build_location_path("root.garage", "Shelf A") == "root.garage.shelf_a"
    assert regenerate_path("root.garage.shelf_a", "Shelf B") == "root.garage.shelf_b"
    assert parent_path("root.garage.shelf_a") == "root.garage"
    assert parent_path("root") == ""
    assert path_depth("root.garage.shelf_a") == 3


def test_rebase_only_matches_whole_segments() -> None:
    assert rebase_path("root.shelf.box", "root.shelf", "root.rack") == "root.rack.box"
    assert rebase_path("root.shelf", "root.shelf", "root.rack") == "root.rack"
    assert not is_descendant("root.shelf_b.box", "root.shelf")
    with pytest.raises(ValueError):
        rebase_path("root.shelf_b.box", "root.shelf", "root.rack")


def test_breadcrumbs() -> None:
    assert format_breadcrumb(None) == "Unassigned"
    assert format_breadcrumb("root") == "Root"
    assert format_breadcrumb("root.garage.shelf_a") == "garage > shelf_a"
    assert format_breadcrumb("root.garage.shelf_a", humanize=True) == "Garage > Shelf A"
