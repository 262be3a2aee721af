"""Tests for location string parsing and formatting."""

import pytest

from genometo.core.exceptions import LocationParseError, ValidationError
from genometo.core.location import (
    parse_location, parse_location_list, format_seed_location, format_seed_locations,
    format_compact_location, format_compact_locations
)
from genometo.core.types import LocationSegment


def test_parse_seed_forward():
    assert parse_location("c1_10_19") == LocationSegment("c1", 10, "+", 10)


def test_parse_seed_reverse():
    segment = parse_location("c1_19_10")
    assert segment == LocationSegment("c1", 19, "-", 10)
    assert segment.end == 10
    assert (segment.left, segment.right) == (10, 19)


def test_parse_single_base_is_forward():
    assert parse_location("c1_7_7") == LocationSegment("c1", 7, "+", 1)


def test_contig_id_with_underscores():
    assert parse_location("NC_000913_300_101") == LocationSegment("NC_000913", 300, "-", 200)
    assert parse_location("kb|g.140.c_0_5+3") == LocationSegment("kb|g.140.c_0", 5, "+", 3)


def test_parse_compact_form():
    assert parse_location("c1_100+30") == LocationSegment("c1", 100, "+", 30)
    assert parse_location("c1_100-30") == LocationSegment("c1", 100, "-", 30)


def test_parse_location_list_keeps_order():
    segments = parse_location_list("c1_1_9,c2_50_20")
    assert segments == [LocationSegment("c1", 1, "+", 9), LocationSegment("c2", 50, "-", 31)]


@pytest.mark.parametrize("location", [
    "c1_10_19",
    "c1_19_10",
    "c1_5_5",
    "NC_000913_1_300,NC_000913_900_601",
])
def test_seed_round_trip(location):
    assert format_seed_locations(parse_location_list(location)) == location


def test_compact_formatting():
    segments = [LocationSegment("c1", 3, "+", 4), LocationSegment("c1", 8, "-", 4)]
    assert format_compact_location(segments[0]) == "c1_3+4"
    assert format_compact_locations(segments) == "c1_3+4,c1_8-4"
    assert format_seed_location(segments[1]) == "c1_8_5"


@pytest.mark.parametrize("location", [
    "",
    "c1",
    "c1_10",
    "c1_x_10",
    "c1_10+",
    "c1_0_5",
    "c1_3-5",
    "c1_10+0",
])
def test_malformed_locations_fail(location):
    with pytest.raises(LocationParseError):
        parse_location_list(location)


def test_parse_error_is_validation_error():
    with pytest.raises(ValidationError) as excinfo:
        parse_location("nonsense")
    assert excinfo.value.location == "nonsense"


def test_segment_from_value():
    assert LocationSegment.from_value(["c1", "5", "-", 2]) == LocationSegment("c1", 5, "-", 2)
    with pytest.raises(ValidationError):
        LocationSegment.from_value(["c1", 5, "+"])
    with pytest.raises(ValidationError):
        LocationSegment.from_value(["c1", 5, "x", 2])
