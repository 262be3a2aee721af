"""Functions for encoding and decoding feature location strings.

Two textual forms are understood:

* SEED directory form ``<contig>_<begin>_<end>``, where ``begin > end``
  marks the '-' strand.
* Compact form ``<contig>_<begin><strand><length>``, e.g. ``c1_100+30``.

Contig ids may contain underscores, so the numeric fields are matched from
the right-hand end of the string.
"""

import re
from typing import Iterable, List

from genometo.core.exceptions import LocationParseError, ValidationError
from genometo.core.types import LocationSegment


SEED_LOCATION_RE = re.compile(r'^(?P<contig>.+)_(?P<begin>\d+)_(?P<end>\d+)$')
COMPACT_LOCATION_RE = re.compile(
    r'^(?P<contig>.+)_(?P<begin>\d+)(?P<strand>[+-])(?P<length>\d+)$'
)


def parse_location(location: str) -> LocationSegment:
    """
    Parse a single location in either SEED or compact form.

    Args:
        location: Location string for one segment

    Returns:
        Parsed LocationSegment

    Raises:
        LocationParseError: If the string matches neither form or describes
            an impossible segment

    Example:
        >>> parse_location("NC_000913_300_101")
        LocationSegment(contig_id='NC_000913', begin=300, strand='-', length=200)
    """
    text = location.strip()

    match = COMPACT_LOCATION_RE.match(text)
    if match:
        begin = int(match.group('begin'))
        length = int(match.group('length'))
        return _make_segment(location, match.group('contig'), begin, match.group('strand'), length)

    match = SEED_LOCATION_RE.match(text)
    if match:
        begin = int(match.group('begin'))
        end = int(match.group('end'))
        if begin <= end:
            return _make_segment(location, match.group('contig'), begin, '+', end - begin + 1)
        return _make_segment(location, match.group('contig'), begin, '-', begin - end + 1)

    raise LocationParseError(location)


def parse_location_list(locations: str) -> List[LocationSegment]:
    """
    Parse a comma-separated list of locations into ordered segments.

    Args:
        locations: e.g. ``"c1_10_100,c1_200_300"``

    Returns:
        Segments in the order they appear in the string
    """
    if not locations or not locations.strip():
        raise LocationParseError(locations or "", "empty location")
    return [parse_location(part) for part in locations.split(',')]


def format_seed_location(segment: LocationSegment) -> str:
    """Render a segment in SEED directory form (``contig_begin_end``)."""
    return f"{segment.contig_id}_{segment.begin}_{segment.end}"


def format_seed_locations(segments: Iterable[LocationSegment]) -> str:
    """Render a whole feature location in SEED directory form."""
    return ",".join(format_seed_location(segment) for segment in segments)


def format_compact_location(segment: LocationSegment) -> str:
    """Render a segment in compact form (``contig_begin<strand>length``)."""
    return f"{segment.contig_id}_{segment.begin}{segment.strand}{segment.length}"


def format_compact_locations(segments: Iterable[LocationSegment]) -> str:
    return ",".join(format_compact_location(segment) for segment in segments)


def _make_segment(location: str, contig: str, begin: int, strand: str,
                  length: int) -> LocationSegment:
    try:
        return LocationSegment(contig, begin, strand, length)
    except ValidationError as e:
        raise LocationParseError(location, str(e))
