"""Nucleotide extraction for location segments."""

from Bio.Seq import reverse_complement

from genometo.core.types import LocationSegment


def segment_dna(dna: str, segment: LocationSegment) -> str:
    """
    Extract the bases covered by one segment from its contig sequence.

    Forward segments and single-base segments are read left to right from
    ``begin``. Longer reverse segments cover ``begin - length + 1 .. begin``
    and are returned reverse-complemented.

    Args:
        dna: Full contig sequence
        segment: Segment on that contig

    Returns:
        Sequence of the segment, read in the direction of the strand
    """
    if segment.strand == '+' or segment.length == 1:
        start = segment.begin - 1
        return dna[start:start + segment.length]
    return reverse_complement(dna[segment.begin - segment.length:segment.begin])
