"""Tests for feature DNA extraction."""

import pytest
from Bio.Seq import reverse_complement

from genometo.core.exceptions import ContigNotFoundError, FeatureNotFoundError, LookupFailure
from genometo.core.sequence import segment_dna
from genometo.core.types import Feature, LocationSegment


CONTIG = "ATGCGTAACCTG"


def test_forward_segment():
    assert segment_dna("ACGTACGTAC", LocationSegment("c1", 3, "+", 4)) == "GTAC"


def test_reverse_segment_is_reverse_complemented():
    # bases 4..6 are "CGT"
    assert segment_dna(CONTIG, LocationSegment("c", 6, "-", 3)) == "ACG"


def test_single_base_reverse_segment_is_not_complemented():
    assert segment_dna(CONTIG, LocationSegment("c", 1, "-", 1)) == "A"
    assert segment_dna(CONTIG, LocationSegment("c", 5, "-", 1)) == "G"


def test_every_segment_matches_slicing():
    n = len(CONTIG)
    for begin in range(1, n + 1):
        for length in range(1, n - begin + 2):
            expected = CONTIG[begin - 1:begin - 1 + length]
            assert segment_dna(CONTIG, LocationSegment("c", begin, "+", length)) == expected
        for length in range(2, begin + 1):
            expected = reverse_complement(CONTIG[begin - length:begin])
            assert segment_dna(CONTIG, LocationSegment("c", begin, "-", length)) == expected


def test_get_feature_dna_by_id(genome):
    assert genome.get_feature_dna("83333.1.CDS.1") == "ATGCGT"
    assert genome.get_feature_dna("83333.1.rna.1") == "CAGG"


def test_get_feature_dna_from_object(genome):
    feature = Feature("x", "misc", [LocationSegment("c1", 3, "+", 4)])
    assert genome.get_feature_dna(feature) == "GTAC"

    feature = Feature("y", "misc", [LocationSegment("c1", 8, "-", 4)])
    assert genome.get_feature_dna(feature) == reverse_complement("ACGTACGTAC"[4:8])
    assert genome.get_feature_dna(feature) == "ACGT"


def test_multi_segment_feature_concatenates_in_location_order(genome):
    feature = Feature("z", "misc", [
        LocationSegment("NC_000913", 1, "+", 3),
        LocationSegment("NC_000913", 12, "-", 2),
    ])
    assert genome.get_feature_dna(feature) == "ATGCA"


def test_missing_contig_raises(genome):
    feature = Feature("z", "misc", [LocationSegment("nowhere", 1, "+", 3)])
    with pytest.raises(ContigNotFoundError) as excinfo:
        genome.get_feature_dna(feature)
    assert excinfo.value.contig_id == "nowhere"


def test_unindexed_feature_id_raises(genome):
    with pytest.raises(FeatureNotFoundError):
        genome.get_feature_dna("83333.1.CDS.99")


def test_stale_contig_index_raises(genome):
    genome.add_contigs([{"id": "c9", "dna": "GGGG"}])
    feature = Feature("z", "misc", [LocationSegment("c9", 1, "+", 2)])
    with pytest.raises(LookupFailure):
        genome.get_feature_dna(feature)

    genome.update_indexes()
    assert genome.get_feature_dna(feature) == "GG"
