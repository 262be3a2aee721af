"""Shared fixtures for the genome typed object tests."""

import copy
import itertools

import pytest

from genometo.core.environment import Environment
from genometo.genome import GenomeTypedObject


FIXED_TIME = 1700000000.5

GENOME_DOCUMENT = {
    "id": "83333.1",
    "scientific_name": "Escherichia coli K-12",
    "domain": "Bacteria",
    "genetic_code": 11,
    "source": "RefSeq",
    "source_id": "NC_000913",
    "taxonomy": "Bacteria; Proteobacteria; Gammaproteobacteria",
    "contigs": [
        {"id": "c1", "dna": "ACGTACGTAC"},
        {"id": "NC_000913", "dna": "ATGCGTAACCTG"},
    ],
    "features": [
        {
            "id": "83333.1.CDS.1",
            "type": "CDS",
            "location": [["NC_000913", 1, "+", 6]],
            "function": "Thr operon leader peptide",
            "protein_translation": "MR",
            "annotations": [["Add feature", "Nobody", 1600000000]],
        },
        {
            "id": "83333.1.rna.1",
            "type": "rna",
            "location": [["NC_000913", 12, "-", 4]],
            "annotations": [],
        },
    ],
    "close_genomes": [],
    "analysis_events": [],
}


@pytest.fixture
def environment():
    """Environment with a fixed clock, hostname and numbered UUIDs."""
    counter = itertools.count(1)
    return Environment(
        clock=lambda: FIXED_TIME,
        hostname="testhost",
        uuid_factory=lambda: f"uuid-{next(counter)}"
    )


@pytest.fixture
def genome_document():
    return copy.deepcopy(GENOME_DOCUMENT)


@pytest.fixture
def genome(genome_document, environment):
    return GenomeTypedObject.initialize(genome_document, environment=environment)
