"""Sequence and location extraction from a genome typed object."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from genometo.core.location import format_compact_locations
from genometo.core.types import Feature
from genometo.genome import GenomeTypedObject
from genometo.modules.fasta_io import write_fasta_file, write_sequence_records


logger = logging.getLogger(__name__)


def write_protein_translations(genome: GenomeTypedObject, path: Union[str, Path]) -> Path:
    """Write the translation of every feature that has one to a FASTA file."""
    return write_fasta_file(path, (
        (feature.id, None, feature.protein_translation)
        for feature in genome.features if feature.protein_translation
    ))


def write_feature_locations(
    genome: GenomeTypedObject,
    path: Union[str, Path],
    feature_types: Iterable[str] = ()
) -> Path:
    """
    Write ``id<TAB>location`` lines in compact location form.

    Args:
        genome: Source genome
        path: Output file
        feature_types: Only write features of these types; all when empty
    """
    wanted = set(feature_types)
    path = Path(path)
    count = 0
    with open(path, 'w') as f:
        for feature in genome.features:
            if wanted and feature.type not in wanted:
                continue
            f.write(f"{feature.id}\t{format_compact_locations(feature.location)}\n")
            count += 1
    logger.debug(f"Wrote {count} feature locations to {path}")
    return path


def extract_protein_sequences_to_temp_file(
    genome: GenomeTypedObject,
    keep: Optional[Callable[[Feature], bool]] = None
) -> Path:
    """
    Write translations to a new temporary FASTA file.

    Args:
        genome: Source genome
        keep: Optional predicate; features for which it returns False are skipped

    Returns:
        Path of the temporary file. The caller is responsible for removing it.
    """
    fd, name = tempfile.mkstemp(suffix=".fasta", prefix="genometo_prot_")
    with os.fdopen(fd, 'w') as f:
        records = []
        for feature in genome.features:
            if keep is not None:
                if keep(feature):
                    logger.debug(f"keeping {feature.id} {feature.function}")
                else:
                    logger.debug(f"skipping {feature.id} {feature.function}")
                    continue
            if feature.protein_translation:
                records.append((feature.id, None, feature.protein_translation))
        write_sequence_records(f, records)
    return Path(name)


def extract_contig_sequences_to_temp_file(genome: GenomeTypedObject) -> Path:
    """Write all contigs to a new temporary FASTA file and return its path."""
    fd, name = tempfile.mkstemp(suffix=".fasta", prefix="genometo_contigs_")
    with os.fdopen(fd, 'w') as f:
        write_sequence_records(f, ((c.id, None, c.dna) for c in genome.contigs))
    return Path(name)
