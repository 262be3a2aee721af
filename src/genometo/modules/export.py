"""Export of a genome typed object to a SEED-style genome directory.

Layout written under the target directory::

    contigs                 FASTA of all contigs
    GENETIC_CODE            single line
    GENOME                  scientific name, single line
    TAXONOMY                single line, only when set
    closest.genomes         only when close genomes are recorded
    assigned_functions      id<TAB>function (file name configurable)
    annotations             annotation log records terminated by "//"
    Features/<type>/tbl     id<TAB>location
    Features/<type>/fasta   translation, or DNA when there is none
"""

import logging
import re
import tempfile
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, IO, Iterator, List, Union, Mapping, Optional

from genometo.core.exceptions import ExportError
from genometo.core.location import format_seed_locations
from genometo.core.types import Feature
from genometo.genome import GenomeTypedObject
from genometo.modules.fasta_io import write_sequence_records


logger = logging.getLogger(__name__)


DEFAULT_FUNCTION = "hypothetical protein"


@dataclass
class ExportOptions:
    """Settings for :func:`write_seed_dir`."""
    map_CDS_to_peg: bool = False
    correct_fig_id: bool = False
    assigned_functions_file: str = "assigned_functions"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ExportOptions":
        """Build options from the ``export`` section of a configuration."""
        section = config.get("export") or {}
        return cls(
            map_CDS_to_peg=bool(section.get("map_CDS_to_peg", False)),
            correct_fig_id=bool(section.get("correct_fig_id", False)),
            assigned_functions_file=section.get("assigned_functions_file") or "assigned_functions"
        )


@contextmanager
def _reporting_errors(path: Path) -> Iterator[None]:
    try:
        yield
    except OSError as e:
        raise ExportError(path, e.strerror or str(e), operation="write_seed_dir") from e


@contextmanager
def _open_for_write(path: Path) -> Iterator[IO[str]]:
    # open, write and close failures all report this path
    with _reporting_errors(path):
        with open(path, 'w') as handle:
            yield handle


def _write_single_line(path: Path, value: Any) -> None:
    with _open_for_write(path) as f:
        f.write(f"{'' if value is None else value}\n")


def _export_types(features: List[Feature], options: ExportOptions) -> List[str]:
    types = {feature.type for feature in features}
    if options.map_CDS_to_peg:
        types.discard("CDS")
        types.add("peg")
    return sorted(types)


def export_feature_id(feature: Feature, options: ExportOptions) -> str:
    """
    Id under which a feature is written to the genome directory.

    ``correct_fig_id`` adds the ``fig|`` namespace to ids of the form
    ``<taxon>.<version>.<type>...``; ``map_CDS_to_peg`` renames the
    ``.CDS.`` part of the id to ``.peg.``.
    """
    fid = feature.id
    if options.correct_fig_id and re.match(r'^\d+\.\d+\.' + re.escape(feature.type), fid):
        fid = f"fig|{fid}"
    if feature.type == "CDS" and options.map_CDS_to_peg:
        fid = fid.replace(".CDS.", ".peg.", 1)
    return fid


def export_feature_type(feature: Feature, options: ExportOptions) -> str:
    if feature.type == "CDS" and options.map_CDS_to_peg:
        return "peg"
    return feature.type


def _write_annotation_log(handle: IO[str], fid: str, feature: Feature) -> None:
    for annotation in feature.annotations:
        handle.write("\n".join([fid, str(annotation.timestamp),
                                annotation.annotator, annotation.comment]))
        if not annotation.comment.endswith("\n"):
            handle.write("\n")
        handle.write("//\n")


def write_seed_dir(
    genome: GenomeTypedObject,
    directory: Union[str, Path],
    options: Optional[ExportOptions] = None
) -> Path:
    """
    Write the genome as a SEED-style genome directory.

    Features without a protein translation have their DNA extracted, so the
    genome's indexes must be current. Any file that cannot be created or
    written aborts the export with :class:`ExportError`; files already
    written are left in place.

    Args:
        genome: Genome to export
        directory: Existing or new target directory
        options: Export settings

    Returns:
        The target directory
    """
    options = options or ExportOptions()
    directory = Path(directory)
    with _reporting_errors(directory):
        directory.mkdir(parents=True, exist_ok=True)

    logger.info(f"Writing genome {genome.id} to {directory}")

    with _open_for_write(directory / "contigs") as f:
        write_sequence_records(f, ((c.id, None, c.dna) for c in genome.contigs))

    _write_single_line(directory / "GENETIC_CODE", genome.genetic_code)
    _write_single_line(directory / "GENOME", genome.scientific_name)
    if genome.taxonomy:
        _write_single_line(directory / "TAXONOMY", genome.taxonomy)

    if genome.close_genomes:
        with _open_for_write(directory / "closest.genomes") as f:
            for close in genome.close_genomes:
                f.write(f"{close.genome_id}\t{close.closeness_measure}\t{close.genome_name}\n")

    types = _export_types(genome.features, options)
    logger.debug(f"Feature types to export: {types}")

    func_path = directory / options.assigned_functions_file
    anno_path = directory / "annotations"
    with ExitStack() as stack:
        func_fh = stack.enter_context(_open_for_write(func_path))
        anno_fh = stack.enter_context(_open_for_write(anno_path))

        type_dirs: Dict[str, Path] = {}
        tbl_fh: Dict[str, IO[str]] = {}
        fasta_fh: Dict[str, IO[str]] = {}
        for feature_type in types:
            type_dir = directory / "Features" / feature_type
            with _reporting_errors(type_dir):
                type_dir.mkdir(parents=True, exist_ok=True)
            type_dirs[feature_type] = type_dir
            tbl_fh[feature_type] = stack.enter_context(_open_for_write(type_dir / "tbl"))
            fasta_fh[feature_type] = stack.enter_context(_open_for_write(type_dir / "fasta"))

        for feature in genome.features:
            fid = export_feature_id(feature, options)
            feature_type = export_feature_type(feature, options)
            if feature.protein_translation:
                sequence = feature.protein_translation
            else:
                sequence = genome.get_feature_dna(feature)

            with _reporting_errors(func_path):
                func_fh.write(f"{fid}\t{feature.function or DEFAULT_FUNCTION}\n")
            with _reporting_errors(type_dirs[feature_type] / "tbl"):
                tbl_fh[feature_type].write(f"{fid}\t{format_seed_locations(feature.location)}\n")
            with _reporting_errors(type_dirs[feature_type] / "fasta"):
                write_sequence_records(fasta_fh[feature_type], [(fid, None, sequence)])
            with _reporting_errors(anno_path):
                _write_annotation_log(anno_fh, fid, feature)

    logger.info(f"Exported {len(genome.features)} features in {len(types)} types to {directory}")
    return directory


def write_temp_seed_dir(
    genome: GenomeTypedObject,
    options: Optional[ExportOptions] = None
) -> tempfile.TemporaryDirectory:
    """
    Export the genome into a new temporary directory.

    Returns:
        The TemporaryDirectory; its ``name`` is the export path and it is
        removed on ``cleanup()`` or when used as a context manager exits
    """
    tmp = tempfile.TemporaryDirectory(prefix="genometo_")
    write_seed_dir(genome, tmp.name, options)
    return tmp
