"""Tests for SEED genome directory export."""

import os
from pathlib import Path

import pytest

from genometo.core.exceptions import ExportError
from genometo.core.types import CloseGenome
from genometo.modules.export import (
    ExportOptions, export_feature_id, write_seed_dir, write_temp_seed_dir
)
from genometo.modules.fasta_io import read_sequence_records


def read_lines(path):
    return path.read_text().splitlines()


def test_layout(genome, tmp_path):
    out = write_seed_dir(genome, tmp_path / "seed")

    assert read_lines(out / "GENETIC_CODE") == ["11"]
    assert read_lines(out / "GENOME") == ["Escherichia coli K-12"]
    assert read_lines(out / "TAXONOMY") == ["Bacteria; Proteobacteria; Gammaproteobacteria"]
    assert not (out / "closest.genomes").exists()

    contigs = list(read_sequence_records(out / "contigs"))
    assert contigs == [("c1", None, "ACGTACGTAC"), ("NC_000913", None, "ATGCGTAACCTG")]

    assert read_lines(out / "Features" / "CDS" / "tbl") == ["83333.1.CDS.1\tNC_000913_1_6"]
    assert read_lines(out / "Features" / "rna" / "tbl") == ["83333.1.rna.1\tNC_000913_12_9"]


def test_fasta_uses_translation_else_dna(genome, tmp_path):
    out = write_seed_dir(genome, tmp_path)
    assert list(read_sequence_records(out / "Features" / "CDS" / "fasta")) == [
        ("83333.1.CDS.1", None, "MR")
    ]
    assert list(read_sequence_records(out / "Features" / "rna" / "fasta")) == [
        ("83333.1.rna.1", None, "CAGG")
    ]


def test_functions_and_annotations_in_feature_order(genome, tmp_path):
    genome.add_feature("CDS", [("c1", 1, "+", 9)], protein_translation="MKV",
                       function="kinase", annotator="rast",
                       annotation="Called by rast\n")
    genome.update_indexes()
    out = write_seed_dir(genome, tmp_path)

    assert read_lines(out / "assigned_functions") == [
        "83333.1.CDS.1\tThr operon leader peptide",
        "83333.1.rna.1\thypothetical protein",
        "83333.1.CDS.2\tkinase",
    ]
    assert (out / "annotations").read_text() == (
        "83333.1.CDS.1\n1600000000\nNobody\nAdd feature\n//\n"
        "83333.1.CDS.2\n1700000000\nrast\nCalled by rast\n//\n"
        "83333.1.CDS.2\n1700000000\nrast\nSet function to kinase\n//\n"
    )


def test_map_cds_to_peg(genome, tmp_path):
    out = write_seed_dir(genome, tmp_path, ExportOptions(map_CDS_to_peg=True))

    assert not (out / "Features" / "CDS").exists()
    assert read_lines(out / "Features" / "peg" / "tbl") == ["83333.1.peg.1\tNC_000913_1_6"]
    assert [r[0] for r in read_sequence_records(out / "Features" / "peg" / "fasta")] == [
        "83333.1.peg.1"
    ]
    assert read_lines(out / "assigned_functions")[0] == "83333.1.peg.1\tThr operon leader peptide"
    assert (out / "annotations").read_text().startswith("83333.1.peg.1\n")


def test_map_cds_to_peg_without_cds_still_creates_peg(genome, tmp_path):
    genome.features = [f for f in genome.features if f.type != "CDS"]
    out = write_seed_dir(genome, tmp_path, ExportOptions(map_CDS_to_peg=True))
    assert (out / "Features" / "peg" / "tbl").read_text() == ""


def test_correct_fig_id(genome):
    feature = genome.find_feature("83333.1.CDS.1")
    assert export_feature_id(feature, ExportOptions(correct_fig_id=True)) == "fig|83333.1.CDS.1"
    assert export_feature_id(
        feature, ExportOptions(correct_fig_id=True, map_CDS_to_peg=True)
    ) == "fig|83333.1.peg.1"

    feature.id = "kb|g.0.CDS.1"
    assert export_feature_id(feature, ExportOptions(correct_fig_id=True)) == "kb|g.0.CDS.1"


def test_custom_functions_file_and_close_genomes(genome, tmp_path):
    genome.close_genomes = [CloseGenome("562.1", 0.98, "Escherichia coli"),
                            CloseGenome("623.2", 412, "Shigella flexneri")]
    genome.taxonomy = None
    out = write_seed_dir(genome, tmp_path, ExportOptions(assigned_functions_file="proposed"))

    assert (out / "proposed").exists()
    assert not (out / "assigned_functions").exists()
    assert not (out / "TAXONOMY").exists()
    assert read_lines(out / "closest.genomes") == [
        "562.1\t0.98\tEscherichia coli",
        "623.2\t412\tShigella flexneri",
    ]


def test_unwritable_file_aborts_export(genome, tmp_path):
    (tmp_path / "annotations").mkdir()
    with pytest.raises(ExportError) as excinfo:
        write_seed_dir(genome, tmp_path)
    assert excinfo.value.path == tmp_path / "annotations"
    # earlier output is left in place
    assert (tmp_path / "contigs").exists()


@pytest.mark.skipif(not os.path.exists("/dev/full"), reason="needs /dev/full")
def test_write_error_aborts_export(genome, tmp_path):
    (tmp_path / "contigs").symlink_to("/dev/full")
    with pytest.raises(ExportError) as excinfo:
        write_seed_dir(genome, tmp_path)
    assert excinfo.value.path == tmp_path / "contigs"
    assert "No space left" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, OSError)


def test_export_with_stale_contig_index_fails(genome, tmp_path):
    genome.contigs[1].id = "renamed"
    genome.update_indexes()
    with pytest.raises(KeyError):
        write_seed_dir(genome, tmp_path)


def test_options_from_config():
    options = ExportOptions.from_config({"export": {"map_CDS_to_peg": True}})
    assert options.map_CDS_to_peg is True
    assert options.correct_fig_id is False
    assert options.assigned_functions_file == "assigned_functions"


def test_write_temp_seed_dir(genome):
    tmp = write_temp_seed_dir(genome)
    try:
        assert (Path(tmp.name) / "contigs").exists()
    finally:
        tmp.cleanup()
