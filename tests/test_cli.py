"""Smoke tests for the command line interface."""

import json
import os

import pytest

from genometo.main import cli, read_compact_features
from genometo.modules.fasta_io import read_sequence_records


@pytest.fixture
def genome_file(tmp_path, genome_document):
    path = tmp_path / "genome.gto"
    path.write_text(json.dumps(genome_document))
    return path


def test_no_command_prints_help(capsys):
    assert cli([]) == 1
    assert "usage" in capsys.readouterr().out


def test_export(genome_file, tmp_path):
    out = tmp_path / "seed"
    assert cli(["export", str(genome_file), str(out), "--map-cds-to-peg"]) == 0
    assert (out / "Features" / "peg" / "tbl").read_text() == "83333.1.peg.1\tNC_000913_1_6\n"


def test_import_features(genome_file, tmp_path, capsys):
    table = tmp_path / "features.tbl"
    table.write_text("# id\tlocation\ttype\tfunction\taliases\n"
                     "g1\tc1_1_6\tCDS\tkinase\tkinA\n"
                     "g2\tc1_10_8\trna\n")
    out = tmp_path / "updated.gto"

    assert cli(["import-features", str(genome_file), str(table), "-o", str(out)]) == 0
    assert capsys.readouterr().out.splitlines() == [
        "g1\t83333.1.CDS.2",
        "g2\t83333.1.rna.2",
    ]
    document = json.loads(out.read_text())
    assert len(document["features"]) == 4
    assert len(document["analysis_events"]) == 1


def test_dna(genome_file, capsys):
    assert cli(["dna", str(genome_file), "83333.1.rna.1"]) == 0
    assert capsys.readouterr().out == ">83333.1.rna.1\nCAGG\n"


def test_dna_unknown_feature(genome_file, capsys):
    assert cli(["dna", str(genome_file), "missing"]) == 1
    assert "Feature not found: missing" in capsys.readouterr().err


def test_summary_to_file(genome_file, tmp_path):
    out = tmp_path / "summary.tsv"
    assert cli(["summary", str(genome_file), "-o", str(out)]) == 0
    assert out.read_text().splitlines()[0].split("\t")[0] == "type"


def test_init_config(tmp_path):
    path = tmp_path / "config.yaml"
    assert cli(["init-config", str(path)]) == 0
    assert path.exists()


def test_bad_location_reports_error(genome_file, tmp_path, capsys):
    table = tmp_path / "features.tbl"
    table.write_text("g1\tnot-a-location\tCDS\n")
    assert cli(["import-features", str(genome_file), str(table), "-o", str(tmp_path / "o")]) == 1
    assert "Cannot parse location" in capsys.readouterr().err


def test_read_compact_features_pads_missing_columns(tmp_path):
    table = tmp_path / "features.tbl"
    table.write_text("g1\tc1_1_6\tCDS\n\n")
    assert read_compact_features(table) == [("g1", "c1_1_6", "CDS", "", "")]


def test_import_features_with_sqlite_ids(genome_file, tmp_path, capsys):
    config = tmp_path / "config.yaml"
    config.write_text("id_allocation:\n"
                      "  backend: sqlite\n"
                      f"  database: {tmp_path / 'ids.sqlite'}\n")
    table = tmp_path / "features.tbl"
    table.write_text("g1\tc1_1_6\tCDS\n")
    out = tmp_path / "updated.gto"

    assert cli(["--config", str(config), "import-features", str(genome_file), str(table),
                "-o", str(out)]) == 0
    assert capsys.readouterr().out.splitlines() == ["g1\t83333.1.CDS.2"]
    ids = [feature["id"] for feature in json.loads(out.read_text())["features"]]
    assert len(ids) == len(set(ids))


@pytest.mark.skipif(not os.path.exists("/dev/full"), reason="needs /dev/full")
def test_export_write_failure_reports_error(genome_file, tmp_path, capsys):
    out = tmp_path / "seed"
    out.mkdir()
    (out / "contigs").symlink_to("/dev/full")
    assert cli(["export", str(genome_file), str(out)]) == 1
    assert "Error: Cannot create" in capsys.readouterr().err
