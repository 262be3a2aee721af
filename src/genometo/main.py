"""Command line interface for GenomeTO."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from genometo import __version__
from genometo.core.exceptions import ConfigurationError, GenomeObjectError
from genometo.genome import GenomeTypedObject, CompactFeature
from genometo.utils.config import (
    load_configuration, create_default_configuration, save_configuration, create_id_allocator
)


def setup_logging(level: str, log_file: Optional[Path] = None) -> None:
    """
    Setup logging configuration.

    Args:
        level: Logging level
        log_file: Optional log file path
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_file) if log_file else logging.NullHandler()
        ],
        force=True
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the GenomeTO CLI."""
    parser = argparse.ArgumentParser(
        prog='genometo',
        description='GenomeTO: inspect and export genome typed object documents',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export a genome document as a SEED genome directory
  genometo export genome.gto out_dir/ --map-cds-to-peg

  # Import features from a tab-separated list
  genometo import-features genome.gto features.tbl -o genome.new.gto

  # Print the DNA of one feature
  genometo dna genome.gto 83333.1.CDS.12

  # Generate config template
  genometo init-config config.yaml
        """.strip()
    )

    parser.add_argument('--config', '-c', type=Path,
                        help='Configuration file (YAML or JSON)')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging verbosity level (default: from config, INFO)')
    parser.add_argument('--log-file', type=Path,
                        help='Also write log messages to this file')
    parser.add_argument('--version', action='version', version=f'GenomeTO {__version__}')

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')

    export_parser = subparsers.add_parser('export', help='Write a SEED genome directory')
    export_parser.add_argument('genome', type=Path, help='Genome document (JSON)')
    export_parser.add_argument('output_dir', type=Path, help='Target directory')
    export_parser.add_argument('--map-cds-to-peg', action='store_true', default=None,
                               help='Write CDS features as peg')
    export_parser.add_argument('--correct-fig-id', action='store_true', default=None,
                               help='Prefix numeric feature ids with fig|')
    export_parser.add_argument('--functions-file', metavar='NAME',
                               help='Name of the function assignment file')

    import_parser = subparsers.add_parser('import-features',
                                          help='Add features from a tab-separated list')
    import_parser.add_argument('genome', type=Path, help='Genome document (JSON)')
    import_parser.add_argument('table', type=Path,
                               help='Lines of id, location, type, function, aliases')
    import_parser.add_argument('--output', '-o', type=Path, required=True,
                               help='Where to write the updated genome document')

    dna_parser = subparsers.add_parser('dna', help='Print the DNA of a feature as FASTA')
    dna_parser.add_argument('genome', type=Path, help='Genome document (JSON)')
    dna_parser.add_argument('feature_ids', nargs='+', metavar='FEATURE_ID')

    summary_parser = subparsers.add_parser('summary', help='Feature counts per type')
    summary_parser.add_argument('genome', type=Path, help='Genome document (JSON)')
    summary_parser.add_argument('--output', '-o', type=Path,
                                help='Write the table here instead of stdout')

    init_parser = subparsers.add_parser('init-config',
                                        help='Create default configuration file and exit')
    init_parser.add_argument('path', type=Path, metavar='FILE')

    return parser


def read_compact_features(path: Path) -> List[CompactFeature]:
    """Read tab-separated ``id, location, type, function, aliases`` lines."""
    features = []
    with open(path, 'r') as f:
        for line_number, line in enumerate(f, 1):
            line = line.rstrip('\n')
            if not line.strip() or line.startswith('#'):
                continue
            fields = line.split('\t')
            if len(fields) < 3:
                raise GenomeObjectError(
                    f"{path}:{line_number}: expected at least id, location and type"
                )
            fields += [''] * (5 - len(fields))
            features.append(tuple(fields[:5]))
    return features


def _load_genome(path: Path, config: Dict[str, Any]) -> GenomeTypedObject:
    genome = GenomeTypedObject.create_from_file(path, id_allocator=create_id_allocator(config))
    return genome.update_indexes()


def cli(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if args.command == 'init-config':
            save_configuration(create_default_configuration(), args.path)
            print(f"Created default configuration: {args.path}")
            return 0

        if args.config:
            config = load_configuration(args.config)
        else:
            config = create_default_configuration()

        setup_logging(args.log_level or config["logging"]["level"],
                      args.log_file or config["logging"].get("file"))

        if args.command == 'export':
            _handle_export(args, config)
        elif args.command == 'import-features':
            _handle_import_features(args, config)
        elif args.command == 'dna':
            _handle_dna(args, config)
        elif args.command == 'summary':
            _handle_summary(args, config)

    except (ConfigurationError, GenomeObjectError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def _handle_export(args: argparse.Namespace, config: Dict[str, Any]) -> None:
    from genometo.modules.export import ExportOptions, write_seed_dir

    options = ExportOptions.from_config(config)
    if args.map_cds_to_peg is not None:
        options.map_CDS_to_peg = args.map_cds_to_peg
    if args.correct_fig_id is not None:
        options.correct_fig_id = args.correct_fig_id
    if args.functions_file:
        options.assigned_functions_file = args.functions_file

    genome = _load_genome(args.genome, config)
    write_seed_dir(genome, args.output_dir, options)
    print(f"Exported {genome.id} to {args.output_dir}")


def _handle_import_features(args: argparse.Namespace, config: Dict[str, Any]) -> None:
    genome = _load_genome(args.genome, config)
    id_map = genome.add_features_from_list(
        read_compact_features(args.table),
        annotator=config["annotation"]["default_annotator"]
    )
    genome.save(args.output)
    for input_id, new_id in id_map.items():
        print(f"{input_id}\t{new_id}")


def _handle_dna(args: argparse.Namespace, config: Dict[str, Any]) -> None:
    from genometo.modules.fasta_io import write_sequence_records

    genome = _load_genome(args.genome, config)
    write_sequence_records(
        sys.stdout,
        [(fid, None, genome.get_feature_dna(fid)) for fid in args.feature_ids]
    )


def _handle_summary(args: argparse.Namespace, config: Dict[str, Any]) -> None:
    from genometo.modules.summary import feature_type_summary, write_summary

    genome = _load_genome(args.genome, config)
    if args.output:
        write_summary(genome, args.output)
    else:
        print(feature_type_summary(genome).to_string(index=False))


def main() -> None:
    sys.exit(cli())


if __name__ == '__main__':
    main()
