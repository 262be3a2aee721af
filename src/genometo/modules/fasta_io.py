"""FASTA record reading and writing."""

import logging
from pathlib import Path
from typing import IO, Iterable, Iterator, Optional, Tuple, Union

from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord


logger = logging.getLogger(__name__)

# (id, description, sequence)
SequenceRecord = Tuple[str, Optional[str], str]


def read_sequence_records(source: Union[str, Path, IO[str]]) -> Iterator[SequenceRecord]:
    """
    Iterate over the records of a FASTA file.

    Args:
        source: Path or open text handle

    Yields:
        ``(id, description, sequence)``; description is None when the
        header holds only the id
    """
    if isinstance(source, (str, Path)):
        source = str(source)
    for record in SeqIO.parse(source, "fasta"):
        description = record.description
        if description == record.id:
            description = None
        elif description.startswith(record.id + " "):
            description = description[len(record.id) + 1:]
        yield record.id, description, str(record.seq)


def write_sequence_records(handle: IO[str], records: Iterable[SequenceRecord]) -> int:
    """
    Write records to an open handle in FASTA format.

    Returns:
        Number of records written
    """
    seq_records = (
        SeqRecord(Seq(sequence), id=seq_id, description=description or "")
        for seq_id, description, sequence in records
    )
    return SeqIO.write(seq_records, handle, "fasta")


def write_fasta_file(path: Union[str, Path], records: Iterable[SequenceRecord]) -> Path:
    """Write records to ``path``, replacing any existing file."""
    path = Path(path)
    with open(path, 'w') as f:
        count = write_sequence_records(f, records)
    logger.debug(f"Wrote {count} sequences to {path}")
    return path
