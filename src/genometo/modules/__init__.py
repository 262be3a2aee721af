"""Readers, writers and exporters built on the genome typed object."""

from . import fasta_io
from . import export
from . import extraction
from . import summary
