"""
Genome Typed Object toolkit

An in-memory model of an annotated genome (contigs, features, annotations and
analysis events) with indexed lookup, feature DNA extraction and export to a
SEED-style genome directory.
"""

__version__ = "1.0.0"
__author__ = "GenomeTO Team"
