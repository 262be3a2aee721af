"""Per-type feature statistics."""

import logging
from pathlib import Path
from typing import Union

import pandas as pd

from genometo.genome import GenomeTypedObject


logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    "type", "count", "with_function", "hypothetical", "with_translation", "total_length"
]


def feature_type_summary(genome: GenomeTypedObject) -> pd.DataFrame:
    """
    Summarise the genome's features by type.

    Returns:
        DataFrame with one row per feature type, sorted by type
    """
    rows = []
    for feature in genome.features:
        function = feature.function or ""
        rows.append({
            "type": feature.type,
            "with_function": bool(function),
            "hypothetical": not function or function.lower() == "hypothetical protein",
            "with_translation": bool(feature.protein_translation),
            "length": sum(segment.length for segment in feature.location)
        })

    if not rows:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    df = pd.DataFrame(rows)
    summary = df.groupby("type").agg(
        count=("type", "size"),
        with_function=("with_function", "sum"),
        hypothetical=("hypothetical", "sum"),
        with_translation=("with_translation", "sum"),
        total_length=("length", "sum")
    ).reset_index()
    return summary[SUMMARY_COLUMNS].astype({
        "count": int, "with_function": int, "hypothetical": int,
        "with_translation": int, "total_length": int
    })


def write_summary(genome: GenomeTypedObject, output_file: Union[str, Path]) -> Path:
    """Write :func:`feature_type_summary` as a tab-separated table."""
    output_file = Path(output_file)
    summary = feature_type_summary(genome)
    summary.to_csv(output_file, sep='\t', index=False)
    logger.info(f"Wrote feature summary for {len(summary)} types to {output_file}")
    return output_file
