"""
Load and write workflow tables.

Reads the count matrix and the sample metadata from delimited text, aligns
them by sample identifier and wraps them in a SummarizedExperiment for the
model fit.
"""

from __future__ import annotations
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union
import numpy as np
import pandas as pd
from biocframe import BiocFrame
from summarizedexperiment import SummarizedExperiment

from .checks import check_columns, check_counts, check_frame, check_sample_sets, check_unique
from .config import ConditionConfig, SampleIdConfig
from .metadata import normalize_metadata, normalize_sample_ids

PathLike = Union[str, Path]

# featureCounts annotation columns, never samples
AUXILIARY_COLUMNS = ("Chr", "Start", "End", "Strand", "Length")


def load_counts(
    path: PathLike,
    samples: Optional[Sequence[str]] = None,
    gene_column: str = "Geneid",
    sep: str = "\t",
    sample_ids: Optional[SampleIdConfig] = None,
    comment: Optional[str] = "#",
) -> pd.DataFrame:
    """
    Read a genes x samples raw count table.

    Sample column names are normalized with ``sample_ids``. When ``samples``
    is given, only those (normalized) columns are kept, in that order. The
    featureCounts annotation columns (``AUXILIARY_COLUMNS``) are always
    dropped.

    Args:
        path: Delimited text file with a header row.
        samples: Normalized sample identifiers to select. Default: all
            non-gene columns.
        gene_column: Name of the gene identifier column. Default: "Geneid".
        sep: Field delimiter. Default: tab.
        sample_ids: Sample identifier substitution.
        comment: Comment prefix skipped by the parser (featureCounts header).

    Returns:
        DataFrame indexed by gene identifier with integer sample columns.

    Raises:
        KeyError: If the gene column or a requested sample is missing.
        ValueError: On duplicate genes, non-integer or negative counts.
    """
    raw = pd.read_csv(path, sep=sep, comment=comment)
    check_columns(raw, [gene_column], f"counts file {path}")

    counts = raw.set_index(gene_column)
    counts = counts.drop(columns=[c for c in AUXILIARY_COLUMNS if c in counts.columns])
    counts.index = counts.index.astype(str)
    counts.columns = normalize_sample_ids(counts.columns, sample_ids)
    check_unique(counts.columns, "sample columns in counts")

    if samples is not None:
        check_columns(counts, samples, f"counts file {path}")
        counts = counts[list(samples)]

    check_counts(counts)
    return counts


def load_metadata(
    path: PathLike,
    sep: str = "\t",
    conditions: Optional[ConditionConfig] = None,
    sample_ids: Optional[SampleIdConfig] = None,
) -> pd.DataFrame:
    """Read and normalize the sample metadata table.

    See :func:`dge_workflow.metadata.normalize_metadata` for the retained
    columns and the errors raised.
    """
    conditions = conditions or ConditionConfig()
    raw = pd.read_csv(path, sep=sep, dtype={conditions.sample_column: str})
    return normalize_metadata(raw, conditions=conditions, sample_ids=sample_ids)


def align_samples(
    counts: pd.DataFrame,
    metadata: pd.DataFrame,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Match count columns and metadata rows by sample identifier.

    The metadata is reordered to follow the count columns.

    Raises:
        ValueError: If the two tables do not describe the same samples.
    """
    check_frame(counts, "counts")
    check_frame(metadata, "metadata")
    check_sample_sets(list(counts.columns), list(metadata.index))
    return counts.copy(), metadata.loc[list(counts.columns)].copy()


def build_experiment(
    counts: pd.DataFrame,
    metadata: pd.DataFrame,
    assay: str = "counts",
) -> SummarizedExperiment:
    """
    Wrap aligned counts and metadata in a SummarizedExperiment.

    Categorical level orders of the metadata are recorded under
    ``metadata["levels"]`` so the model fit can rebuild ordered factors.

    Args:
        counts: Genes x samples integer counts.
        metadata: Sample table indexed by the same identifiers as ``counts``.
        assay: Assay name for the counts. Default: "counts".

    Returns:
        SummarizedExperiment with the counts assay and column_data.
    """
    counts, metadata = align_samples(counts, metadata)

    column_data = BiocFrame(
        {col: [str(v) if isinstance(metadata[col].dtype, pd.CategoricalDtype) else v
               for v in metadata[col].tolist()]
         for col in metadata.columns},
        row_names=list(metadata.index),
    )
    levels = {
        col: [str(c) for c in metadata[col].cat.categories]
        for col in metadata.columns
        if isinstance(metadata[col].dtype, pd.CategoricalDtype)
    }

    return SummarizedExperiment(
        assays={assay: np.asarray(counts.to_numpy(), dtype=np.int64)},
        row_names=list(counts.index),
        column_names=list(counts.columns),
        column_data=column_data,
        metadata={"levels": levels},
    )


def write_table(frame: pd.DataFrame, path: PathLike, index: bool = False, sep: str = ",") -> Path:
    """Write a table, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, index=index, sep=sep)
    return path
