"""
Input validation utilities for the workflow stages.

Provides centralized checks for table inputs so every stage fails before any
computation with an error naming the offending column, value or sample.
"""

from __future__ import annotations
from typing import Any, Iterable, Optional, Sequence
import pandas as pd


def check_frame(frame: Any, name: str = "frame") -> None:
    """Check that input is a pandas DataFrame."""
    if not isinstance(frame, pd.DataFrame):
        raise TypeError(
            f"Expected `{name}` to be a pandas DataFrame, "
            f"got {type(frame).__name__}"
        )


def check_se(se: Any, name: str = "se") -> None:
    """Check that input is a SummarizedExperiment-like object.

    Accepts any object with assays and assay_names attributes
    (duck typing for SE, RSE, SCE).
    """
    required_attrs = ["assays", "assay_names"]
    for attr in required_attrs:
        if not hasattr(se, attr):
            raise TypeError(
                f"Expected `{name}` to be a SummarizedExperiment-like object, "
                f"got {type(se).__name__} which lacks '{attr}'"
            )


def check_assay_exists(se: Any, assay: str) -> None:
    """Check that the specified assay exists in the SummarizedExperiment."""
    if assay not in se.assay_names:
        available = list(se.assay_names)
        raise KeyError(
            f"Assay '{assay}' not found. Available assays: {available}"
        )


def check_columns(frame: pd.DataFrame, columns: Iterable[str], name: str = "table") -> None:
    """Check that every required column is present."""
    missing = [c for c in columns if c not in frame.columns]
    if missing:
        raise KeyError(
            f"Required column(s) {missing} missing from {name}. "
            f"Available columns: {list(frame.columns)}"
        )


def check_unique(values: Sequence, what: str) -> None:
    """Check that a sequence of identifiers has no duplicates."""
    s = pd.Series(list(values))
    dups = s[s.duplicated()].unique().tolist()
    if dups:
        shown = dups[:10]
        raise ValueError(
            f"{len(dups)} duplicated {what}: {shown}"
            + (" ..." if len(dups) > len(shown) else "")
        )


def check_counts(counts: pd.DataFrame, samples: Optional[Sequence[str]] = None) -> None:
    """Check a raw counts table: unique genes, integer non-negative cells."""
    check_frame(counts, "counts")
    check_unique(counts.index, "gene identifiers")
    cols = list(counts.columns) if samples is None else list(samples)
    check_columns(counts, cols, "counts")
    block = counts[cols]
    non_int = [c for c in cols if not pd.api.types.is_integer_dtype(block[c])]
    if non_int:
        raise ValueError(f"Count columns must hold integers, got non-integer columns {non_int}")
    if (block < 0).to_numpy().any():
        raise ValueError("Count table contains negative values")


def check_sample_sets(count_samples: Sequence[str], metadata_samples: Sequence[str]) -> None:
    """Check that counts and metadata describe exactly the same samples."""
    counts_only = sorted(set(count_samples) - set(metadata_samples))
    meta_only = sorted(set(metadata_samples) - set(count_samples))
    if counts_only or meta_only:
        raise ValueError(
            "Sample mismatch between counts and metadata: "
            f"{len(counts_only)} only in counts {counts_only}, "
            f"{len(meta_only)} only in metadata {meta_only}"
        )


def check_nonempty(counts: pd.DataFrame, min_total: int, min_signal: int) -> None:
    """Check that count filtering left at least one gene."""
    if counts.shape[0] == 0:
        raise ValueError(
            "No genes passed count filtering "
            f"(min_total={min_total}, min_signal={min_signal}); "
            "lower the thresholds or check the input counts"
        )


def check_unique_keys(gene_map: pd.DataFrame, key: str) -> None:
    """Check that a gene map has at most one row per identifier."""
    check_frame(gene_map, "gene_map")
    check_columns(gene_map, [key], "gene_map")
    n_dups = int(gene_map[key].duplicated().sum())
    if n_dups:
        raise ValueError(
            f"Gene map has {n_dups} duplicated '{key}' row(s); "
            "deduplicate it with deduplicate_gene_map() before annotating"
        )
