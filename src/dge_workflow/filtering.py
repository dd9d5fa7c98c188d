"""
Pre-filter genes from a raw count table.

A gene is kept when its total count reaches ``min_total`` and the count left
after removing its single largest sample still reaches ``min_signal``. The
second rule drops genes whose signal comes from one outlier sample.
"""

from __future__ import annotations
from typing import Optional, Sequence
import numpy as np
import pandas as pd

from .checks import check_columns, check_frame, check_nonempty
from .config import FilterConfig


def expression_mask(
    counts: pd.DataFrame,
    min_total: int = 500,
    min_signal: int = 500,
    samples: Optional[Sequence[str]] = None,
) -> pd.Series:
    """
    Compute the per-gene keep mask.

    Does NOT modify the table - use the mask to subset manually, or call
    :func:`filter_counts`.

    Args:
        counts: Genes x samples count table.
        min_total: Minimum row sum (inclusive).
        min_signal: Minimum of row sum minus row max (inclusive).
        samples: Sample columns to aggregate over. Default: all columns.

    Returns:
        Boolean Series indexed like ``counts`` (True = keep gene).
    """
    # Validation happens in FilterConfig
    FilterConfig(min_total=min_total, min_signal=min_signal)
    check_frame(counts, "counts")

    cols = list(counts.columns) if samples is None else list(samples)
    check_columns(counts, cols, "counts")

    block = counts[cols].to_numpy()
    if block.shape[1] == 0:
        raise ValueError("Cannot filter counts without any sample columns")

    row_sum = block.sum(axis=1)
    row_max = block.max(axis=1)
    keep = (row_sum >= min_total) & (row_sum - row_max >= min_signal)

    return pd.Series(np.asarray(keep, dtype=bool), index=counts.index, name="keep")


def filter_counts(
    counts: pd.DataFrame,
    min_total: int = 500,
    min_signal: int = 500,
    samples: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """
    Keep the genes passing both count thresholds.

    Args:
        counts: Genes x samples count table.
        min_total: Minimum total reads across ``samples``.
        min_signal: Minimum reads across ``samples`` excluding the largest one.
        samples: Sample columns to aggregate over. Default: all columns.

    Returns:
        New DataFrame with the passing rows and the same columns as ``counts``.

    Raises:
        ValueError: If a threshold is negative, or no gene passes.

    Example:
        >>> filtered = filter_counts(counts, min_total=500, min_signal=500)
    """
    mask = expression_mask(counts, min_total=min_total, min_signal=min_signal, samples=samples)
    filtered = counts.loc[mask.to_numpy()].copy()
    check_nonempty(filtered, min_total, min_signal)
    return filtered
