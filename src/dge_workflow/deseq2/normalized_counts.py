"""
Size factors and median-of-ratios normalized counts from a fitted model.
"""

from __future__ import annotations
import pandas as pd

from .checks import check_deseq2_model
from .utils import _r_function
from ..r_utils import r_matrix_to_pandas, r_vector_to_numpy


def size_factors(model) -> pd.Series:
    """
    Per-sample size factors estimated by DESeq2.

    Wraps ``sizeFactors(dds)``.

    Returns:
        pd.Series indexed by sample name.
    """
    check_deseq2_model(model)
    sf = _r_function("sizeFactors")(model.dds)
    return pd.Series(r_vector_to_numpy(sf), index=list(model.sample_names), name="size_factor")


def normalized_counts(model) -> pd.DataFrame:
    """
    Counts divided by the per-sample size factors.

    Wraps ``counts(dds, normalized = TRUE)``. Same genes and samples as the
    fitted counts, real-valued.

    Example:
        >>> norm = deseq2.normalized_counts(model)
        >>> norm.shape == filtered_counts.shape
        True
    """
    check_deseq2_model(model)
    counts_r = _r_function("counts")(model.dds, normalized=True)
    out = r_matrix_to_pandas(counts_r)
    out.index.name = "Geneid"
    return out
