"""
Extract Wald test results using DESeq2::results.

This module provides a functional interface to extract the results of one
contrast as a pandas DataFrame.
"""

from __future__ import annotations
from typing import Optional
import pandas as pd

from .checks import check_deseq2_model, check_level
from .utils import _prep_deseq2
from ..r_utils import r_dataframe_to_pandas


def results(
    model,
    level: str,
    reference: Optional[str] = None,
    alpha: float = 0.1,
    **kwargs
) -> pd.DataFrame:
    """
    Wald test of one factor level against a reference level.

    Wraps ``DESeq2::results(dds, contrast = c(factor, level, reference))``.
    Returns a DataFrame with standardized column names for convenient
    downstream analysis.

    Args:
        model: Fitted DESeq2Model.
        level: Numerator level.
        reference: Denominator level. Default: the baseline (first level).
        alpha: Significance cutoff used for independent filtering.
        **kwargs: Additional args forwarded to R function.

    Returns:
        pd.DataFrame: Results table with standardized columns:
            - gene: gene identifier
            - base_mean: mean of normalized counts
            - log2_fc: log2 fold-change (level / reference)
            - lfc_se: standard error of log2_fc
            - stat: Wald statistic
            - p_value: raw p-value
            - adj_p_value: BH adjusted p-value

    Example:
        >>> res = deseq2.results(model, "Listeria")
        >>> res[res["adj_p_value"] < 0.05]
    """
    from rpy2.rinterface_lib.embedded import RRuntimeError

    check_deseq2_model(model)
    reference = reference if reference is not None else model.baseline
    check_level(model, level)
    check_level(model, reference, name="reference")
    if level == reference:
        raise ValueError(f"`level` and `reference` are both {level!r}")

    ro, pkg = _prep_deseq2()
    contrast = ro.StrVector([model.design_factor, level, reference])

    try:
        res_r = pkg.results(model.dds, contrast=contrast, alpha=alpha, **kwargs)
    except RRuntimeError as err:
        raise RuntimeError(
            f"DESeq2 results failed for {model.design_factor}: {level} vs {reference}"
        ) from err

    df = r_dataframe_to_pandas(res_r)
    df = df.reset_index(names="gene")
    df = df.rename(columns={
        "baseMean": "base_mean",
        "log2FoldChange": "log2_fc",
        "lfcSE": "lfc_se",
        "pvalue": "p_value",
        "padj": "adj_p_value",
    })

    return df
