"""
One-call model fit used by the workflow runner.
"""

from __future__ import annotations
import pandas as pd

from .deseq import deseq
from .pca import pca
from ..io import build_experiment
from ..model import ModelFitResult


def fit_model(
    counts: pd.DataFrame,
    metadata: pd.DataFrame,
    design_factor: str = "Condition",
    transform: str = "vst",
    ntop: int = 500,
    contrasts: bool = True,
) -> ModelFitResult:
    """
    Fit DESeq2 and collect normalized, transformed and PCA values.

    Args:
        counts: Filtered genes x samples integer counts.
        metadata: Normalized sample table aligned with ``counts``.
        design_factor: Explanatory column of ``metadata``.
        transform: "vst" or "rlog".
        ntop: Number of most variable genes used for the PCA.
        contrasts: Also compute every level against the baseline.

    Returns:
        ModelFitResult
    """
    se = build_experiment(counts, metadata)
    model = deseq(se, design_factor=design_factor)

    contrast_tables = {}
    if contrasts:
        for level in model.levels[1:]:
            contrast_tables[f"{level}_vs_{model.baseline}"] = model.results(level)

    return ModelFitResult(
        size_factors=model.size_factors(),
        normalized=model.normalized_counts(),
        transformed=model.vst(method=transform),
        pca=pca(model, ntop=ntop, method=transform),
        contrasts=contrast_tables,
    )
