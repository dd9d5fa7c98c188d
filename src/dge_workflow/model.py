"""
Result containers exchanged with the model-fit collaborator.

These hold plain pandas values only, so the workflow, the plot builder and
their tests do not need R.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Tuple
import pandas as pd


@dataclass
class PCAResult:
    """Sample coordinates on the first two principal components.

    Attributes:
        coordinates: DataFrame indexed by sample with ``PC1``, ``PC2`` and
            the grouping column.
        percent_var: Percent of variance explained by PC1 and PC2 (0-100).
        group_col: Name of the grouping column.
    """
    coordinates: pd.DataFrame
    percent_var: Tuple[float, float]
    group_col: str = "Condition"

    def axis_label(self, component: int) -> str:
        """Axis label such as ``PC1: 42% variance``."""
        return f"PC{component}: {round(self.percent_var[component - 1])}% variance"


@dataclass
class ModelFitResult:
    """Everything the workflow needs from the model fit.

    Attributes:
        size_factors: Per-sample size factors.
        normalized: Normalized counts, genes x samples.
        transformed: Variance-stabilized values, genes x samples.
        pca: PCA of the transformed values.
        contrasts: ``"<level>_vs_<baseline>"`` -> Wald results table.
    """
    size_factors: pd.Series
    normalized: pd.DataFrame
    transformed: pd.DataFrame
    pca: PCAResult
    contrasts: Dict[str, pd.DataFrame] = field(default_factory=dict)
