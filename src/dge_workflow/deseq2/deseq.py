"""
Fit the negative binomial GLM using DESeq2::DESeq.

This module provides the DESeq2Model dataclass for storing the fitted
DESeqDataSet and the deseq function for fitting it.
"""

from __future__ import annotations
from typing import Any, Dict, Optional, Sequence, TypeVar
from dataclasses import dataclass
import numpy as np
import pandas as pd

from .utils import _prep_deseq2
from ..checks import check_se, check_assay_exists
from ..r_utils import numpy_to_r_matrix, pandas_to_r_dataframe

# Type variable for SummarizedExperiment variants
SE = TypeVar("SE")


@dataclass
class DESeq2Model:
    """Container for a fitted DESeqDataSet.

    Attributes:
        sample_names: Sample names (column names) from the input SE.
        feature_names: Feature names (row names) from the input SE.
        dds: R DESeqDataSet returned by DESeq().
        design_factor: Name of the explanatory factor.
        levels: Level order of the factor; the first level is the baseline.
        metadata: Optional additional metadata.
    """
    sample_names: Optional[Sequence[str]] = None
    feature_names: Optional[Sequence[str]] = None
    dds: Optional[Any] = None
    design_factor: str = "Condition"
    levels: Optional[Sequence[str]] = None
    metadata: Optional[Dict[str, Any]] = None

    @property
    def baseline(self) -> Optional[str]:
        return self.levels[0] if self.levels else None

    def size_factors(self) -> pd.Series:
        from .normalized_counts import size_factors as _size_factors
        return _size_factors(self)

    def normalized_counts(self) -> pd.DataFrame:
        from .normalized_counts import normalized_counts as _normalized_counts
        return _normalized_counts(self)

    def vst(self, blind: bool = False, method: str = "vst") -> pd.DataFrame:
        """Variance-stabilized expression values (genes x samples)."""
        from .transform import vst as _vst
        return _vst(self, blind=blind, method=method)

    def results(
        self,
        level: str,
        reference: Optional[str] = None,
        alpha: float = 0.1,
    ) -> pd.DataFrame:
        """
        Wald test results of ``level`` against ``reference``.

        Convenience method that delegates to the results function.

        Example:
            >>> model = deseq2.deseq(se)
            >>> res = model.results("Tolerant")
        """
        from .results import results as _results
        return _results(self, level=level, reference=reference, alpha=alpha)


def _column_frame(se: Any, design_factor: str) -> pd.DataFrame:
    """Rebuild the sample table of an SE, restoring categorical level order."""
    coldata = se.get_column_data()
    if coldata is None or design_factor not in coldata.column_names:
        available = [] if coldata is None else list(coldata.column_names)
        raise KeyError(
            f"Design factor '{design_factor}' not found in column_data. "
            f"Available columns: {available}"
        )

    frame = pd.DataFrame(
        {col: list(coldata[col]) for col in coldata.column_names},
        index=[str(s) for s in se.column_names],
    )

    levels = (se.metadata or {}).get("levels", {})
    for col, col_levels in levels.items():
        if col in frame.columns:
            frame[col] = pd.Categorical(frame[col], categories=list(col_levels), ordered=False)

    if not isinstance(frame[design_factor].dtype, pd.CategoricalDtype):
        frame[design_factor] = pd.Categorical(frame[design_factor])

    # Levels without samples make the model matrix rank deficient
    frame[design_factor] = frame[design_factor].cat.remove_unused_categories()
    return frame


def deseq(
    se: SE,
    design_factor: str = "Condition",
    assay: str = "counts",
    fit_type: str = "parametric",
    test: str = "Wald",
    quiet: bool = True,
    **kwargs
) -> DESeq2Model:
    """
    Estimate size factors, dispersions and fit the GLM using DESeq2.

    Wraps ``DESeq2::DESeqDataSetFromMatrix`` followed by ``DESeq2::DESeq``
    with design ``~ <design_factor>``. The first level of the factor is the
    reference level of the model.

    Works with any BiocPy SummarizedExperiment variant (SE, RSE, SCE).

    Args:
        se: SummarizedExperiment with an integer counts assay and the design
            factor in column_data.
        design_factor: Explanatory column of column_data. Default: "Condition".
        assay: Counts assay name. Default: "counts".
        fit_type: Dispersion trend: "parametric", "local", "mean" or "glmGamPoi".
        test: "Wald" or "LRT".
        quiet: Suppress DESeq2 progress messages. Default: True.
        **kwargs: Additional args forwarded to ``DESeq``.

    Returns:
        DESeq2Model: Container with the fitted DESeqDataSet.

    Raises:
        TypeError: If se lacks required attributes.
        KeyError: If the assay or design factor does not exist.
        ValueError: If the factor has fewer than two populated levels.
        RuntimeError: If DESeq2 fails.

    Example:
        >>> from dge_workflow.io import build_experiment
        >>> import dge_workflow.deseq2 as deseq2
        >>> se = build_experiment(filtered_counts, metadata)
        >>> model = deseq2.deseq(se, design_factor="Condition")
    """
    from rpy2.rinterface_lib.embedded import RRuntimeError

    check_se(se)
    check_assay_exists(se, assay)

    coldata = _column_frame(se, design_factor)
    levels = [str(c) for c in coldata[design_factor].cat.categories]
    if len(levels) < 2:
        raise ValueError(
            f"Design factor '{design_factor}' needs at least two populated levels, got {levels}"
        )

    ro, pkg = _prep_deseq2()
    counts = np.asarray(se.assays[assay])
    counts_r = numpy_to_r_matrix(
        counts.astype(np.int64),
        rownames=[str(g) for g in se.row_names],
        colnames=list(coldata.index),
    )
    coldata_r = pandas_to_r_dataframe(coldata)

    try:
        dds = pkg.DESeqDataSetFromMatrix(
            countData=counts_r,
            colData=coldata_r,
            design=ro.Formula(f"~ {design_factor}"),
        )
        dds = pkg.DESeq(dds, test=test, fitType=fit_type, quiet=quiet, **kwargs)
    except RRuntimeError as err:
        raise RuntimeError(
            f"DESeq2 model fit failed for {counts.shape[0]} genes x "
            f"{counts.shape[1]} samples (design ~ {design_factor})"
        ) from err

    return DESeq2Model(
        sample_names=list(coldata.index),
        feature_names=[str(g) for g in se.row_names],
        dds=dds,
        design_factor=design_factor,
        levels=levels,
        metadata={"fit_type": fit_type, "test": test},
    )
