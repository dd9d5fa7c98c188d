"""
Variance-stabilizing transforms using DESeq2::vst / DESeq2::rlog.
"""

from __future__ import annotations
from typing import Any
import pandas as pd

from .checks import check_deseq2_model, check_transform_method
from .utils import _prep_deseq2, _r_function
from ..r_utils import r_matrix_to_pandas

# vst() fits the dispersion trend on a subset of this many genes
_VST_NSUB = 1000


def _transform_r(model, blind: bool = False, method: str = "vst") -> Any:
    """Run the transform and return the R DESeqTransform object."""
    from rpy2.rinterface_lib.embedded import RRuntimeError

    check_deseq2_model(model)
    check_transform_method(method)
    _, pkg = _prep_deseq2()

    try:
        if method == "rlog":
            return pkg.rlog(model.dds, blind=blind)
        if len(model.feature_names) < _VST_NSUB:
            # vst() refuses fewer rows than its subsample size
            return pkg.varianceStabilizingTransformation(model.dds, blind=blind)
        return pkg.vst(model.dds, blind=blind, nsub=_VST_NSUB)
    except RRuntimeError as err:
        raise RuntimeError(
            f"DESeq2 {method} transform failed for {len(model.feature_names)} genes"
        ) from err


def vst(model, blind: bool = False, method: str = "vst") -> pd.DataFrame:
    """
    Variance-stabilized expression values.

    Wraps ``DESeq2::vst`` (or ``DESeq2::rlog`` with ``method="rlog"``) and
    extracts ``assay()`` of the result.

    Args:
        model: Fitted DESeq2Model.
        blind: Ignore the design when estimating dispersions. Default: False.
        method: "vst" or "rlog". Default: "vst".

    Returns:
        pd.DataFrame: genes x samples on a log2-like scale.
    """
    transformed = _transform_r(model, blind=blind, method=method)
    out = r_matrix_to_pandas(_r_function("assay")(transformed))
    out.index.name = "Geneid"
    return out
