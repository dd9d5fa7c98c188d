"""
Principal components of transformed counts using DESeq2::plotPCA.
"""

from __future__ import annotations
import pandas as pd

from .checks import check_deseq2_model
from .transform import _transform_r
from .utils import _prep_deseq2, _r_function
from ..model import PCAResult
from ..r_utils import r_dataframe_to_pandas, r_vector_to_numpy


def pca(model, blind: bool = False, ntop: int = 500, method: str = "vst") -> PCAResult:
    """
    PCA of the ``ntop`` most variable genes after a variance-stabilizing
    transform.

    Wraps ``plotPCA(..., returnData = TRUE)`` and its ``percentVar``
    attribute; nothing is plotted here.

    Args:
        model: Fitted DESeq2Model.
        blind: Passed to the transform. Default: False.
        ntop: Number of most variable genes used. Default: 500.
        method: "vst" or "rlog". Default: "vst".

    Returns:
        PCAResult
    """
    from rpy2.rinterface_lib.embedded import RRuntimeError

    check_deseq2_model(model)
    ro, _ = _prep_deseq2()
    transformed = _transform_r(model, blind=blind, method=method)

    try:
        pca_r = _r_function("plotPCA")(
            transformed,
            intgroup=ro.StrVector([model.design_factor]),
            ntop=ntop,
            returnData=True,
        )
    except RRuntimeError as err:
        raise RuntimeError(f"DESeq2 plotPCA failed (ntop={ntop})") from err

    percent = r_vector_to_numpy(ro.baseenv["attr"](pca_r, "percentVar")) * 100

    df = r_dataframe_to_pandas(pca_r)
    coords = pd.DataFrame(
        {
            "PC1": df["PC1"].to_numpy(dtype=float),
            "PC2": df["PC2"].to_numpy(dtype=float),
            model.design_factor: pd.Categorical(
                df[model.design_factor].astype(str), categories=list(model.levels)
            ),
        },
        index=pd.Index(df["name"].astype(str), name="SampleID"),
    )
    return PCAResult(
        coordinates=coords,
        percent_var=(float(percent[0]), float(percent[1])),
        group_col=model.design_factor,
    )
