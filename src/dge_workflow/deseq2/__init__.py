"""DESeq2: negative binomial GLM fit for RNA-seq counts.

This module provides Python wrappers for the R DESeq2 package via rpy2:
size factors, dispersion estimation and GLM fit, normalized counts,
variance-stabilizing transforms, PCA coordinates and Wald test results.

Functional API:
    >>> import dge_workflow.deseq2 as deseq2
    >>> model = deseq2.deseq(se, design_factor="Condition")
    >>> norm = deseq2.normalized_counts(model)
    >>> vsd = deseq2.vst(model)
    >>> coords = deseq2.pca(model, ntop=500)
    >>> res = deseq2.results(model, "Listeria")
"""

# Check/install DESeq2 R package on module import
from ..r_utils import ensure_r_dependencies
ensure_r_dependencies(["DESeq2"])

from .deseq import deseq, DESeq2Model
from .normalized_counts import normalized_counts, size_factors
from .transform import vst
from .pca import pca
from .results import results
from .fit import fit_model
from ..model import ModelFitResult, PCAResult

__all__ = [
    # Functional API
    "deseq",
    "size_factors",
    "normalized_counts",
    "vst",
    "pca",
    "results",
    "fit_model",
    # Model classes
    "DESeq2Model",
    "ModelFitResult",
    "PCAResult",
]
