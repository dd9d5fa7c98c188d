"""dge_workflow: single-pass RNA-seq differential expression workflow.

Count filtering, metadata normalization, gene annotation and PCA styling in
Python; the negative binomial model fit (DESeq2) and identifier mapping
(biomaRt) run in R through rpy2 and are loaded lazily so the R dependency
check only happens when they are needed.

Usage:
    >>> import dge_workflow as dge
    >>> filtered = dge.filter_counts(counts, min_total=500, min_signal=500)
    >>> # DESeq2 is NOT loaded yet - no R dependency check
    >>>
    >>> import dge_workflow.deseq2  # NOW DESeq2 is checked/installed
    >>> model = dge.deseq2.deseq(se)
"""

from __future__ import annotations

import importlib

# Core exports that don't require R
from .aesthetics import COLOR_PALETTE, SHAPE_PALETTE, TreatmentStyle, treatment_aesthetics
from .annotation import (
    annotate,
    annotate_checked,
    canonicalize_column_name,
    canonicalize_columns,
    deduplicate_gene_map,
)
from .config import (
    AestheticsConfig,
    AnnotationConfig,
    ConditionConfig,
    FilterConfig,
    SampleIdConfig,
    WorkflowConfig,
)
from .filtering import expression_mask, filter_counts
from .io import align_samples, build_experiment, load_counts, load_metadata
from .metadata import (
    denormalize_sample_id,
    normalize_condition,
    normalize_metadata,
    normalize_sample_id,
)
from .model import ModelFitResult, PCAResult
from .pca_plot import pca_plot
from .r_utils import ensure_r_dependencies
from .workflow import WorkflowResult, run_workflow

__all__ = [
    "COLOR_PALETTE",
    "SHAPE_PALETTE",
    "TreatmentStyle",
    "treatment_aesthetics",
    "annotate",
    "annotate_checked",
    "canonicalize_column_name",
    "canonicalize_columns",
    "deduplicate_gene_map",
    "AestheticsConfig",
    "AnnotationConfig",
    "ConditionConfig",
    "FilterConfig",
    "SampleIdConfig",
    "WorkflowConfig",
    "expression_mask",
    "filter_counts",
    "align_samples",
    "build_experiment",
    "load_counts",
    "load_metadata",
    "denormalize_sample_id",
    "normalize_condition",
    "normalize_metadata",
    "normalize_sample_id",
    "ModelFitResult",
    "PCAResult",
    "pca_plot",
    "ensure_r_dependencies",
    "WorkflowResult",
    "run_workflow",
    # Lazy-loaded submodules
    "deseq2",
    "biomart",
]

# Submodules to be lazily loaded
_LAZY_SUBMODULES = {"deseq2", "biomart"}


def __getattr__(name: str):
    """Lazy loading of submodules per PEP 562."""
    if name in _LAZY_SUBMODULES:
        module = importlib.import_module(f".{name}", __name__)
        globals()[name] = module
        return module
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    """Include lazy submodules in dir() output."""
    return list(__all__)
