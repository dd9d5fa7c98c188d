"""
Input validation utilities for DESeq2 functions.
"""

from __future__ import annotations
from typing import Any


def check_deseq2_model(model: Any) -> None:
    """Check that input is a DESeq2Model with a fitted DESeqDataSet."""
    from .deseq import DESeq2Model
    if not isinstance(model, DESeq2Model):
        raise TypeError(
            f"Expected a DESeq2Model, got {type(model).__name__}"
        )
    if model.dds is None:
        raise ValueError("DESeq2Model.dds is None - model has not been fitted")


def check_level(model: Any, level: str, name: str = "level") -> None:
    """Check that a factor level was part of the fit."""
    if model.levels is not None and level not in model.levels:
        raise ValueError(
            f"Unknown {name} {level!r} for factor '{model.design_factor}'. "
            f"Fitted levels: {list(model.levels)}"
        )


def check_transform_method(method: str) -> None:
    if method not in ("vst", "rlog"):
        raise ValueError(f"`method` must be 'vst' or 'rlog', got {method!r}")
