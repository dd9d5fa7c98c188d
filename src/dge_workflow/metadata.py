"""
Normalize the sample metadata table.

The treatment column becomes an ordered categorical drawn from a closed set
of levels, and sample identifiers are rewritten with the same substitution
that is applied to the count table's columns.
"""

from __future__ import annotations
from typing import Iterable, Mapping, Optional, Sequence
import pandas as pd

from .checks import check_columns, check_frame, check_unique
from .config import ConditionConfig, SampleIdConfig


def normalize_sample_id(sample_id: str, separator: str = "-", marker: str = "..") -> str:
    """Replace every ``separator`` in a sample identifier with ``marker``.

    Applied identically to count columns and metadata rows so the two tables
    match by identifier. Already normalized identifiers are returned unchanged.

    Example:
        >>> normalize_sample_id("M12-3")
        'M12..3'
    """
    return str(sample_id).replace(separator, marker)


def denormalize_sample_id(sample_id: str, separator: str = "-", marker: str = "..") -> str:
    """Reverse :func:`normalize_sample_id`."""
    return str(sample_id).replace(marker, separator)


def normalize_sample_ids(
    sample_ids: Iterable[str],
    config: Optional[SampleIdConfig] = None,
) -> list:
    """
    Apply :func:`normalize_sample_id` to a sequence of raw identifiers.

    Raises:
        ValueError: If a raw identifier already contains the marker, which
            :func:`denormalize_sample_id` could not restore.
    """
    config = config or SampleIdConfig()
    sample_ids = [str(s) for s in sample_ids]
    clashing = [s for s in sample_ids if config.marker in s]
    if clashing:
        raise ValueError(
            f"Sample identifier(s) {clashing} already contain the marker "
            f"{config.marker!r}; choose another SampleIdConfig.marker"
        )
    return [normalize_sample_id(s, config.separator, config.marker) for s in sample_ids]


def normalize_condition(
    values: Sequence,
    levels: Sequence[str],
    aliases: Optional[Mapping[str, str]] = None,
) -> pd.Categorical:
    """
    Map raw treatment labels onto an ordered categorical.

    Raw labels found in ``aliases`` are rewritten to their canonical level
    first. The set of levels is closed: anything else is an error.

    Args:
        values: Raw treatment labels, one per sample.
        levels: Canonical level order. The first level is the baseline.
        aliases: Raw label -> canonical label.

    Returns:
        pd.Categorical with ``categories == levels`` and ``ordered=True``.

    Raises:
        ValueError: If a value is missing or not a known label.

    Example:
        >>> normalize_condition(["NaiveTCR75", "Listeria"],
        ...                     ["Naive", "Tolerant", "SingleDST", "Listeria"],
        ...                     {"NaiveTCR75": "Naive"})
        ['Naive', 'Listeria']
        Categories (4, object): ['Naive' < 'Tolerant' < 'SingleDST' < 'Listeria']
    """
    aliases = dict(aliases or {})
    raw = pd.Series(list(values), dtype=object)

    if raw.isna().any():
        raise ValueError(f"{int(raw.isna().sum())} sample(s) have no treatment label")

    labels = raw.astype(str).str.strip().map(lambda v: aliases.get(v, v))
    unknown = sorted(set(labels) - set(levels))
    if unknown:
        raise ValueError(
            f"Unrecognized treatment label(s) {unknown}. "
            f"Allowed levels: {list(levels)}; aliases: {sorted(aliases)}"
        )

    return pd.Categorical(labels, categories=list(levels), ordered=True)


def normalize_metadata(
    raw: pd.DataFrame,
    conditions: Optional[ConditionConfig] = None,
    sample_ids: Optional[SampleIdConfig] = None,
) -> pd.DataFrame:
    """
    Build the normalized metadata table.

    Retains exactly the sample identifier (as the index), the treatment column
    and ``conditions.keep_columns``; every other column is dropped.

    Args:
        raw: Metadata as read from disk, one row per sample.
        conditions: Treatment levels, aliases and retained columns.
        sample_ids: Sample identifier substitution.

    Returns:
        New DataFrame indexed by normalized sample id.

    Raises:
        KeyError: If the sample, treatment or a kept column is missing.
        ValueError: On duplicated samples or unknown treatment labels.
    """
    conditions = conditions or ConditionConfig()
    sample_ids = sample_ids or SampleIdConfig()

    check_frame(raw, "metadata")
    required = [conditions.sample_column, conditions.column, *conditions.keep_columns]
    check_columns(raw, required, "metadata")

    ids = normalize_sample_ids(raw[conditions.sample_column], sample_ids)
    check_unique(ids, "sample identifiers in metadata")

    out = pd.DataFrame(
        {conditions.column: normalize_condition(
            raw[conditions.column], conditions.levels, conditions.aliases
        )},
        index=pd.Index(ids, name=conditions.sample_column),
    )
    for col in conditions.keep_columns:
        out[col] = raw[col].to_numpy()
    return out
