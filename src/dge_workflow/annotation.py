"""
Annotate gene-keyed tables with external identifiers.

Left-joins a gene map (one row per Ensembl gene id) onto any table keyed by
gene identifier and renames the known annotation columns to short canonical
names.

Usage:
    >>> gene_map = deduplicate_gene_map(raw_map)
    >>> annotated = annotate(transformed, gene_map, results_key="Geneid")
"""

from __future__ import annotations
import unicodedata
from typing import Dict
import pandas as pd

from .checks import check_columns, check_frame, check_unique_keys


def _fold(name: str) -> str:
    """Case, width and accent insensitive comparison key."""
    decomposed = unicodedata.normalize("NFKD", str(name))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


CANONICAL_NAMES: Dict[str, str] = {
    "ensembl_gene_id": "GeneID",
    "mgi_symbol": "MGI_Symbol",
    "mgi_description": "MGI_Desc",
    "gene_biotype": "GeneType",
    "entrezgene_id": "EntrezID",
    "go_id": "GO_ID",
}

_CANONICAL_BY_KEY: Dict[str, str] = {_fold(k): v for k, v in CANONICAL_NAMES.items()}


def canonicalize_column_name(name: str) -> str:
    """
    Map a known annotation column name to its canonical short name.

    Comparison ignores case, character width and accents; unknown names are
    returned unchanged.

    Example:
        >>> canonicalize_column_name("Ensembl_Gene_ID")
        'GeneID'
        >>> canonicalize_column_name("log2_fc")
        'log2_fc'
    """
    # Exact match only, so "Geneid" is not folded onto "GeneID"
    if name in _CANONICAL_BY_KEY.values():
        return name
    return _CANONICAL_BY_KEY.get(_fold(name), name)


def canonicalize_columns(frame: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``frame`` with every column name canonicalized."""
    check_frame(frame)
    return frame.rename(columns=lambda c: canonicalize_column_name(c) if isinstance(c, str) else c)


def deduplicate_gene_map(gene_map: pd.DataFrame, key: str = "ensembl_gene_id") -> pd.DataFrame:
    """Keep the first row of every gene identifier."""
    check_frame(gene_map, "gene_map")
    check_columns(gene_map, [key], "gene_map")
    return gene_map.drop_duplicates(subset=key, keep="first").reset_index(drop=True)


def annotate(
    results: pd.DataFrame,
    gene_map: pd.DataFrame,
    results_key: str = "Geneid",
    map_key: str = "ensembl_gene_id",
) -> pd.DataFrame:
    """
    Left-join a gene map onto a gene-keyed table.

    Every row of ``results`` appears exactly once in the output, in the same
    order. Rows without a match get missing values in all joined columns.
    All output columns are passed through :func:`canonicalize_column_name`.

    The gene map must already have unique keys (see
    :func:`deduplicate_gene_map`); this is not re-checked here. Use
    :func:`annotate_checked` to validate first.

    Args:
        results: Table holding ``results_key`` as a column or as its index name.
        gene_map: Identifier map holding ``map_key`` as a column.
        results_key: Gene identifier column of ``results``.
        map_key: Gene identifier column of ``gene_map``. When it differs from
            ``results_key`` it is dropped after the join.

    Returns:
        New annotated DataFrame with a fresh RangeIndex.

    Raises:
        KeyError: If either key column is missing.
    """
    check_frame(results, "results")
    check_frame(gene_map, "gene_map")

    if results_key not in results.columns:
        if results.index.name == results_key:
            results = results.reset_index()
        else:
            raise KeyError(
                f"Gene identifier column '{results_key}' not found in results "
                f"(columns: {list(results.columns)}, index: {results.index.name!r})"
            )
    check_columns(gene_map, [map_key], "gene_map")

    left = results.reset_index(drop=True)
    right = gene_map
    # Avoid suffixing when a non-key column exists on both sides
    overlap = [c for c in right.columns if c in left.columns and c not in (results_key, map_key)]
    if overlap:
        right = right.drop(columns=overlap)

    if results_key == map_key:
        merged = left.merge(right, how="left", on=results_key)
    else:
        if map_key in left.columns:
            right = right.rename(columns={map_key: f"{map_key}__map"})
            right_key = f"{map_key}__map"
        else:
            right_key = map_key
        merged = left.merge(right, how="left", left_on=results_key, right_on=right_key)
        merged = merged.drop(columns=right_key)

    return canonicalize_columns(merged)


def annotate_checked(
    results: pd.DataFrame,
    gene_map: pd.DataFrame,
    results_key: str = "Geneid",
    map_key: str = "ensembl_gene_id",
) -> pd.DataFrame:
    """
    Validate the gene map, then :func:`annotate`.

    Raises:
        ValueError: If ``gene_map`` has duplicated identifiers (the message
            carries the number of duplicates).
    """
    check_unique_keys(gene_map, map_key)
    annotated = annotate(results, gene_map, results_key=results_key, map_key=map_key)
    if len(annotated) != len(results):
        raise RuntimeError(
            f"Annotation changed the row count from {len(results)} to {len(annotated)}"
        )
    return annotated
