"""
Fetch a gene identifier map from Ensembl BioMart using biomaRt::getBM.
"""

from __future__ import annotations
from functools import lru_cache
from typing import Iterable, Optional, Sequence
import pandas as pd

from ..annotation import deduplicate_gene_map
from ..config import DEFAULT_ATTRIBUTES


@lru_cache(maxsize=1)
def _prep_biomart():
    """Lazily import the R ``biomaRt`` package.

    Returns:
        Tuple[Any, Any]: ``(ro, biomart_pkg)``
    """
    import rpy2.robjects as ro
    from rpy2.robjects.packages import importr
    return ro, importr("biomaRt")


def fetch_gene_map(
    gene_ids: Iterable[str],
    dataset: str = "mmusculus_gene_ensembl",
    attributes: Sequence[str] = DEFAULT_ATTRIBUTES,
    filter_name: str = "ensembl_gene_id",
    mirror: Optional[str] = None,
) -> pd.DataFrame:
    """
    Query Ensembl BioMart for annotation attributes of a set of genes.

    Wraps ``biomaRt::useEnsembl`` and ``biomaRt::getBM``. Genes returned more
    than once (one row per GO term, several Entrez ids) keep their first row.

    Args:
        gene_ids: Ensembl gene identifiers to look up.
        dataset: BioMart dataset. Default: mouse genes.
        attributes: Attributes to retrieve; must include ``filter_name``.
        filter_name: Attribute the identifiers are matched on.
        mirror: Optional Ensembl mirror ("useast", "asia", "www").

    Returns:
        pd.DataFrame with one row per matched gene and one column per
        attribute.

    Raises:
        ValueError: If ``gene_ids`` is empty or ``attributes`` lacks the filter.
        RuntimeError: If the BioMart query fails.

    Example:
        >>> import dge_workflow.biomart as biomart
        >>> gene_map = biomart.fetch_gene_map(filtered.index)
    """
    from rpy2.rinterface_lib.embedded import RRuntimeError
    from ..r_utils import r_dataframe_to_pandas

    ids = sorted({str(g) for g in gene_ids})
    if not ids:
        raise ValueError("No gene identifiers to look up")
    attributes = list(attributes)
    if filter_name not in attributes:
        raise ValueError(f"`attributes` must include the filter attribute {filter_name!r}")

    ro, pkg = _prep_biomart()
    mart_kwargs = {"biomart": "genes", "dataset": dataset}
    if mirror is not None:
        mart_kwargs["mirror"] = mirror

    try:
        mart = pkg.useEnsembl(**mart_kwargs)
        table_r = pkg.getBM(
            attributes=ro.StrVector(attributes),
            filters=filter_name,
            values=ro.StrVector(ids),
            mart=mart,
        )
    except RRuntimeError as err:
        raise RuntimeError(
            f"BioMart query failed for dataset '{dataset}' ({len(ids)} gene ids)"
        ) from err

    df = r_dataframe_to_pandas(table_r).reset_index(drop=True)
    # BioMart encodes missing text as empty strings
    df = df.replace({"": None})
    return deduplicate_gene_map(df, key=filter_name)
