"""biomaRt: gene identifier mapping from Ensembl BioMart.

Functional API:
    >>> import dge_workflow.biomart as biomart
    >>> gene_map = biomart.fetch_gene_map(gene_ids, dataset="mmusculus_gene_ensembl")
"""

# Check/install biomaRt R package on module import
from ..r_utils import ensure_r_dependencies
ensure_r_dependencies(["biomaRt"])

from .get_bm import fetch_gene_map

__all__ = [
    "fetch_gene_map",
]
