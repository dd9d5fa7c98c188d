from functools import lru_cache


@lru_cache(maxsize=1)
def _prep_deseq2():
    """Lazily prepare the DESeq2 runtime.

    Returns:
        Tuple[Any, Any]: A tuple ``(ro, deseq2_pkg)`` where ``ro`` is
        ``rpy2.robjects`` and ``deseq2_pkg`` is the imported R ``DESeq2``
        package.

    Notes:
        DESeq2 is also attached to the R search path so the generics it
        re-exports (``counts``, ``sizeFactors``, ``assay``, ``plotPCA``) can be
        looked up by name. The result is cached (LRU) to avoid repeated imports.
    """
    import rpy2.robjects as ro
    from rpy2.robjects.packages import importr

    deseq2_pkg = importr("DESeq2")
    ro.r("suppressPackageStartupMessages(library(DESeq2))")
    return ro, deseq2_pkg


def _r_function(name: str):
    """Look up an R function on the search path (after DESeq2 is attached)."""
    ro, _ = _prep_deseq2()
    return ro.r[name]
