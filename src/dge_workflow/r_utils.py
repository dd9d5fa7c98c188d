"""R dependency management and rpy2 conversion helpers."""

from __future__ import annotations
from typing import Any, Optional, Sequence
import numpy as np
import pandas as pd

# Track which packages have been checked
_checked_packages: set = set()

_RPY2_MISSING = (
    "rpy2 is not installed. Please install it via 'pip install rpy2' "
    "and make sure R is available on the PATH."
)


def _robjects():
    try:
        import rpy2.robjects as ro
    except ImportError:
        raise ImportError(_RPY2_MISSING)
    return ro


def is_r_package_installed(package: str) -> bool:
    """Check whether an R package is installed."""
    try:
        import rpy2.robjects.packages as rpackages
    except ImportError:
        raise ImportError(_RPY2_MISSING)
    return bool(rpackages.isinstalled(package))


def ensure_r_dependencies(packages: Sequence[str]) -> None:
    """
    Checks if required R packages are installed.
    If not, attempts to install them using BiocManager via rpy2.

    Args:
        packages: Sequence of R package names to check/install.
            e.g., ["DESeq2"], ["biomaRt"]

    Example:
        >>> ensure_r_dependencies(["DESeq2"])
    """
    global _checked_packages

    packages_to_check = [pkg for pkg in packages if pkg not in _checked_packages]
    if not packages_to_check:
        return

    try:
        import rpy2.robjects.packages as rpackages
        from rpy2.robjects.vectors import StrVector
    except ImportError:
        raise ImportError(_RPY2_MISSING)

    missing_pkgs = [pkg for pkg in packages_to_check if not rpackages.isinstalled(pkg)]

    if missing_pkgs:
        print(f"Missing R packages detected: {', '.join(missing_pkgs)}")
        print("Attempting to install via BiocManager...")

        utils = rpackages.importr("utils")
        utils.chooseCRANmirror(ind=1)  # Select first mirror automatically

        if not rpackages.isinstalled("BiocManager"):
            utils.install_packages(StrVector(["BiocManager"]))

        bioc_manager = rpackages.importr("BiocManager")
        bioc_manager.install(StrVector(missing_pkgs), ask=False)

        still_missing = [pkg for pkg in missing_pkgs if not rpackages.isinstalled(pkg)]
        if still_missing:
            raise RuntimeError(
                f"Failed to install R packages: {', '.join(still_missing)}"
            )
        print("R packages installed successfully.")

    _checked_packages.update(packages_to_check)


# =============================================================================
# Conversion
# =============================================================================

def numpy_to_r_matrix(
    mat: np.ndarray,
    rownames: Optional[Sequence[str]] = None,
    colnames: Optional[Sequence[str]] = None,
) -> Any:
    """Convert a 2D numpy array to an R matrix with optional dimnames.

    Integer arrays become integer matrices, everything else double.
    """
    ro = _robjects()
    mat = np.asarray(mat)
    if mat.ndim != 2:
        raise ValueError(f"Expected a 2D array, got {mat.ndim} dimensions")

    flat = mat.ravel(order="F").tolist()  # R is column-major
    if np.issubdtype(mat.dtype, np.integer):
        values = ro.IntVector(flat)
    else:
        values = ro.FloatVector(flat)

    dimnames = ro.r["list"](
        ro.StrVector([str(x) for x in rownames]) if rownames is not None else ro.NULL,
        ro.StrVector([str(x) for x in colnames]) if colnames is not None else ro.NULL,
    )
    return ro.r["matrix"](values, nrow=mat.shape[0], ncol=mat.shape[1], dimnames=dimnames)


def pandas_to_r_matrix(df: pd.DataFrame) -> Any:
    return numpy_to_r_matrix(df.to_numpy(), rownames=df.index.to_list(), colnames=df.columns.to_list())


def pandas_to_r_dataframe(df: pd.DataFrame) -> Any:
    """Convert a DataFrame to an R data.frame.

    Categorical columns become factors with the same level order.
    """
    ro = _robjects()
    from rpy2.robjects import pandas2ri
    from rpy2.robjects.conversion import localconverter

    with localconverter(ro.default_converter + pandas2ri.converter):
        return ro.conversion.get_conversion().py2rpy(df)


def r_dataframe_to_pandas(rdf: Any) -> pd.DataFrame:
    """Convert an R data.frame (or anything as.data.frame accepts) to pandas."""
    ro = _robjects()
    from rpy2.robjects import pandas2ri
    from rpy2.robjects.conversion import localconverter

    rdf = ro.baseenv["as.data.frame"](rdf)
    with localconverter(ro.default_converter + pandas2ri.converter):
        return ro.conversion.get_conversion().rpy2py(rdf)


def _is_null(robj: Any) -> bool:
    ro = _robjects()
    return bool(ro.baseenv["is.null"](robj)[0])


def r_matrix_to_pandas(rmat: Any) -> pd.DataFrame:
    """Convert an R matrix with dimnames to a DataFrame."""
    ro = _robjects()
    from rpy2.robjects import numpy2ri
    from rpy2.robjects.conversion import localconverter

    with localconverter(ro.default_converter + numpy2ri.converter):
        arr = np.asarray(ro.conversion.get_conversion().rpy2py(rmat))

    rownames = ro.baseenv["rownames"](rmat)
    colnames = ro.baseenv["colnames"](rmat)
    index = None if _is_null(rownames) else [str(x) for x in rownames]
    columns = None if _is_null(colnames) else [str(x) for x in colnames]
    return pd.DataFrame(arr, index=index, columns=columns)


def r_vector_to_numpy(rvec: Any, dtype=float) -> np.ndarray:
    return np.asarray(list(rvec), dtype=dtype)
