"""
Per-treatment plot styling.

Builds the table of fill color, marker shape and outline color used by the
PCA plot, one row per treatment label. Styles come from an explicit
label -> style mapping that must cover exactly the labels present in the data.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping
import pandas as pd

# Color palette: id -> color name (matplotlib named colors)
COLOR_PALETTE: Dict[int, str] = {
    1: "black",
    2: "white",
    3: "red",
    4: "green",
    5: "blue",
    6: "purple",
    7: "orange",
    8: "grey",
    9: "brown",
    10: "pink",
    11: "gold",
    12: "cyan",
}

# Shape palette: id -> description (ggplot2 point shape codes)
SHAPE_PALETTE: Dict[int, str] = {
    0: "open square",
    1: "open circle",
    2: "open triangle",
    3: "plus",
    4: "cross",
    5: "open diamond",
    15: "filled square",
    16: "filled circle",
    17: "filled triangle",
    18: "filled diamond",
    21: "fillable circle",
    22: "fillable square",
    23: "fillable diamond",
    24: "fillable triangle",
    25: "fillable triangle down",
}

# Shape description -> matplotlib marker
MARKERS: Dict[str, str] = {
    "open square": "s",
    "open circle": "o",
    "open triangle": "^",
    "plus": "+",
    "cross": "x",
    "open diamond": "D",
    "filled square": "s",
    "filled circle": "o",
    "filled triangle": "^",
    "filled diamond": "D",
    "fillable circle": "o",
    "fillable square": "s",
    "fillable diamond": "D",
    "fillable triangle": "^",
    "fillable triangle down": "v",
}

AESTHETIC_COLUMNS = ["label", "fill", "shape", "outline"]


@dataclass(frozen=True)
class TreatmentStyle:
    """Fill color, marker shape and outline color of one treatment.

    Colors must be names from ``COLOR_PALETTE`` and the shape a description
    from ``SHAPE_PALETTE``.
    """
    fill: str
    shape: str = "fillable triangle"
    outline: str = "black"

    def __post_init__(self) -> None:
        colors = set(COLOR_PALETTE.values())
        for attr in ("fill", "outline"):
            value = getattr(self, attr)
            if value not in colors:
                raise ValueError(
                    f"Unknown {attr} color {value!r}. Palette: {sorted(colors)}"
                )
        if self.shape not in SHAPE_PALETTE.values():
            raise ValueError(
                f"Unknown shape {self.shape!r}. Palette: {sorted(SHAPE_PALETTE.values())}"
            )

    @property
    def marker(self) -> str:
        """matplotlib marker for this shape."""
        return MARKERS[self.shape]


def default_styles() -> Dict[str, TreatmentStyle]:
    """Styles of the four reference treatments.

    Every treatment uses the same fillable triangle; only the fill color
    tells them apart.
    """
    fills = {
        "Listeria": "black",
        "Naive": "green",
        "SingleDST": "white",
        "Tolerant": "purple",
    }
    return {label: TreatmentStyle(fill=color) for label, color in fills.items()}


def treatment_aesthetics(
    labels: Iterable[str],
    styles: Mapping[str, TreatmentStyle] = None,
) -> pd.DataFrame:
    """
    Build the styling table for the treatments present in the data.

    Args:
        labels: Treatment label of every sample (duplicates allowed).
        styles: Label -> TreatmentStyle. Default: :func:`default_styles`.

    Returns:
        DataFrame with columns ``label, fill, shape, outline``; row ``i``
        describes the ``i``-th label in sorted, de-duplicated order.

    Raises:
        ValueError: If the configured labels differ from the observed ones.

    Example:
        >>> aes = treatment_aesthetics(metadata["Condition"])
        >>> aes["label"].tolist()
        ['Listeria', 'Naive', 'SingleDST', 'Tolerant']
    """
    if styles is None:
        styles = default_styles()

    observed = sorted({str(label) for label in labels})
    missing = [label for label in observed if label not in styles]
    unexpected = sorted(set(styles) - set(observed))
    if missing or unexpected:
        raise ValueError(
            "Treatment styles do not match the observed labels: "
            f"no style for {missing}, styles for absent labels {unexpected}"
        )

    rows = [
        {
            "label": label,
            "fill": styles[label].fill,
            "shape": styles[label].shape,
            "outline": styles[label].outline,
        }
        for label in observed
    ]
    return pd.DataFrame(rows, columns=AESTHETIC_COLUMNS)
