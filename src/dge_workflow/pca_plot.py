"""Scatter plot of samples on the first two principal components."""

from typing import Optional, Tuple

import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

from .aesthetics import AESTHETIC_COLUMNS, MARKERS
from .model import PCAResult


def pca_plot(
    pca: PCAResult,
    aesthetics: pd.DataFrame,
    group_col: Optional[str] = None,
    figsize: Tuple[float, float] = (7, 6),
    title: str = "PCA of variance-stabilized counts",
    save_path: Optional[str] = None,
    **kwargs
) -> plt.Figure:
    """
    Plot samples on PC1/PC2, styled per treatment.

    Args:
        pca: PCA coordinates and percent variance explained.
        aesthetics: Styling table from ``treatment_aesthetics`` (columns
            label, fill, shape, outline).
        group_col: Grouping column of ``pca.coordinates``. Default:
            ``pca.group_col``.
        figsize: Figure size tuple (default: (7, 6))
        title: Plot title
        save_path: Path to save figure (optional)
        **kwargs: Additional arguments for customization
            - point_size: Size of points (default: 120)
            - edge_width: Outline width (default: 1.2)
            - text_color: Color for axis text (default: '#2c3e50' - dark)
            - dpi: DPI for saved figure (default: 300)

    Returns:
        matplotlib.figure.Figure: The figure object

    Raises:
        KeyError: If a column is missing from either table.
        ValueError: If a plotted group has no styling row.

    Examples:
        >>> aes = treatment_aesthetics(metadata["Condition"])
        >>> fig = pca_plot(fit.pca, aes, title="Tolerance vs infection")
    """
    point_size = kwargs.get('point_size', 120)
    edge_width = kwargs.get('edge_width', 1.2)
    text_color = kwargs.get('text_color', '#2c3e50')  # Dark blue-gray
    dpi = kwargs.get('dpi', 300)

    group_col = group_col or pca.group_col
    coords = pca.coordinates
    for col in ("PC1", "PC2", group_col):
        if col not in coords.columns:
            raise KeyError(f"Column '{col}' missing from PCA coordinates")
    missing_aes = [c for c in AESTHETIC_COLUMNS if c not in aesthetics.columns]
    if missing_aes:
        raise KeyError(f"Aesthetics table lacks columns {missing_aes}")

    groups = coords[group_col].astype(str)
    unstyled = sorted(set(groups) - set(aesthetics["label"]))
    if unstyled:
        raise ValueError(f"No styling row for group(s) {unstyled}")

    with sns.axes_style("whitegrid"):
        fig, ax = plt.subplots(figsize=figsize, dpi=100)

        # One series per styling row keeps legend order = sorted label order
        for row in aesthetics.itertuples(index=False):
            sub = coords[groups == row.label]
            if sub.empty:
                continue
            ax.scatter(
                sub["PC1"],
                sub["PC2"],
                s=point_size,
                marker=MARKERS[row.shape],
                facecolors=row.fill,
                edgecolors=row.outline,
                linewidths=edge_width,
                label=row.label,
                zorder=2,
            )

        ax.set_xlabel(pca.axis_label(1), fontsize=13, fontweight='bold', color=text_color)
        ax.set_ylabel(pca.axis_label(2), fontsize=13, fontweight='bold', color=text_color)
        ax.set_title(title, fontsize=15, fontweight='bold', color=text_color, pad=20)

        ax.tick_params(colors=text_color, labelsize=11)
        ax.legend(
            title=group_col,
            loc='best',
            frameon=True,
            fontsize=10,
            framealpha=0.95,
        )
        sns.despine(ax=ax)

        plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=dpi, bbox_inches='tight', facecolor='white')
        print(f"Figure saved to: {save_path}")

    return fig
