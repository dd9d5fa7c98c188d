"""
Configuration dataclasses for the differential expression workflow.

Every threshold, file path and palette choice of a run lives here as a
named parameter. Each dataclass validates itself on construction so a bad
configuration fails before any table is loaded.

Usage:
    >>> from dge_workflow.config import WorkflowConfig, FilterConfig
    >>> cfg = WorkflowConfig(
    ...     counts_path="counts.tsv",
    ...     metadata_path="samples.tsv",
    ...     filter=FilterConfig(min_total=500, min_signal=500),
    ... )
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union

from .aesthetics import TreatmentStyle, default_styles

PathLike = Union[str, Path]

DEFAULT_LEVELS: Tuple[str, ...] = ("Naive", "Tolerant", "SingleDST", "Listeria")
DEFAULT_ALIASES: Dict[str, str] = {"NaiveTCR75": "Naive"}

DEFAULT_ATTRIBUTES: Tuple[str, ...] = (
    "ensembl_gene_id",
    "mgi_symbol",
    "mgi_description",
    "gene_biotype",
    "entrezgene_id",
)


def _check_threshold(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"`{name}` must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"`{name}` must be non-negative, got {value}")


@dataclass(frozen=True)
class FilterConfig:
    """Thresholds for count pre-filtering.

    Attributes:
        min_total: Minimum total reads across all samples.
        min_signal: Minimum reads left after removing the largest sample.
    """
    min_total: int = 500
    min_signal: int = 500

    def __post_init__(self) -> None:
        _check_threshold("min_total", self.min_total)
        _check_threshold("min_signal", self.min_signal)


@dataclass(frozen=True)
class SampleIdConfig:
    """Text substitution applied to every sample identifier."""
    separator: str = "-"
    marker: str = ".."

    def __post_init__(self) -> None:
        if not self.separator:
            raise ValueError("`separator` must be a non-empty string")
        if not self.marker:
            raise ValueError("`marker` must be a non-empty string")
        if self.separator in self.marker:
            raise ValueError(
                f"`marker` {self.marker!r} must not contain the separator "
                f"{self.separator!r}"
            )


@dataclass(frozen=True)
class ConditionConfig:
    """Closed, ordered set of treatment levels.

    Attributes:
        column: Name of the treatment column in the metadata table.
        levels: Canonical level order; the first level is the model baseline.
        aliases: Raw label -> canonical label rewrites.
        sample_column: Name of the sample identifier column.
        keep_columns: Extra metadata columns retained besides the sample id
            and the treatment column.
    """
    column: str = "Condition"
    levels: Tuple[str, ...] = DEFAULT_LEVELS
    aliases: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_ALIASES))
    sample_column: str = "SampleID"
    keep_columns: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "levels", tuple(self.levels))
        object.__setattr__(self, "keep_columns", tuple(self.keep_columns))
        if not self.levels:
            raise ValueError("`levels` must contain at least one level")
        if len(set(self.levels)) != len(self.levels):
            raise ValueError(f"`levels` contains duplicates: {list(self.levels)}")
        unknown = sorted(set(self.aliases.values()) - set(self.levels))
        if unknown:
            raise ValueError(f"Aliases point to unknown levels: {unknown}")
        reserved = {self.column, self.sample_column} & set(self.keep_columns)
        if reserved:
            raise ValueError(
                f"`keep_columns` must not repeat required columns: {sorted(reserved)}"
            )


@dataclass(frozen=True)
class AestheticsConfig:
    """Explicit condition label -> plot style mapping."""
    styles: Mapping[str, TreatmentStyle] = field(default_factory=default_styles)

    def __post_init__(self) -> None:
        if not self.styles:
            raise ValueError("`styles` must map at least one label")
        for label, style in self.styles.items():
            if not isinstance(style, TreatmentStyle):
                raise TypeError(
                    f"Style for {label!r} must be a TreatmentStyle, "
                    f"got {type(style).__name__}"
                )


@dataclass(frozen=True)
class AnnotationConfig:
    """Identifier mapping query and join keys."""
    dataset: str = "mmusculus_gene_ensembl"
    attributes: Tuple[str, ...] = DEFAULT_ATTRIBUTES
    results_key: str = "Geneid"
    map_key: str = "ensembl_gene_id"
    mirror: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", tuple(self.attributes))
        if self.map_key not in self.attributes:
            raise ValueError(
                f"`attributes` must include the join key {self.map_key!r}"
            )


@dataclass(frozen=True)
class WorkflowConfig:
    """Complete parameter set of one workflow run."""
    counts_path: PathLike
    metadata_path: PathLike
    sep: str = "\t"
    gene_column: str = "Geneid"
    filter: FilterConfig = field(default_factory=FilterConfig)
    sample_ids: SampleIdConfig = field(default_factory=SampleIdConfig)
    conditions: ConditionConfig = field(default_factory=ConditionConfig)
    aesthetics: AestheticsConfig = field(default_factory=AestheticsConfig)
    annotation: AnnotationConfig = field(default_factory=AnnotationConfig)
    transform: str = "vst"
    ntop: int = 500
    output_dir: Optional[PathLike] = None
    gene_map_path: Optional[PathLike] = None
    plot_title: str = "PCA of variance-stabilized counts"
    plot_format: str = "png"
    verbose: bool = True

    def __post_init__(self) -> None:
        if self.transform not in ("vst", "rlog"):
            raise ValueError(f"`transform` must be 'vst' or 'rlog', got {self.transform!r}")
        if self.ntop <= 0:
            raise ValueError(f"`ntop` must be positive, got {self.ntop}")
        if self.plot_format not in ("png", "pdf", "svg"):
            raise ValueError(f"Unsupported plot format {self.plot_format!r}")
        if self.annotation.results_key != self.gene_column:
            raise ValueError(
                f"annotation.results_key {self.annotation.results_key!r} must match "
                f"gene_column {self.gene_column!r}"
            )
