"""
End-to-end differential expression workflow.

Composes the stages explicitly; each stage takes and returns new tables:

    load -> align -> aesthetics -> filter -> model fit -> annotate -> plot

The model fit (DESeq2) and the identifier mapping (BioMart) are external
collaborators. They default to the R-backed implementations and can be
replaced by any callable with the same signature.

Usage:
    >>> from dge_workflow import WorkflowConfig, run_workflow
    >>> result = run_workflow(WorkflowConfig("counts.tsv", "samples.tsv", output_dir="out"))
    >>> result.transformed.head()
"""

from __future__ import annotations
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional
import matplotlib.pyplot as plt
import pandas as pd

from .aesthetics import treatment_aesthetics
from .annotation import annotate_checked, deduplicate_gene_map
from .config import WorkflowConfig
from .filtering import filter_counts
from .io import align_samples, load_counts, load_metadata, write_table
from .model import ModelFitResult

ModelFit = Callable[..., ModelFitResult]
GeneMapper = Callable[..., pd.DataFrame]


@dataclass
class WorkflowResult:
    """Tables and figure produced by one run."""
    counts: pd.DataFrame
    metadata: pd.DataFrame
    filtered: pd.DataFrame
    fit: ModelFitResult
    gene_map: pd.DataFrame
    normalized: pd.DataFrame
    transformed: pd.DataFrame
    aesthetics: pd.DataFrame
    figure: plt.Figure
    contrasts: Dict[str, pd.DataFrame] = field(default_factory=dict)
    outputs: Dict[str, Path] = field(default_factory=dict)


def _default_model_fit() -> ModelFit:
    from .deseq2 import fit_model
    return fit_model


def _default_gene_mapper() -> GeneMapper:
    from .biomart import fetch_gene_map
    return fetch_gene_map


def _run_stage(stage: str, func: Callable, *args, **kwargs):
    """Call an external collaborator, naming the stage on failure."""
    try:
        return func(*args, **kwargs)
    except Exception as err:
        # Builtin input errors keep their type
        cls = type(err) if type(err) in (KeyError, TypeError, ValueError) else RuntimeError
        raise cls(f"{stage} failed: {err}") from err


def _load_gene_map(
    config: WorkflowConfig,
    gene_ids,
    gene_mapper: Optional[GeneMapper],
) -> pd.DataFrame:
    ann = config.annotation
    cache = Path(config.gene_map_path) if config.gene_map_path is not None else None

    if cache is not None and cache.is_file():
        gene_map = pd.read_csv(cache, dtype={ann.map_key: str})
    else:
        mapper = gene_mapper or _default_gene_mapper()
        gene_map = _run_stage(
            "Gene identifier mapping",
            mapper,
            gene_ids,
            dataset=ann.dataset,
            attributes=ann.attributes,
            filter_name=ann.map_key,
            mirror=ann.mirror,
        )
        if cache is not None:
            write_table(gene_map, cache)

    return deduplicate_gene_map(gene_map, key=ann.map_key)


def run_workflow(
    config: WorkflowConfig,
    model_fit: Optional[ModelFit] = None,
    gene_mapper: Optional[GeneMapper] = None,
) -> WorkflowResult:
    """
    Run the workflow described by ``config``.

    Args:
        config: Paths, thresholds, levels, styles and outputs of the run.
        model_fit: ``(counts, metadata, design_factor=..., transform=...,
            ntop=...) -> ModelFitResult``. Default: ``deseq2.fit_model``.
        gene_mapper: ``(gene_ids, dataset=..., attributes=...,
            filter_name=..., mirror=...) -> DataFrame``. Default:
            ``biomart.fetch_gene_map``. Not called when
            ``config.gene_map_path`` points to an existing file.

    Returns:
        WorkflowResult

    Raises:
        KeyError, ValueError: On malformed inputs or styles, before any model
            fit. Raised by a collaborator, the message starts with its stage.
        RuntimeError: If an external collaborator fails otherwise.
    """
    def report(msg: str) -> None:
        if config.verbose:
            print(msg)

    cond = config.conditions

    # 1. Load
    metadata = load_metadata(
        config.metadata_path, sep=config.sep, conditions=cond, sample_ids=config.sample_ids
    )
    # Every sample column is loaded so extra count samples are reported
    counts = load_counts(
        config.counts_path,
        gene_column=config.gene_column,
        sep=config.sep,
        sample_ids=config.sample_ids,
    )
    counts, metadata = align_samples(counts, metadata)
    report(f"Loaded {counts.shape[0]} genes x {counts.shape[1]} samples")
    aesthetics = treatment_aesthetics(metadata[cond.column], config.aesthetics.styles)

    # 2. Filter
    filtered = filter_counts(
        counts,
        min_total=config.filter.min_total,
        min_signal=config.filter.min_signal,
        samples=list(metadata.index),
    )
    report(
        f"Kept {filtered.shape[0]} of {counts.shape[0]} genes "
        f"(min_total={config.filter.min_total}, min_signal={config.filter.min_signal})"
    )

    # 3. Model fit
    fit_func = model_fit or _default_model_fit()
    fit = _run_stage(
        "Model fit",
        fit_func,
        filtered,
        metadata,
        design_factor=cond.column,
        transform=config.transform,
        ntop=config.ntop,
    )
    report(f"Fitted model with design ~ {cond.column}")

    # 4. Annotate
    gene_map = _load_gene_map(config, list(filtered.index), gene_mapper)
    unmatched = len(set(filtered.index) - set(gene_map[config.annotation.map_key].astype(str)))
    if unmatched:
        warnings.warn(
            f"{unmatched} of {filtered.shape[0]} genes have no entry in the gene map",
            stacklevel=2,
        )

    def annotate_table(frame: pd.DataFrame, key: str) -> pd.DataFrame:
        return annotate_checked(frame, gene_map, results_key=key, map_key=config.annotation.map_key)

    key = config.gene_column
    normalized = annotate_table(fit.normalized.rename_axis(key), key)
    transformed = annotate_table(fit.transformed.rename_axis(key), key)
    contrasts = {
        name: annotate_table(table, "gene") for name, table in fit.contrasts.items()
    }

    # 5. Plot
    figure = _plot(fit, aesthetics, config)

    result = WorkflowResult(
        counts=counts,
        metadata=metadata,
        filtered=filtered,
        fit=fit,
        gene_map=gene_map,
        normalized=normalized,
        transformed=transformed,
        aesthetics=aesthetics,
        figure=figure,
        contrasts=contrasts,
    )

    # 6. Write
    if config.output_dir is not None:
        result.outputs = write_outputs(result, config)
        report(f"Wrote {len(result.outputs)} output file(s) to {config.output_dir}")

    return result


def _plot(fit: ModelFitResult, aesthetics: pd.DataFrame, config: WorkflowConfig) -> plt.Figure:
    from .pca_plot import pca_plot
    return pca_plot(fit.pca, aesthetics, group_col=config.conditions.column, title=config.plot_title)


def write_outputs(result: WorkflowResult, config: WorkflowConfig) -> Dict[str, Path]:
    """Write annotated tables and the PCA figure to ``config.output_dir``."""
    out_dir = Path(config.output_dir)
    outputs = {
        "normalized": write_table(result.normalized, out_dir / "normalized_counts.csv"),
        "transformed": write_table(result.transformed, out_dir / "transformed_counts.csv"),
        "size_factors": write_table(
            result.fit.size_factors.rename_axis(config.conditions.sample_column).reset_index(),
            out_dir / "size_factors.csv",
        ),
    }
    for name, table in result.contrasts.items():
        outputs[f"results_{name}"] = write_table(table, out_dir / f"results_{name}.csv")

    plot_path = out_dir / f"pca.{config.plot_format}"
    result.figure.savefig(plot_path, dpi=300, bbox_inches="tight", facecolor="white")
    outputs["pca"] = plot_path
    return outputs
