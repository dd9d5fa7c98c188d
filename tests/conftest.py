"""Shared fixtures: small counts/metadata tables and their files on disk."""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from dge_workflow.model import ModelFitResult, PCAResult


RAW_SAMPLES = ["M1-1", "M1-2", "M2-1", "M2-2", "M3-1", "M3-2", "M4-1", "M4-2"]
NORM_SAMPLES = [s.replace("-", "..") for s in RAW_SAMPLES]
RAW_CONDITIONS = [
    "NaiveTCR75", "NaiveTCR75",
    "Tolerant", "Tolerant",
    "SingleDST", "SingleDST",
    "Listeria", "Listeria",
]


@pytest.fixture
def raw_metadata():
    """Metadata as it comes from disk, including an unused column."""
    return pd.DataFrame({
        "SampleID": RAW_SAMPLES,
        "Condition": RAW_CONDITIONS,
        "SacDay": [7, 7, 14, 14, 7, 7, 14, 14],
    })


@pytest.fixture
def raw_counts():
    """Counts with raw sample names as columns; genes ENSMUSG...1-6."""
    rows = {
        "ENSMUSG00000000001": [1, 1, 1, 1, 1, 1, 1, 1],               # too low
        "ENSMUSG00000000002": [900, 0, 0, 0, 0, 0, 0, 0],             # one outlier sample
        "ENSMUSG00000000003": [100, 120, 90, 110, 95, 105, 100, 80],  # kept
        "ENSMUSG00000000004": [500, 520, 480, 510, 300, 310, 900, 950],
        "ENSMUSG00000000005": [70, 60, 80, 65, 75, 90, 85, 70],       # kept, boundary-ish
        "ENSMUSG00000000006": [2000, 1800, 2100, 1900, 50, 60, 40, 55],
    }
    return pd.DataFrame.from_dict(rows, orient="index", columns=RAW_SAMPLES).rename_axis("Geneid")


@pytest.fixture
def data_files(tmp_path, raw_counts, raw_metadata):
    """Counts (with featureCounts-style auxiliary columns) and metadata TSVs."""
    counts = raw_counts.reset_index()
    counts.insert(1, "Chr", "chr1")
    counts.insert(2, "Length", 1500)
    counts_path = tmp_path / "counts.tsv"
    meta_path = tmp_path / "samples.tsv"
    with open(counts_path, "w") as fh:
        fh.write("# Program:featureCounts v2.0.1\n")
        counts.to_csv(fh, sep="\t", index=False)
    raw_metadata.to_csv(meta_path, sep="\t", index=False)
    return counts_path, meta_path


@pytest.fixture
def gene_map():
    """BioMart-style map with a duplicated gene and one gene missing."""
    return pd.DataFrame({
        "ensembl_gene_id": [
            "ENSMUSG00000000003",
            "ENSMUSG00000000004",
            "ENSMUSG00000000004",
            "ENSMUSG00000000006",
        ],
        "mgi_symbol": ["Cd4", "Foxp3", "Foxp3-dup", "Il2"],
        "mgi_description": ["CD4 antigen", "forkhead box P3", "duplicate", "interleukin 2"],
        "gene_biotype": ["protein_coding"] * 4,
        "entrezgene_id": [12504, 20371, 99999, 16183],
    })


def fake_fit(counts, metadata, design_factor="Condition", transform="vst", ntop=500):
    """Stand-in for the DESeq2 collaborator: deterministic, R-free."""
    size_factors = counts.sum(axis=0) / counts.sum(axis=0).mean()
    normalized = counts.div(size_factors, axis=1)
    transformed = np.log2(normalized + 1)
    levels = list(metadata[design_factor].cat.categories)
    coords = pd.DataFrame(
        {
            "PC1": np.arange(len(metadata), dtype=float),
            "PC2": np.linspace(-1, 1, len(metadata)),
            design_factor: metadata[design_factor].to_numpy(),
        },
        index=metadata.index,
    )
    contrasts = {
        f"{level}_vs_{levels[0]}": pd.DataFrame({
            "gene": list(counts.index),
            "log2_fc": np.zeros(len(counts)),
            "adj_p_value": np.ones(len(counts)),
        })
        for level in levels[1:]
    }
    return ModelFitResult(
        size_factors=size_factors.rename("size_factor"),
        normalized=normalized,
        transformed=transformed,
        pca=PCAResult(coordinates=coords, percent_var=(61.4, 20.2), group_col=design_factor),
        contrasts=contrasts,
    )


@pytest.fixture
def fake_model_fit():
    return fake_fit
