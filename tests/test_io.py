"""Tests for table loading, sample alignment and the SE wrapper."""

import numpy as np
import pandas as pd
import pytest

from dge_workflow.io import align_samples, build_experiment, load_counts, load_metadata, write_table

from conftest import NORM_SAMPLES


class TestLoadCounts:

    def test_selects_named_samples(self, data_files):
        counts_path, _ = data_files
        counts = load_counts(counts_path, samples=NORM_SAMPLES)

        assert list(counts.columns) == NORM_SAMPLES
        assert counts.index.name == "Geneid"
        assert counts.shape == (6, 8)
        assert "Chr" not in counts.columns
        assert counts.loc["ENSMUSG00000000002", "M1..1"] == 900

    def test_all_samples_without_auxiliary_columns(self, data_files):
        counts_path, _ = data_files
        counts = load_counts(counts_path)
        assert list(counts.columns) == NORM_SAMPLES

    def test_sample_order_follows_request(self, data_files):
        counts_path, _ = data_files
        counts = load_counts(counts_path, samples=NORM_SAMPLES[::-1])
        assert list(counts.columns) == NORM_SAMPLES[::-1]

    def test_missing_gene_column(self, tmp_path):
        path = tmp_path / "bad.tsv"
        pd.DataFrame({"gene": ["g1"], "S1": [1]}).to_csv(path, sep="\t", index=False)
        with pytest.raises(KeyError, match="Geneid"):
            load_counts(path)

    def test_missing_sample(self, data_files):
        counts_path, _ = data_files
        with pytest.raises(KeyError, match="M9..9"):
            load_counts(counts_path, samples=["M1..1", "M9..9"])

    def test_negative_counts(self, tmp_path):
        path = tmp_path / "neg.tsv"
        pd.DataFrame({"Geneid": ["g1", "g2"], "S1": [1, -4]}).to_csv(path, sep="\t", index=False)
        with pytest.raises(ValueError, match="negative"):
            load_counts(path)

    def test_non_integer_counts(self, tmp_path):
        path = tmp_path / "float.tsv"
        pd.DataFrame({"Geneid": ["g1", "g2"], "S1": [1.5, 2.0]}).to_csv(path, sep="\t", index=False)
        with pytest.raises(ValueError, match="integers"):
            load_counts(path)

    def test_duplicate_genes(self, tmp_path):
        path = tmp_path / "dup.tsv"
        pd.DataFrame({"Geneid": ["g1", "g1"], "S1": [1, 2]}).to_csv(path, sep="\t", index=False)
        with pytest.raises(ValueError, match="duplicated gene identifiers"):
            load_counts(path)


class TestLoadMetadata:

    def test_normalized(self, data_files):
        _, meta_path = data_files
        meta = load_metadata(meta_path)
        assert list(meta.index) == NORM_SAMPLES
        assert list(meta.columns) == ["Condition"]


class TestAlignSamples:

    def test_metadata_follows_count_columns(self, data_files):
        counts_path, meta_path = data_files
        meta = load_metadata(meta_path)
        counts = load_counts(counts_path, samples=NORM_SAMPLES[::-1])

        counts2, meta2 = align_samples(counts, meta)
        assert list(meta2.index) == list(counts2.columns)

    def test_mismatch_reported(self, data_files):
        counts_path, meta_path = data_files
        meta = load_metadata(meta_path)
        counts = load_counts(counts_path, samples=NORM_SAMPLES[:-1])

        with pytest.raises(ValueError, match=r"1 only in metadata \['M4..2'\]"):
            align_samples(counts, meta)


class TestBuildExperiment:

    def test_experiment(self, data_files):
        counts_path, meta_path = data_files
        meta = load_metadata(meta_path)
        counts = load_counts(counts_path, samples=list(meta.index))

        se = build_experiment(counts, meta)

        assert se.shape == (6, 8)
        assert list(se.column_names) == NORM_SAMPLES
        assert list(se.row_names) == list(counts.index)
        np.testing.assert_array_equal(se.assays["counts"], counts.to_numpy())
        assert list(se.get_column_data()["Condition"])[:2] == ["Naive", "Naive"]
        assert se.metadata["levels"]["Condition"] == ["Naive", "Tolerant", "SingleDST", "Listeria"]


def test_write_table_creates_directories(tmp_path):
    path = write_table(pd.DataFrame({"a": [1]}), tmp_path / "nested" / "out.csv")
    assert path.is_file()
    assert pd.read_csv(path)["a"].tolist() == [1]
