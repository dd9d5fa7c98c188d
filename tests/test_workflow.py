"""End-to-end workflow tests with R-free collaborators."""

import matplotlib.pyplot as plt
import pandas as pd
import pytest

from dge_workflow.config import FilterConfig, WorkflowConfig
from dge_workflow.workflow import run_workflow

from conftest import NORM_SAMPLES, fake_fit


@pytest.fixture
def config(data_files, tmp_path):
    counts_path, meta_path = data_files
    return WorkflowConfig(
        counts_path=counts_path,
        metadata_path=meta_path,
        output_dir=tmp_path / "out",
        verbose=False,
    )


@pytest.fixture
def mapper(gene_map):
    calls = []

    def fetch(gene_ids, **kwargs):
        calls.append((list(gene_ids), kwargs))
        return gene_map

    fetch.calls = calls
    return fetch


class TestRunWorkflow:

    def test_tables(self, config, fake_model_fit, mapper):
        with pytest.warns(UserWarning, match="1 of 4 genes have no entry"):
            result = run_workflow(config, model_fit=fake_model_fit, gene_mapper=mapper)

        assert list(result.metadata.index) == NORM_SAMPLES
        assert result.filtered.shape == (4, 8)
        assert len(result.transformed) == 4
        assert result.transformed["Geneid"].tolist() == list(result.filtered.index)
        assert "MGI_Symbol" in result.transformed.columns
        assert "ensembl_gene_id" not in result.transformed.columns
        symbols = result.transformed.set_index("Geneid")["MGI_Symbol"]
        assert symbols["ENSMUSG00000000004"] == "Foxp3"
        assert pd.isna(symbols["ENSMUSG00000000005"])
        assert result.aesthetics["label"].tolist() == ["Listeria", "Naive", "SingleDST", "Tolerant"]
        plt.close(result.figure)

    def test_mapper_receives_filtered_genes(self, config, fake_model_fit, mapper):
        with pytest.warns(UserWarning):
            result = run_workflow(config, model_fit=fake_model_fit, gene_mapper=mapper)

        gene_ids, kwargs = mapper.calls[0]
        assert gene_ids == list(result.filtered.index)
        assert kwargs["dataset"] == "mmusculus_gene_ensembl"
        assert kwargs["filter_name"] == "ensembl_gene_id"
        plt.close(result.figure)

    def test_contrasts_annotated(self, config, fake_model_fit, mapper):
        with pytest.warns(UserWarning):
            result = run_workflow(config, model_fit=fake_model_fit, gene_mapper=mapper)

        assert sorted(result.contrasts) == [
            "Listeria_vs_Naive", "SingleDST_vs_Naive", "Tolerant_vs_Naive",
        ]
        table = result.contrasts["Listeria_vs_Naive"]
        assert "MGI_Symbol" in table.columns
        assert len(table) == 4
        plt.close(result.figure)

    def test_outputs_written(self, config, fake_model_fit, mapper):
        with pytest.warns(UserWarning):
            result = run_workflow(config, model_fit=fake_model_fit, gene_mapper=mapper)

        out_dir = config.output_dir
        for name in ("normalized_counts.csv", "transformed_counts.csv", "size_factors.csv", "pca.png",
                     "results_Tolerant_vs_Naive.csv"):
            assert (out_dir / name).is_file(), name
        written = pd.read_csv(out_dir / "transformed_counts.csv")
        assert written["Geneid"].tolist() == result.transformed["Geneid"].tolist()
        plt.close(result.figure)

    def test_cached_gene_map(self, config, fake_model_fit, mapper, tmp_path):
        cache = tmp_path / "gene_map.csv"
        cfg = WorkflowConfig(
            counts_path=config.counts_path,
            metadata_path=config.metadata_path,
            gene_map_path=cache,
            verbose=False,
        )
        with pytest.warns(UserWarning):
            first = run_workflow(cfg, model_fit=fake_model_fit, gene_mapper=mapper)
        assert cache.is_file()
        plt.close(first.figure)

        def failing_mapper(*args, **kwargs):
            raise AssertionError("cache should be used")

        with pytest.warns(UserWarning):
            second = run_workflow(cfg, model_fit=fake_model_fit, gene_mapper=failing_mapper)
        pd.testing.assert_frame_equal(first.transformed, second.transformed)
        plt.close(second.figure)

    def test_no_genes_pass_filter(self, data_files, fake_model_fit, mapper):
        counts_path, meta_path = data_files
        cfg = WorkflowConfig(
            counts_path, meta_path, filter=FilterConfig(min_total=10**9), verbose=False,
        )
        with pytest.raises(ValueError, match="No genes passed"):
            run_workflow(cfg, model_fit=fake_model_fit, gene_mapper=mapper)
        assert mapper.calls == []

    def test_model_fit_failure_names_stage(self, config, mapper):
        def broken_fit(*args, **kwargs):
            raise RuntimeError("convergence failure")

        with pytest.raises(RuntimeError, match="Model fit failed: convergence failure"):
            run_workflow(config, model_fit=broken_fit, gene_mapper=mapper)

    def test_mapper_failure_names_stage(self, config, fake_model_fit):
        def offline(*args, **kwargs):
            raise ConnectionError("host unreachable")

        with pytest.raises(RuntimeError, match="Gene identifier mapping failed"):
            run_workflow(config, model_fit=fake_model_fit, gene_mapper=offline)

    def test_unknown_condition_fails_before_fit(self, tmp_path, data_files, raw_metadata):
        counts_path, _ = data_files
        meta_path = tmp_path / "bad_samples.tsv"
        bad = raw_metadata.copy()
        bad.loc[0, "Condition"] = "Untreated"
        bad.to_csv(meta_path, sep="\t", index=False)

        def fit_must_not_run(*args, **kwargs):
            raise AssertionError("fit should not run")

        cfg = WorkflowConfig(counts_path, meta_path, verbose=False)
        with pytest.raises(ValueError, match="Untreated"):
            run_workflow(cfg, model_fit=fit_must_not_run)

    def test_extra_count_sample_rejected(self, tmp_path, raw_counts, raw_metadata, mapper):
        counts_path = tmp_path / "extra_counts.tsv"
        meta_path = tmp_path / "samples.tsv"
        raw_counts.assign(**{"M9-9": 600}).reset_index().to_csv(counts_path, sep="\t", index=False)
        raw_metadata.to_csv(meta_path, sep="\t", index=False)

        cfg = WorkflowConfig(counts_path, meta_path, verbose=False)
        with pytest.raises(ValueError, match=r"1 only in counts \['M9\.\.9'\]"):
            run_workflow(cfg, model_fit=fake_fit, gene_mapper=mapper)

    def test_styles_checked_before_fit(self, tmp_path, raw_counts, raw_metadata):
        keep = raw_metadata["Condition"] != "SingleDST"
        counts_path = tmp_path / "three_counts.tsv"
        meta_path = tmp_path / "three_samples.tsv"
        raw_counts.loc[:, list(raw_metadata.loc[keep, "SampleID"])].reset_index().to_csv(
            counts_path, sep="\t", index=False
        )
        raw_metadata[keep].to_csv(meta_path, sep="\t", index=False)

        def fit_must_not_run(*args, **kwargs):
            raise AssertionError("fit should not run")

        cfg = WorkflowConfig(counts_path, meta_path, verbose=False)
        with pytest.raises(ValueError, match=r"styles for absent labels \['SingleDST'\]"):
            run_workflow(cfg, model_fit=fit_must_not_run)

    def test_collaborator_input_error_names_stage(self, config, mapper):
        def one_level_fit(*args, **kwargs):
            raise ValueError("needs at least two populated levels")

        with pytest.raises(ValueError, match="Model fit failed: needs at least two"):
            run_workflow(config, model_fit=one_level_fit, gene_mapper=mapper)
