"""Tests for the dual-threshold count filter."""

import numpy as np
import pandas as pd
import pytest

from dge_workflow.filtering import expression_mask, filter_counts


@pytest.fixture
def three_sample_counts():
    return pd.DataFrame(
        {
            "S1": [1, 600, 300, 250, 499],
            "S2": [1, 0, 300, 250, 1],
            "S3": [1, 0, 300, 250, 0],
        },
        index=pd.Index(["G1", "G2", "G3", "G4", "G5"], name="Geneid"),
    )


class TestExpressionMask:
    """Test the per-gene keep mask."""

    def test_dual_threshold_arithmetic(self, three_sample_counts):
        mask = expression_mask(three_sample_counts, min_total=500, min_signal=500)

        # G1: sum 3 < 500
        # G2: sum 600, sum - max = 0 < 500
        # G3: sum 900, sum - max = 600
        # G4: sum 750, sum - max = 500 (inclusive)
        # G5: sum 500, sum - max = 1
        assert mask.to_dict() == {"G1": False, "G2": False, "G3": True, "G4": True, "G5": False}

    def test_mask_is_exactly_the_predicate(self):
        rng = np.random.default_rng(7)
        counts = pd.DataFrame(
            rng.integers(0, 400, size=(200, 5)),
            columns=[f"S{i}" for i in range(5)],
        )
        mask = expression_mask(counts, min_total=600, min_signal=450)

        total = counts.sum(axis=1)
        expected = (total >= 600) & (total - counts.max(axis=1) >= 450)
        pd.testing.assert_series_equal(mask, expected.rename("keep"))

    def test_only_named_samples_are_aggregated(self, three_sample_counts):
        counts = three_sample_counts.assign(Length=100000)
        mask = expression_mask(counts, min_total=500, min_signal=500, samples=["S1", "S2", "S3"])
        assert mask.sum() == 2

    def test_missing_sample_column(self, three_sample_counts):
        with pytest.raises(KeyError, match="S9"):
            expression_mask(three_sample_counts, samples=["S1", "S9"])

    def test_negative_threshold_rejected(self, three_sample_counts):
        with pytest.raises(ValueError, match="min_total"):
            expression_mask(three_sample_counts, min_total=-1)

    def test_non_integer_threshold_rejected(self, three_sample_counts):
        with pytest.raises(TypeError, match="min_signal"):
            expression_mask(three_sample_counts, min_signal=2.5)


class TestFilterCounts:
    """Test filtering of the count table."""

    def test_filtered_rows_and_columns(self, three_sample_counts):
        out = filter_counts(three_sample_counts, min_total=500, min_signal=500)

        assert list(out.index) == ["G3", "G4"]
        assert list(out.columns) == ["S1", "S2", "S3"]
        pd.testing.assert_frame_equal(out, three_sample_counts.loc[["G3", "G4"]])

    def test_input_not_modified(self, three_sample_counts):
        before = three_sample_counts.copy()
        filter_counts(three_sample_counts)
        pd.testing.assert_frame_equal(three_sample_counts, before)

    def test_zero_thresholds_keep_everything(self, three_sample_counts):
        out = filter_counts(three_sample_counts, min_total=0, min_signal=0)
        assert out.shape == three_sample_counts.shape

    def test_auxiliary_column_preserved_but_ignored(self, three_sample_counts):
        counts = three_sample_counts.assign(Length=1)
        out = filter_counts(counts, samples=["S1", "S2", "S3"])
        assert list(out.columns) == ["S1", "S2", "S3", "Length"]

    def test_empty_result_is_an_error(self, three_sample_counts):
        with pytest.raises(ValueError, match="No genes passed count filtering"):
            filter_counts(three_sample_counts, min_total=10000, min_signal=500)

    def test_fixture_counts(self, raw_counts):
        out = filter_counts(raw_counts, min_total=500, min_signal=500)
        assert list(out.index) == [
            "ENSMUSG00000000003",
            "ENSMUSG00000000004",
            "ENSMUSG00000000005",
            "ENSMUSG00000000006",
        ]
