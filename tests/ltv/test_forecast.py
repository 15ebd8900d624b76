"""Tests for the Markov projection and discounting."""

from __future__ import annotations

import pandas as pd
import pytest

from customer_ltv.exceptions import ConfigurationError
from customer_ltv.forecast import (
    discount_factors,
    discount_revenue,
    forecast_table,
    population_vector,
    project_population,
    project_revenue,
    segment_average_spend,
    total_revenue,
    trajectory_frame,
)
from customer_ltv.features import period_revenue
from customer_ltv.segments import SEGMENT_LABELS
from customer_ltv.transitions import build_snapshot, estimate_transitions

TOY_P = [[0.5, 0.5], [0.2, 0.8]]


class TestProjectPopulation:
    def test_toy_system(self):
        trajectory = project_population([100, 0], TOY_P, horizon=2)
        assert trajectory[0] == [100.0, 0.0]
        assert trajectory[1] == pytest.approx([50.0, 50.0])
        assert trajectory[2] == pytest.approx([35.0, 65.0])

    def test_trajectory_length(self):
        assert len(project_population([1, 2], TOY_P, horizon=7)) == 8

    def test_zero_horizon(self):
        assert project_population([3, 4], TOY_P, horizon=0) == [[3.0, 4.0]]

    def test_population_conserved(self):
        trajectory = project_population([120, 30], TOY_P, horizon=25)
        for vector in trajectory:
            assert sum(vector) == pytest.approx(150.0)

    def test_converges_to_stationary(self):
        # Stationary distribution of TOY_P is (2/7, 5/7)
        final = project_population([70, 0], TOY_P, horizon=200)[-1]
        assert final == pytest.approx([20.0, 50.0])

    def test_accepts_dataframe_and_series(self):
        labels = SEGMENT_LABELS
        matrix = pd.DataFrame(
            [[1.0, 0.0, 0.0], [0.5, 0.5, 0.0], [0.0, 0.3, 0.7]], index=labels, columns=labels
        )
        # Series given out of order is realigned by label
        v0 = pd.Series({"active": 10.0, "inactive": 0.0, "cold": 0.0})
        trajectory = project_population(v0, matrix, horizon=1)
        assert trajectory[0] == [0.0, 0.0, 10.0]
        assert trajectory[1] == pytest.approx([0.0, 3.0, 7.0])

    def test_size_mismatch(self):
        with pytest.raises(ConfigurationError):
            project_population([1, 2, 3], TOY_P, horizon=1)

    def test_ragged_matrix(self):
        with pytest.raises(ConfigurationError):
            project_population([1, 2], [[1.0, 0.0], [1.0]], horizon=1)

    def test_matrix_missing_segment_row(self):
        labels = SEGMENT_LABELS
        matrix = pd.DataFrame(
            [[1.0, 0.0, 0.0], [0.5, 0.5, 0.0]], index=["inactive", "cold"], columns=labels
        )
        with pytest.raises(ConfigurationError):
            project_population([10, 10, 10], matrix, horizon=1)

    def test_matrix_missing_segment_column(self):
        matrix = pd.DataFrame(
            [[1.0, 0.0], [0.5, 0.5], [0.0, 1.0]],
            index=SEGMENT_LABELS,
            columns=["inactive", "cold"],
        )
        with pytest.raises(ConfigurationError):
            project_population([10, 10, 10], matrix, horizon=1)

    def test_negative_horizon(self):
        with pytest.raises(ConfigurationError):
            project_population([1, 2], TOY_P, horizon=-1)

    def test_trajectory_frame(self):
        frame = trajectory_frame([[1, 2, 3], [2, 2, 2]])
        assert list(frame.columns) == SEGMENT_LABELS
        assert frame.index.name == "period"
        assert frame.loc[1, "cold"] == 2.0


class TestRevenue:
    def test_project_revenue(self):
        revenue = project_revenue([[2, 3], [1, 4]], [10.0, 100.0])
        assert revenue == [[20.0, 300.0], [10.0, 400.0]]
        assert total_revenue(revenue) == [320.0, 410.0]

    def test_spend_length_mismatch(self):
        with pytest.raises(ConfigurationError):
            project_revenue([[1, 2]], [1.0, 2.0, 3.0])


class TestDiscounting:
    def test_first_period_undiscounted(self):
        factors = discount_factors(0.10, 3)
        assert factors[0] == 1.0
        assert factors[1] == pytest.approx(1 / 1.1)
        assert factors[2] == pytest.approx(1 / 1.21)

    def test_zero_rate(self):
        assert discount_factors(0.0, 4) == [1.0, 1.0, 1.0, 1.0]

    def test_rate_must_exceed_minus_one(self):
        with pytest.raises(ConfigurationError):
            discount_factors(-1.0, 3)

    def test_discount_revenue(self):
        assert discount_revenue([100.0, 110.0], [1.0, 1 / 1.1]) == pytest.approx([100.0, 100.0])

    def test_misaligned(self):
        with pytest.raises(ConfigurationError):
            discount_revenue([1.0, 2.0], [1.0])


class TestForecastTable:
    def test_columns_and_values(self):
        trajectory = project_population([100, 0], TOY_P, horizon=2)
        table = forecast_table(trajectory, [0.0, 10.0], discount_rate=0.0, start_year=2016)
        assert table["period"].tolist() == [0, 1, 2]
        assert table["year"].tolist() == [2016, 2017, 2018]
        assert table["total_revenue"].tolist() == pytest.approx([0.0, 500.0, 650.0])
        assert table["cumulative_discounted_revenue"].iloc[-1] == pytest.approx(1150.0)

    def test_no_year_column_without_start(self):
        trajectory = project_population([1, 1], TOY_P, horizon=1)
        assert "year" not in forecast_table(trajectory, [1.0, 1.0], 0.1).columns


class TestSnapshotHelpers:
    def test_population_vector_sums_to_customers(self, purchases):
        snap = build_snapshot(purchases, "2016-01-01")
        vector = population_vector(snap)
        assert len(vector) == len(SEGMENT_LABELS)
        assert sum(vector) == snap.customer_count

    def test_segment_average_spend(self, three_transactions):
        snap = build_snapshot(three_transactions, "2022-01-01")
        revenue = period_revenue(three_transactions, "2021-01-01", "2022-01-01")
        spend = segment_average_spend(snap, revenue)
        assert spend.index.tolist() == SEGMENT_LABELS
        assert spend["active"] == pytest.approx(200.0)
        assert spend["inactive"] == 0.0
        assert spend["cold"] == 0.0

    def test_end_to_end_population_conserved(self, purchases):
        prior = build_snapshot(purchases, "2015-01-01")
        current = build_snapshot(purchases, "2016-01-01")
        estimate = estimate_transitions(prior, current)
        v0 = population_vector(current)
        for vector in project_population(v0, estimate.probabilities, horizon=10):
            assert sum(vector) == pytest.approx(current.customer_count)
