"""Tests for per-customer feature aggregation."""

from __future__ import annotations

import pandas as pd
import pytest

from customer_ltv.exceptions import ColumnMismatchError, ConfigurationError, InputDataError
from customer_ltv.features import (
    FEATURE_COLUMNS,
    aggregate_features,
    filter_window,
    period_revenue,
)
from customer_ltv.segments import assign_segments

REFERENCE_DATE = pd.Timestamp("2016-01-01")


class TestThreeTransactionScenario:
    @pytest.fixture()
    def features(self, three_transactions):
        feats = aggregate_features(three_transactions, reference_date="2022-01-01")
        return assign_segments(feats).set_index("customer_id")

    def test_columns(self, three_transactions):
        feats = aggregate_features(three_transactions, reference_date="2022-01-01")
        assert list(feats.columns) == FEATURE_COLUMNS

    def test_repeat_customer(self, features):
        row = features.loc[1]
        assert row["recency"] == 214
        assert row["first_purchase"] == 731
        assert row["frequency"] == 2
        assert row["avg_purchase"] == pytest.approx(150.0)
        assert row["max_purchase"] == pytest.approx(200.0)
        assert row["segment"] == "active"

    def test_single_purchase_customer(self, features):
        row = features.loc[2]
        assert row["recency"] == 1096
        assert row["first_purchase"] == 1096
        assert row["frequency"] == 1
        assert row["segment"] == "inactive"


class TestAggregateFeatures:
    def test_one_row_per_customer(self, purchases):
        feats = aggregate_features(purchases, REFERENCE_DATE)
        assert feats["customer_id"].is_unique
        assert len(feats) == purchases["customer_id"].nunique()

    def test_recency_not_after_first_purchase(self, purchases):
        feats = aggregate_features(purchases, REFERENCE_DATE)
        assert (feats["recency"] <= feats["first_purchase"]).all()
        assert (feats["recency"] >= 0).all()

    def test_integer_days(self, purchases):
        feats = aggregate_features(purchases, REFERENCE_DATE)
        assert feats["recency"].dtype == "int64"
        assert feats["first_purchase"].dtype == "int64"

    def test_idempotent(self, purchases):
        first = aggregate_features(purchases, REFERENCE_DATE)
        second = aggregate_features(purchases, REFERENCE_DATE)
        pd.testing.assert_frame_equal(first, second)

    def test_row_order_irrelevant(self, purchases):
        shuffled = purchases.sample(frac=1.0, random_state=7)
        pd.testing.assert_frame_equal(
            aggregate_features(purchases, REFERENCE_DATE),
            aggregate_features(shuffled, REFERENCE_DATE),
        )

    def test_frequency_sums_to_rows(self, purchases):
        feats = aggregate_features(purchases, REFERENCE_DATE)
        assert feats["frequency"].sum() == len(purchases)

    def test_window_end_excludes_later_purchases(self, three_transactions):
        feats = aggregate_features(
            three_transactions, reference_date="2021-01-01", window_end="2021-01-01"
        )
        row = feats.set_index("customer_id").loc[1]
        assert row["frequency"] == 1
        assert row["recency"] == 366

    def test_window_start_drops_customers(self, three_transactions):
        feats = aggregate_features(
            three_transactions, reference_date="2022-01-01", window_start="2019-06-01"
        )
        assert feats["customer_id"].tolist() == [1]

    def test_purchase_after_reference_rejected(self, three_transactions):
        with pytest.raises(ConfigurationError, match="precedes"):
            aggregate_features(three_transactions, reference_date="2021-01-01")

    def test_purchase_on_reference_date_has_zero_recency(self, three_transactions):
        feats = aggregate_features(
            three_transactions, reference_date="2021-06-01", inclusive="both", window_end="2021-06-01"
        )
        assert feats.set_index("customer_id").loc[1, "recency"] == 0

    def test_empty_window(self, three_transactions):
        feats = aggregate_features(
            three_transactions, reference_date="2018-01-01", window_end="2018-01-01"
        )
        assert feats.empty
        assert list(feats.columns) == FEATURE_COLUMNS

    def test_missing_column(self, three_transactions):
        with pytest.raises(ColumnMismatchError):
            aggregate_features(three_transactions.drop(columns="price"), "2022-01-01")

    def test_unparsed_dates(self, three_transactions):
        raw = three_transactions.assign(order_date=["2020-01-01", "2021-06-01", "2019-01-01"])
        with pytest.raises(InputDataError):
            aggregate_features(raw, "2022-01-01")

    def test_negative_price(self, three_transactions):
        with pytest.raises(InputDataError):
            aggregate_features(three_transactions.assign(price=[1.0, -2.0, 3.0]), "2022-01-01")


class TestFilterWindow:
    def test_left_inclusive_default(self, three_transactions):
        out = filter_window(three_transactions, "2020-01-01", "2021-06-01")
        assert out["order_date"].tolist() == [pd.Timestamp("2020-01-01")]

    def test_both_inclusive(self, three_transactions):
        out = filter_window(three_transactions, "2020-01-01", "2021-06-01", inclusive="both")
        assert len(out) == 2

    def test_neither(self, three_transactions):
        out = filter_window(three_transactions, "2020-01-01", "2021-06-01", inclusive="neither")
        assert out.empty

    def test_open_bounds(self, three_transactions):
        assert len(filter_window(three_transactions)) == 3

    def test_start_after_end(self, three_transactions):
        with pytest.raises(ConfigurationError):
            filter_window(three_transactions, "2021-01-01", "2020-01-01")

    def test_unknown_inclusive(self, three_transactions):
        with pytest.raises(ConfigurationError):
            filter_window(three_transactions, inclusive="middle")


class TestPeriodRevenue:
    def test_half_open(self, three_transactions):
        revenue = period_revenue(three_transactions, "2019-01-01", "2021-06-01")
        assert revenue.to_dict() == {1: 100.0, 2: 50.0}
        assert revenue.name == "revenue"

    def test_sums_per_customer(self, three_transactions):
        revenue = period_revenue(three_transactions, "2020-01-01", "2022-01-01")
        assert revenue.loc[1] == pytest.approx(300.0)
