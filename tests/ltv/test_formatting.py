"""Tests for shared formatting helpers."""

from __future__ import annotations

import pytest

from customer_ltv.formatting import (
    excel_number_format,
    format_value,
    is_currency_column,
    is_grand_total_row,
    is_percentage_column,
)


class TestFormatValue:
    def test_currency(self):
        assert format_value(1234.5, "discounted_revenue") == "$1,234.50"

    def test_percentage(self):
        assert format_value(12.345, "pct_of_customers") == "12.3%"

    def test_factor(self):
        assert format_value(0.909090, "discount_factor") == "0.9091"

    def test_integer(self):
        assert format_value(1500.0, "customers") == "1,500"

    def test_missing(self):
        assert format_value(None, "x") == ""
        assert format_value(float("nan"), "x") == ""

    def test_text(self):
        assert format_value("active", "segment") == "active"


class TestExcelNumberFormat:
    @pytest.mark.parametrize(
        "col,fmt",
        [
            ("total_revenue", "$#,##0.00"),
            ("avg_purchase", "$#,##0.00"),
            ("max_purchase", "$#,##0.00"),
            ("pct_of_customers", "0.0%"),
            ("discount_factor", "0.0000"),
            ("avg_recency", "0.00"),
            ("year", "0"),
            ("customers", "#,##0"),
            ("first_purchase", "#,##0"),
        ],
    )
    def test_formats(self, col, fmt):
        assert excel_number_format(col) == fmt


class TestPredicates:
    def test_currency(self):
        assert is_currency_column("avg_spend")
        assert not is_currency_column("p_value")

    def test_percentage(self):
        assert is_percentage_column("pct_of_customers")
        assert not is_percentage_column("discount_factor")

    def test_grand_total(self):
        assert is_grand_total_row(" Total ")
        assert not is_grand_total_row("active")
