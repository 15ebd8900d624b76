"""Tests for chart builders and the chart registry."""

from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go
import pytest

from customer_ltv.analyses import run_all_analyses
from customer_ltv.analyses.base import AnalysisResult
from customer_ltv.charts import CHART_REGISTRY, chart_png_bytes, create_charts
from customer_ltv.charts.forecast import chart_population_trajectory, chart_revenue_forecast
from customer_ltv.charts.theme import add_source_footer, ensure_theme, insight_title
from customer_ltv.charts.transitions import chart_transition_heatmap
from customer_ltv.settings import ChartConfig


@pytest.fixture()
def results(loaded_df, sample_settings):
    return run_all_analyses(loaded_df, sample_settings)


@pytest.fixture()
def config():
    return ChartConfig()


class TestCreateCharts:
    def test_all_registered_charts_built(self, results, config):
        charts = create_charts(results, config, client_name="Acme", date_range="2012 to 2015")
        assert set(charts) == set(CHART_REGISTRY)
        assert all(isinstance(fig, go.Figure) for fig in charts.values())

    def test_source_footer(self, results, config):
        charts = create_charts(results, config, client_name="Acme")
        texts = [a.text for a in charts["segment_summary"].layout.annotations]
        assert any("Acme purchase history" in t for t in texts)

    def test_skips_failed_analyses(self, config):
        failed = AnalysisResult.from_df("ltv_forecast", "x", pd.DataFrame(), error="boom")
        assert create_charts([failed], config) == {}


class TestChartBuilders:
    def test_heatmap_orientation(self, config):
        df = pd.DataFrame(
            {
                "origin": ["inactive", "cold", "active"],
                "inactive": [0.9, 0.6, 0.0],
                "cold": [0.0, 0.0, 0.4],
                "active": [0.1, 0.4, 0.6],
            }
        )
        fig = chart_transition_heatmap(AnalysisResult.from_df("transition_probabilities", "P", df), config)
        heat = fig.data[0]
        assert list(heat.y) == ["Inactive", "Cold", "Active"]
        assert heat.z[2][2] == pytest.approx(0.6)

    def test_population_lines_per_segment(self, results, config):
        forecast = next(r for r in results if r.name == "ltv_forecast")
        fig = chart_population_trajectory(forecast, config)
        assert [t.name for t in fig.data] == ["Inactive", "Cold", "Active"]

    def test_revenue_title_has_value(self, results, config):
        forecast = next(r for r in results if r.name == "ltv_forecast")
        fig = chart_revenue_forecast(forecast, config)
        assert "worth $" in fig.layout.title.text
        assert len(fig.data) == 3

    def test_empty_result(self, config):
        empty = AnalysisResult.from_df("ltv_forecast", "x", pd.DataFrame())
        assert not chart_revenue_forecast(empty, config).data


class TestTheme:
    def test_ensure_theme_idempotent(self):
        import plotly.io as pio

        ensure_theme()
        ensure_theme()
        assert "consultant" in pio.templates

    def test_insight_title_subtitle(self):
        title = insight_title("Main", "Sub")
        assert title["text"].startswith("Main<br>")

    def test_footer_skipped_without_source(self):
        fig = add_source_footer(go.Figure())
        assert not fig.layout.annotations


class TestChartPngBytes:
    def test_chart_png_bytes(self, results, config):
        pytest.importorskip("kaleido")
        charts = create_charts(results, config)
        png = chart_png_bytes(charts["segment_summary"], config, scale=1)
        assert png.startswith(b"\x89PNG")
