"""Chart registry and rendering."""

from __future__ import annotations

import logging
from collections.abc import Callable

import plotly.graph_objects as go

from customer_ltv.analyses.base import AnalysisResult
from customer_ltv.charts.forecast import chart_population_trajectory, chart_revenue_forecast
from customer_ltv.charts.segments import chart_segment_sizes
from customer_ltv.charts.spend import chart_spend_coefficients
from customer_ltv.charts.transitions import chart_transition_heatmap
from customer_ltv.settings import ChartConfig

logger = logging.getLogger(__name__)

ChartFunc = Callable[[AnalysisResult, ChartConfig], go.Figure]

# Maps analysis name -> chart function.
# Composite keys ("name:variant") give one analysis several charts.
CHART_REGISTRY: dict[str, ChartFunc] = {
    # M1: Segments
    "segment_summary": chart_segment_sizes,
    # M2: Transitions
    "transition_probabilities": chart_transition_heatmap,
    # M3: Forecast
    "ltv_forecast:population": chart_population_trajectory,
    "ltv_forecast:revenue": chart_revenue_forecast,
    # M4: Spend model
    "spend_model": chart_spend_coefficients,
}


def create_charts(
    results: list[AnalysisResult],
    config: ChartConfig,
    client_name: str = "",
    date_range: str = "",
) -> dict[str, go.Figure]:
    """Generate all registered charts from analysis results.

    Returns mapping of chart name -> Plotly Figure.
    """
    from customer_ltv.charts.theme import add_source_footer, ensure_theme

    ensure_theme()

    results_by_name = {r.name: r for r in results}
    charts: dict[str, go.Figure] = {}

    for key, func in CHART_REGISTRY.items():
        analysis_name = key.split(":")[0]
        result = results_by_name.get(analysis_name)
        if result is None or result.error or result.df.empty:
            continue
        try:
            fig = func(result, config)
            if fig.data:
                add_source_footer(fig, client_name, date_range)
                charts[key] = fig
        except Exception as e:
            logger.warning("Chart '%s' failed: %s", key, e)

    return charts


def chart_png_bytes(fig: go.Figure, config: ChartConfig, scale: int | None = None) -> bytes:
    """Render a Plotly figure to PNG bytes (kaleido)."""
    return fig.to_image(
        format="png",
        width=config.width,
        height=config.height,
        scale=scale or config.scale,
    )

