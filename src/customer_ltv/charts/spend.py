"""M4: Spend model coefficient chart."""

from __future__ import annotations

import plotly.graph_objects as go

from customer_ltv.analyses.base import AnalysisResult
from customer_ltv.charts.theme import ACCENT, WARM_GRAY, insight_title
from customer_ltv.settings import ChartConfig


def chart_spend_coefficients(result: AnalysisResult, config: ChartConfig) -> go.Figure:
    """Slope estimates with 95% intervals; insignificant terms grayed out."""
    df = result.df
    if df.empty or "coef" not in df.columns:
        return go.Figure()

    slopes = df[df["term"] != "Intercept"]
    if slopes.empty:
        return go.Figure()

    fig = go.Figure(
        go.Bar(
            x=slopes["coef"].tolist(),
            y=slopes["term"].tolist(),
            orientation="h",
            error_x=dict(type="data", array=(slopes["std_err"] * 1.96).tolist()),
            marker_color=[ACCENT if p < 0.05 else WARM_GRAY for p in slopes["p_value"]],
            text=[f"{c:.3f}" for c in slopes["coef"]],
            textposition="outside",
        )
    )

    r2 = result.metadata.get("r_squared")
    subtitle = f"R² = {r2:.3f}" if r2 is not None else ""
    fig.update_layout(
        title=insight_title("Drivers of Next-Period Spend", subtitle),
        xaxis_title="Coefficient",
        template=config.theme,
        width=config.width,
        height=config.height,
        margin=dict(l=220, r=60, t=80, b=60),
        showlegend=False,
    )
    return fig
