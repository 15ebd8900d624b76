"""M3: Population trajectory and revenue forecast charts."""

from __future__ import annotations

import plotly.graph_objects as go

from customer_ltv.analyses.base import AnalysisResult
from customer_ltv.charts.theme import ACCENT, CORAL, GRAY_BASE, SEGMENT_COLORS, insight_title
from customer_ltv.segments import SEGMENT_LABELS
from customer_ltv.settings import ChartConfig


def _x_axis(df) -> tuple[list, str]:
    if "year" in df.columns:
        return df["year"].tolist(), "Year"
    return df["period"].tolist(), "Period"


def chart_population_trajectory(result: AnalysisResult, config: ChartConfig) -> go.Figure:
    """Projected customers per segment, one line each."""
    df = result.df
    if df.empty:
        return go.Figure()

    x, x_title = _x_axis(df)
    fig = go.Figure()
    for label in SEGMENT_LABELS:
        col = f"{label}_customers"
        if col not in df.columns:
            continue
        fig.add_trace(
            go.Scatter(
                x=x,
                y=df[col].tolist(),
                mode="lines+markers",
                name=label.title(),
                line=dict(color=SEGMENT_COLORS.get(label, GRAY_BASE), width=2.5),
                marker=dict(size=6),
            )
        )

    fig.update_layout(
        title=insight_title(
            "Projected Customers by Segment",
            "Current base evolved through the estimated transition matrix",
        ),
        xaxis_title=x_title,
        yaxis_title="Customers",
        template=config.theme,
        width=config.width,
        height=config.height,
        legend=dict(orientation="h", y=-0.18, x=0.5, xanchor="center"),
    )
    return fig


def chart_revenue_forecast(result: AnalysisResult, config: ChartConfig) -> go.Figure:
    """Nominal vs discounted revenue per period, cumulative value on a second axis."""
    df = result.df
    if df.empty or "total_revenue" not in df.columns:
        return go.Figure()

    x, x_title = _x_axis(df)
    fig = go.Figure()
    fig.add_trace(
        go.Bar(x=x, y=df["total_revenue"].tolist(), name="Revenue", marker_color=GRAY_BASE)
    )
    fig.add_trace(
        go.Bar(
            x=x,
            y=df["discounted_revenue"].tolist(),
            name="Discounted revenue",
            marker_color=ACCENT,
        )
    )
    fig.add_trace(
        go.Scatter(
            x=x,
            y=df["cumulative_discounted_revenue"].tolist(),
            name="Cumulative present value",
            mode="lines+markers",
            line=dict(color=CORAL, width=2.5),
            yaxis="y2",
        )
    )

    value = result.metadata.get("customer_base_value")
    if value is None:
        value = float(df["cumulative_discounted_revenue"].iloc[-1])
    rate = result.metadata.get("discount_rate")
    subtitle = f"Discounted at {rate:.0%} per period" if rate is not None else ""

    fig.update_layout(
        barmode="group",
        title=insight_title(f"Customer base worth ${value:,.0f}", subtitle),
        xaxis_title=x_title,
        yaxis=dict(title="Revenue ($)", tickprefix="$"),
        yaxis2=dict(
            title="Cumulative ($)",
            tickprefix="$",
            overlaying="y",
            side="right",
            showgrid=False,
        ),
        template=config.theme,
        width=config.width,
        height=config.height,
        margin=dict(l=80, r=80, t=80, b=60),
        legend=dict(orientation="h", y=-0.18, x=0.5, xanchor="center"),
    )
    return fig
