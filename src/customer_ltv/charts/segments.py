"""M1: Segment size charts."""

from __future__ import annotations

import plotly.graph_objects as go

from customer_ltv.analyses.base import AnalysisResult
from customer_ltv.charts.theme import ACCENT, WARM_GRAY, insight_title
from customer_ltv.settings import ChartConfig


def chart_segment_sizes(result: AnalysisResult, config: ChartConfig) -> go.Figure:
    """Customers per segment, prior vs current snapshot."""
    df = result.df
    if df.empty or "snapshot" not in df.columns:
        return go.Figure()

    snapshots = list(dict.fromkeys(df["snapshot"]))
    colors = [WARM_GRAY, ACCENT]
    fig = go.Figure()
    for i, snap in enumerate(snapshots):
        rows = df[df["snapshot"] == snap]
        fig.add_trace(
            go.Bar(
                x=[s.title() for s in rows["segment"]],
                y=rows["customers"].tolist(),
                name=snap,
                marker_color=colors[i % len(colors)],
                text=[f"{int(v):,}" for v in rows["customers"]],
                textposition="outside",
                textfont_size=10,
            )
        )

    current = df[df["snapshot"] == snapshots[-1]]
    active = current.loc[current["segment"] == "active", "pct_of_customers"]
    headline = "Customers by Recency Segment"
    if not active.empty:
        headline = f"{float(active.iloc[0]):.0f}% of customers are active"

    fig.update_layout(
        barmode="group",
        title=insight_title(headline, "Customer count per segment at each reference date"),
        yaxis_title="Customers",
        template=config.theme,
        width=config.width,
        height=config.height,
        legend=dict(orientation="h", y=-0.18, x=0.5, xanchor="center"),
    )
    return fig
