"""M2: Transition matrix heatmap."""

from __future__ import annotations

import plotly.graph_objects as go

from customer_ltv.analyses.base import AnalysisResult
from customer_ltv.charts.theme import NAVY_SCALE, insight_title
from customer_ltv.segments import SEGMENT_LABELS
from customer_ltv.settings import ChartConfig


def chart_transition_heatmap(result: AnalysisResult, config: ChartConfig) -> go.Figure:
    """Origin (rows) x destination (columns) probability heatmap."""
    df = result.df
    if df.empty or "origin" not in df.columns:
        return go.Figure()

    matrix = df.set_index("origin")
    matrix.index = matrix.index.astype(str)
    matrix.columns = matrix.columns.astype(str)
    labels = [s for s in SEGMENT_LABELS if s in matrix.columns]
    matrix = matrix.reindex(index=labels, columns=labels).fillna(0.0)
    z = matrix.to_numpy().tolist()

    fig = go.Figure(
        go.Heatmap(
            z=z,
            x=[s.title() for s in labels],
            y=[s.title() for s in labels],
            zmin=0,
            zmax=1,
            colorscale=NAVY_SCALE,
            text=[[f"{v:.0%}" for v in row] for row in z],
            texttemplate="%{text}",
            textfont_size=12,
            colorbar=dict(title="Probability", tickformat=".0%"),
        )
    )

    subtitle = "Share of each origin segment moving to each destination"
    degenerate = result.metadata.get("degenerate_segments") or []
    if degenerate:
        subtitle += f" (no history for: {', '.join(degenerate)})"

    fig.update_layout(
        title=insight_title("Year-over-Year Segment Transitions", subtitle),
        xaxis_title="Destination segment",
        yaxis=dict(title="Origin segment", autorange="reversed"),
        template=config.theme,
        width=config.width,
        height=config.height,
        showlegend=False,
    )
    return fig
