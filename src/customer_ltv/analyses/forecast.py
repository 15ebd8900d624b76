"""M3: Markov projection of segment populations, revenue and present value."""

from __future__ import annotations

import pandas as pd

from customer_ltv.analyses.base import AnalysisResult
from customer_ltv.analyses.segmentation import snapshots_from_context
from customer_ltv.features import period_revenue
from customer_ltv.forecast import (
    forecast_table,
    population_vector,
    project_population,
    segment_average_spend,
    trajectory_frame,
)
from customer_ltv.settings import Settings


def analyze_ltv_forecast(
    df: pd.DataFrame,
    settings: Settings,
    context: dict | None = None,
) -> AnalysisResult:
    """Project the current customer base forward and discount the revenue."""
    if not context or "transitions" not in context:
        raise ValueError("transition_counts must run first (no transitions in context)")
    snapshots = snapshots_from_context(context)
    prior, current = snapshots["prior"], snapshots["current"]
    estimate = context["transitions"]
    cfg = settings.forecast

    revenue = period_revenue(df, prior.reference_date, current.reference_date)
    avg_spend = segment_average_spend(current, revenue)
    v0 = population_vector(current)
    trajectory = project_population(v0, estimate.probabilities, cfg.horizon)

    table = forecast_table(
        trajectory,
        avg_spend,
        discount_rate=cfg.discount_rate,
        start_year=current.reference_date.year,
    )
    context["forecast"] = {
        "trajectory": trajectory_frame(trajectory),
        "avg_spend": avg_spend,
        "table": table,
    }

    ltv = float(table["cumulative_discounted_revenue"].iloc[-1])
    return AnalysisResult.from_df(
        "ltv_forecast",
        f"{cfg.horizon}-Period Segment & Revenue Forecast",
        table.round(2),
        sheet_name="M3 Forecast",
        metadata={
            "customer_base_value": round(ltv, 2),
            "avg_spend": {k: round(float(v), 2) for k, v in avg_spend.items()},
            "discount_rate": cfg.discount_rate,
        },
    )
