"""M4: Regression of next-period spend on customer features."""

from __future__ import annotations

import pandas as pd

from customer_ltv.analyses.base import AnalysisResult, reference_dates, safe_percentage
from customer_ltv.settings import Settings
from customer_ltv.spend_model import build_training_frame, coefficient_table, fit_spend_model


def analyze_spend_model(
    df: pd.DataFrame,
    settings: Settings,
    context: dict | None = None,
) -> AnalysisResult:
    """Fit spend in the latest period against features as of the period start."""
    cfg = settings.spend_model
    if not cfg.enabled:
        return AnalysisResult.from_df(
            "spend_model",
            "Spend Model",
            pd.DataFrame(),
            sheet_name="M4 Spend Model",
            metadata={"skipped": True},
        )

    prior_ref, _ = reference_dates(df, settings)
    training = build_training_frame(df, prior_ref, period_days=settings.period_days)
    model = fit_spend_model(training, kind=cfg.kind)
    if context is not None:
        context["spend_model"] = model

    return AnalysisResult.from_df(
        "spend_model",
        f"Spend Model ({cfg.kind.replace('_', '-')} OLS)",
        coefficient_table(model),
        sheet_name="M4 Spend Model",
        metadata={
            "formula": model.formula,
            "r_squared": round(model.r_squared, 4),
            "n_obs": model.n_obs,
            "purchase_rate": safe_percentage(int(training["purchased"].sum()), len(training)),
            "number_format": "0.0000",
        },
    )
