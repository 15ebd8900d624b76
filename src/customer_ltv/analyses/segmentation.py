"""M1: Customer features and recency segments."""

from __future__ import annotations

import pandas as pd

from customer_ltv.analyses.base import AnalysisResult, reference_dates
from customer_ltv.segments import RecencyThresholdPolicy, segment_summary
from customer_ltv.settings import Settings
from customer_ltv.transitions import build_snapshot


def analyze_customer_features(
    df: pd.DataFrame,
    settings: Settings,
    context: dict | None = None,
) -> AnalysisResult:
    """Build the prior and current snapshots; report current per-customer features.

    Stores both snapshots in context for the transition and forecast analyses.
    """
    prior_ref, current_ref = reference_dates(df, settings)
    policy = RecencyThresholdPolicy(
        cold_days=settings.segmentation.cold_days,
        inactive_days=settings.segmentation.inactive_days,
    )
    prior = build_snapshot(df, prior_ref, policy=policy)
    current = build_snapshot(df, current_ref, policy=policy)

    if context is not None:
        context["snapshots"] = {"prior": prior, "current": current}
        context["policy"] = policy

    features = current.features.copy()
    features["segment"] = features["segment"].astype(str)
    features["avg_purchase"] = features["avg_purchase"].round(2)
    return AnalysisResult.from_df(
        "customer_features",
        f"Customer Features as of {current_ref:%Y-%m-%d}",
        features,
        sheet_name="M1 Customers",
        metadata={
            "reference_date": current_ref.date(),
            "prior_reference_date": prior_ref.date(),
            "policy": policy.name,
        },
    )


def analyze_segment_summary(
    df: pd.DataFrame,
    settings: Settings,
    context: dict | None = None,
) -> AnalysisResult:
    """Segment profile for the prior and current snapshots side by side."""
    snapshots = snapshots_from_context(context)
    frames = []
    for label, snapshot in (("prior", snapshots["prior"]), ("current", snapshots["current"])):
        summary = segment_summary(snapshot.features)
        summary["segment"] = summary["segment"].astype(str)
        summary.insert(0, "snapshot", f"{snapshot.reference_date:%Y-%m-%d}")
        frames.append(summary)
    result = pd.concat(frames, ignore_index=True)
    return AnalysisResult.from_df(
        "segment_summary",
        "Customer Segments by Recency",
        result,
        sheet_name="M1 Segments",
    )


def snapshots_from_context(context: dict | None) -> dict:
    if not context or "snapshots" not in context:
        raise ValueError("customer_features must run first (no snapshots in context)")
    return context["snapshots"]
