"""M2: Year-over-year segment transition matrices."""

from __future__ import annotations

import pandas as pd

from customer_ltv.analyses.base import AnalysisResult
from customer_ltv.analyses.segmentation import snapshots_from_context
from customer_ltv.settings import Settings
from customer_ltv.transitions import estimate_transitions


def analyze_transition_counts(
    df: pd.DataFrame,
    settings: Settings,
    context: dict | None = None,
) -> AnalysisResult:
    """Count customers moving between segments from the prior to the current snapshot.

    Stores the TransitionEstimate in context for the probability and forecast analyses.
    """
    snapshots = snapshots_from_context(context)
    estimate = estimate_transitions(
        snapshots["prior"],
        snapshots["current"],
        smoothing=settings.forecast.smoothing,
    )
    context["transitions"] = estimate

    counts = estimate.counts.reset_index()
    counts["total"] = estimate.counts.sum(axis=1).values
    return AnalysisResult.from_df(
        "transition_counts",
        "Segment Transitions (Customer Counts)",
        counts,
        sheet_name="M2 Transition Counts",
        metadata={
            "customers": len(estimate.joined),
            "unobserved_destinations": int((~estimate.joined["dest_observed"]).sum()),
        },
    )


def analyze_transition_probabilities(
    df: pd.DataFrame,
    settings: Settings,
    context: dict | None = None,
) -> AnalysisResult:
    """Row-stochastic transition matrix used by the forecast."""
    if not context or "transitions" not in context:
        raise ValueError("transition_counts must run first (no transitions in context)")
    estimate = context["transitions"]
    probs = estimate.probabilities.round(4).reset_index()
    return AnalysisResult.from_df(
        "transition_probabilities",
        "Segment Transition Probabilities",
        probs,
        sheet_name="M2 Transition Probs",
        metadata={
            "degenerate_segments": list(estimate.degenerate_segments),
            "smoothing": settings.forecast.smoothing,
            "number_format": "0.0%",
        },
    )
