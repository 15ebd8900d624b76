"""Analysis registry and runner."""

from __future__ import annotations

import logging
from collections.abc import Callable

import pandas as pd

from customer_ltv.analyses.base import AnalysisResult
from customer_ltv.analyses.forecast import analyze_ltv_forecast
from customer_ltv.analyses.segmentation import analyze_customer_features, analyze_segment_summary
from customer_ltv.analyses.spend import analyze_spend_model
from customer_ltv.analyses.transitions import (
    analyze_transition_counts,
    analyze_transition_probabilities,
)
from customer_ltv.exceptions import AnalysisError
from customer_ltv.settings import Settings

logger = logging.getLogger(__name__)

AnalysisFunc = Callable[[pd.DataFrame, Settings, dict | None], AnalysisResult]

# Deterministic ordering -- dependency constraints:
#   M1 customer_features MUST be first (populates context["snapshots"])
#   M2 transition_counts MUST precede probabilities and M3 (populates context["transitions"])
ANALYSIS_REGISTRY: list[tuple[str, AnalysisFunc]] = [
    # M1: Features & segments
    ("customer_features", analyze_customer_features),
    ("segment_summary", analyze_segment_summary),
    # M2: Transitions
    ("transition_counts", analyze_transition_counts),
    ("transition_probabilities", analyze_transition_probabilities),
    # M3: Forecast
    ("ltv_forecast", analyze_ltv_forecast),
    # M4: Spend regression
    ("spend_model", analyze_spend_model),
]


def run_all_analyses(
    df: pd.DataFrame,
    settings: Settings,
    on_progress: Callable[[str], None] | None = None,
    strict: bool = False,
) -> list[AnalysisResult]:
    """Execute every registered analysis and return results.

    Failed analyses produce an AnalysisResult with error set (no crash);
    analyses that depend on a failed one fail in turn with a clear message.
    With *strict* the first failure is raised as AnalysisError instead.
    """
    context: dict = {"completed_results": {}}
    results: list[AnalysisResult] = []

    for name, func in ANALYSIS_REGISTRY:
        if on_progress:
            on_progress(name)
        try:
            result = func(df, settings, context)
            results.append(result)
            context["completed_results"][name] = result
        except Exception as e:
            if strict:
                raise AnalysisError(name, e) from e
            logger.warning("Analysis '%s' failed: %s", name, e)
            results.append(AnalysisResult.from_df(name, name, pd.DataFrame(), error=str(e)))

    return results
