"""Recency-based customer segmentation.

Segments are ordered by engagement: ``inactive < cold < active``. The ordering
drives matrix axes and display; it does not constrain which transitions occur.
Policies are plain callables mapping a recency (days) to a Segment, so an
alternative rule can be swapped in wherever a policy is accepted.
"""

from __future__ import annotations

import enum
import functools
from typing import Protocol, runtime_checkable

import pandas as pd

from customer_ltv.exceptions import ConfigurationError

COLD_THRESHOLD_DAYS = 365
INACTIVE_THRESHOLD_DAYS = 730


@functools.total_ordering
class Segment(enum.Enum):
    """Customer engagement segment, least engaged first."""

    INACTIVE = "inactive"
    COLD = "cold"
    ACTIVE = "active"

    @property
    def rank(self) -> int:
        return _RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Segment):
            return NotImplemented
        return self.rank < other.rank

    def __str__(self) -> str:
        return self.value


SEGMENT_ORDER: tuple[Segment, ...] = (Segment.INACTIVE, Segment.COLD, Segment.ACTIVE)
SEGMENT_LABELS: list[str] = [s.value for s in SEGMENT_ORDER]
_RANK = {s: i for i, s in enumerate(SEGMENT_ORDER)}


@runtime_checkable
class SegmentPolicy(Protocol):
    """Anything that maps a recency in days to a Segment."""

    name: str

    def __call__(self, recency: int) -> Segment: ...


class RecencyThresholdPolicy:
    """Half-open threshold rule; boundary values fall in the less engaged bucket.

    ``recency >= inactive_days`` -> inactive,
    ``cold_days <= recency < inactive_days`` -> cold,
    ``recency < cold_days`` -> active.
    """

    def __init__(
        self,
        cold_days: int = COLD_THRESHOLD_DAYS,
        inactive_days: int = INACTIVE_THRESHOLD_DAYS,
    ) -> None:
        if cold_days <= 0 or cold_days >= inactive_days:
            raise ConfigurationError(
                f"Recency thresholds must satisfy 0 < cold_days < inactive_days, "
                f"got cold_days={cold_days}, inactive_days={inactive_days}"
            )
        self.cold_days = cold_days
        self.inactive_days = inactive_days
        self.name = f"recency_{cold_days}_{inactive_days}"

    def __call__(self, recency: int) -> Segment:
        if recency < 0:
            raise ConfigurationError(f"Negative recency {recency}: reference date precedes purchase")
        if recency >= self.inactive_days:
            return Segment.INACTIVE
        if recency >= self.cold_days:
            return Segment.COLD
        return Segment.ACTIVE

    def __repr__(self) -> str:
        return f"RecencyThresholdPolicy(cold_days={self.cold_days}, inactive_days={self.inactive_days})"


DEFAULT_POLICY = RecencyThresholdPolicy()


def segment_dtype() -> pd.CategoricalDtype:
    """Ordered categorical dtype over SEGMENT_LABELS."""
    return pd.CategoricalDtype(categories=SEGMENT_LABELS, ordered=True)


def assign_segments(features: pd.DataFrame, policy: SegmentPolicy = DEFAULT_POLICY) -> pd.DataFrame:
    """Return a copy of *features* with an ordered categorical ``segment`` column."""
    out = features.copy()
    labels = [policy(int(r)).value for r in out["recency"]]
    out["segment"] = pd.Series(labels, index=out.index, dtype=segment_dtype())
    return out


def segment_summary(segmented: pd.DataFrame) -> pd.DataFrame:
    """Per-segment customer counts and average behaviour, in SEGMENT_ORDER.

    Segments with no customers are kept with a zero count.
    """
    total = len(segmented)
    grouped = segmented.groupby("segment", observed=False)
    summary = grouped.agg(
        customers=("customer_id", "count"),
        avg_recency=("recency", "mean"),
        avg_first_purchase=("first_purchase", "mean"),
        avg_frequency=("frequency", "mean"),
        avg_purchase=("avg_purchase", "mean"),
        avg_max_purchase=("max_purchase", "mean"),
    )
    summary = summary.reindex(SEGMENT_LABELS)
    summary["customers"] = summary["customers"].fillna(0).astype(int)
    summary["pct_of_customers"] = (
        (summary["customers"] / total * 100).round(2) if total else 0.0
    )
    summary.index.name = "segment"
    return summary.reset_index().round(2)
