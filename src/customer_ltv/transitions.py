"""Year-over-year segment transitions between two customer snapshots."""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field

import pandas as pd

from customer_ltv.exceptions import ConfigurationError, DegenerateTransitionWarning
from customer_ltv.features import DateLike, aggregate_features
from customer_ltv.segments import (
    DEFAULT_POLICY,
    SEGMENT_LABELS,
    SegmentPolicy,
    assign_segments,
    segment_dtype,
)

logger = logging.getLogger(__name__)

ROW_SUM_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Snapshot:
    """Segmented customer features as of one reference date."""

    reference_date: pd.Timestamp
    features: pd.DataFrame
    policy: SegmentPolicy = DEFAULT_POLICY

    @property
    def customer_count(self) -> int:
        return len(self.features)


@dataclass
class TransitionEstimate:
    """Joined table plus count and probability matrices for one period step."""

    joined: pd.DataFrame
    counts: pd.DataFrame
    probabilities: pd.DataFrame
    degenerate_segments: list[str] = field(default_factory=list)


def build_snapshot(
    transactions: pd.DataFrame,
    reference_date: DateLike,
    window_start: DateLike | None = None,
    policy: SegmentPolicy = DEFAULT_POLICY,
) -> Snapshot:
    """Aggregate purchases before *reference_date* (from *window_start*) and segment them."""
    ref = pd.Timestamp(reference_date).normalize()
    features = aggregate_features(
        transactions,
        reference_date=ref,
        window_start=window_start,
        window_end=ref,
        inclusive="left",
    )
    return Snapshot(reference_date=ref, features=assign_segments(features, policy), policy=policy)


def join_snapshots(origin: Snapshot, dest: Snapshot) -> pd.DataFrame:
    """Left-join *dest* onto *origin* by customer_id.

    Every origin customer appears exactly once. Customers missing from *dest*
    made no purchase in the destination window, so their last purchase is
    unchanged: the destination recency is the origin recency aged by the gap
    between reference dates, re-segmented with the destination policy.
    """
    gap = (dest.reference_date - origin.reference_date).days
    if gap <= 0:
        raise ConfigurationError(
            f"Destination reference date {dest.reference_date.date()} must be after "
            f"origin reference date {origin.reference_date.date()}"
        )

    left = origin.features[["customer_id", "segment", "recency"]].rename(
        columns={"segment": "origin_segment", "recency": "origin_recency"}
    )
    right = dest.features[["customer_id", "segment", "recency"]].rename(
        columns={"segment": "dest_segment", "recency": "dest_recency"}
    )
    joined = left.merge(right, on="customer_id", how="left", indicator=True, validate="one_to_one")

    observed = joined["_merge"] == "both"
    aged = joined.loc[~observed, "origin_recency"].astype("int64") + gap
    joined.loc[~observed, "dest_recency"] = aged
    joined["dest_recency"] = joined["dest_recency"].astype("int64")

    dest_labels = joined["dest_segment"].astype(object)
    dest_labels.loc[~observed] = [dest.policy(int(r)).value for r in aged]
    joined["dest_segment"] = pd.Series(dest_labels, index=joined.index).astype(segment_dtype())
    joined["origin_segment"] = joined["origin_segment"].astype(segment_dtype())
    joined["dest_observed"] = observed

    unobserved = int((~observed).sum())
    if unobserved:
        logger.info(
            "%d of %d origin customers had no purchases by %s; destination aged by %d days",
            unobserved,
            len(joined),
            dest.reference_date.date(),
            gap,
        )
    return joined[
        ["customer_id", "origin_segment", "dest_segment", "origin_recency", "dest_recency", "dest_observed"]
    ].reset_index(drop=True)


def transition_counts(joined: pd.DataFrame) -> pd.DataFrame:
    """Square count matrix: rows = origin segment, columns = destination segment."""
    counts = pd.DataFrame(0, index=SEGMENT_LABELS, columns=SEGMENT_LABELS, dtype="int64")
    pairs = joined.groupby(["origin_segment", "dest_segment"], observed=True).size()
    for (origin, dest), n in pairs.items():
        counts.loc[str(origin), str(dest)] += int(n)
    counts.index.name = "origin"
    counts.columns.name = "destination"
    return counts


def transition_probabilities(counts: pd.DataFrame, smoothing: float = 0.0) -> pd.DataFrame:
    """Row-normalize *counts* into a row-stochastic matrix.

    Rows with no observations stay all-zero and raise a
    DegenerateTransitionWarning. ``smoothing > 0`` adds a pseudo-count to
    every cell of rows that have observations.
    """
    _check_square(counts)
    if smoothing < 0:
        raise ConfigurationError(f"smoothing must be >= 0, got {smoothing}")

    k = len(counts.columns)
    probs = pd.DataFrame(0.0, index=counts.index, columns=counts.columns)
    degenerate: list[str] = []
    for label, row in counts.iterrows():
        total = float(row.sum())
        if total == 0:
            degenerate.append(str(label))
            continue
        probs.loc[label] = (row.astype(float) + smoothing) / (total + smoothing * k)

    if degenerate:
        msg = f"No observed customers in origin segment(s) {degenerate}; rows set to zero"
        logger.warning(msg)
        warnings.warn(msg, DegenerateTransitionWarning, stacklevel=2)
    return probs


def estimate_transitions(
    origin: Snapshot,
    dest: Snapshot,
    smoothing: float = 0.0,
) -> TransitionEstimate:
    """Join two snapshots and build both transition matrices."""
    joined = join_snapshots(origin, dest)
    counts = transition_counts(joined)
    probabilities = transition_probabilities(counts, smoothing=smoothing)
    degenerate = [label for label in counts.index if counts.loc[label].sum() == 0]
    return TransitionEstimate(
        joined=joined,
        counts=counts,
        probabilities=probabilities,
        degenerate_segments=degenerate,
    )


def check_row_stochastic(probabilities: pd.DataFrame, tolerance: float = ROW_SUM_TOLERANCE) -> list[str]:
    """Return labels of non-zero rows whose sum deviates from 1 by more than *tolerance*."""
    sums = probabilities.sum(axis=1)
    bad = sums[(sums != 0) & ((sums - 1.0).abs() > tolerance)]
    return [str(label) for label in bad.index]


def _check_square(matrix: pd.DataFrame) -> None:
    if list(matrix.index) != list(matrix.columns):
        raise ConfigurationError(
            f"Transition matrix axes differ: rows={list(matrix.index)} columns={list(matrix.columns)}"
        )
