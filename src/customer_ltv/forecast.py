"""Markov-chain projection of segment populations and revenue.

The projection is a small dense row-vector times matrix product repeated
``horizon`` times, done with plain loops over fixed-size lists.
"""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from customer_ltv.exceptions import ConfigurationError
from customer_ltv.segments import SEGMENT_LABELS
from customer_ltv.transitions import Snapshot

Vector = list[float]


def _as_vector(values) -> Vector:
    """Coerce a sequence or segment-indexed Series to a list in SEGMENT_ORDER."""
    if isinstance(values, pd.Series):
        if set(values.index.astype(str)) == set(SEGMENT_LABELS):
            values = values.rename(index=str).reindex(SEGMENT_LABELS)
        return [float(v) for v in values.tolist()]
    return [float(v) for v in values]


def _as_matrix(matrix) -> list[Vector]:
    """Coerce a nested sequence or DataFrame to a list of rows.

    A DataFrame is realigned to SEGMENT_ORDER only when both axes carry
    exactly the segment labels; any other shape is passed through as-is
    so the size check rejects it.
    """
    if isinstance(matrix, pd.DataFrame):
        rows = set(matrix.index.astype(str))
        cols = set(matrix.columns.astype(str))
        if rows == cols == set(SEGMENT_LABELS) and matrix.shape == (len(rows), len(cols)):
            matrix = matrix.rename(index=str, columns=str).reindex(
                index=SEGMENT_LABELS, columns=SEGMENT_LABELS
            )
        return [[float(v) for v in row] for row in matrix.to_numpy().tolist()]
    return [[float(v) for v in row] for row in matrix]


def project_population(v0, transition_matrix, horizon: int) -> list[Vector]:
    """Evolve *v0* through ``v_k = v_{k-1} . P`` for k = 1..horizon.

    Returns the full trajectory ``[v0, v1, ..., vN]``. Population is conserved
    only when every row of P sums to 1.
    """
    vector = _as_vector(v0)
    matrix = _as_matrix(transition_matrix)
    n = len(vector)

    if horizon < 0:
        raise ConfigurationError(f"horizon must be >= 0, got {horizon}")
    if len(matrix) != n or any(len(row) != n for row in matrix):
        raise ConfigurationError(
            f"Transition matrix must be {n}x{n} to match the population vector, "
            f"got {len(matrix)} rows of lengths {[len(row) for row in matrix]}"
        )

    trajectory = [vector]
    for _ in range(horizon):
        prev = trajectory[-1]
        nxt = [0.0] * n
        for j in range(n):
            total = 0.0
            for i in range(n):
                total += prev[i] * matrix[i][j]
            nxt[j] = total
        trajectory.append(nxt)
    return trajectory


def project_revenue(trajectory: Sequence[Sequence[float]], avg_spend) -> list[Vector]:
    """Per-period, per-segment revenue: ``v_k[s] * avg_spend[s]``."""
    spend = _as_vector(avg_spend)
    revenue: list[Vector] = []
    for k, vector in enumerate(trajectory):
        if len(vector) != len(spend):
            raise ConfigurationError(
                f"Period {k} vector has {len(vector)} segments, avg_spend has {len(spend)}"
            )
        revenue.append([count * value for count, value in zip(vector, spend)])
    return revenue


def total_revenue(revenue: Sequence[Sequence[float]]) -> Vector:
    """Sum segment revenue for each period."""
    return [float(sum(period)) for period in revenue]


def discount_factors(rate: float, periods: int) -> Vector:
    """``d_k = 1 / (1 + rate) ** k`` for k = 0..periods-1 (so ``d_0 = 1``)."""
    if rate <= -1:
        raise ConfigurationError(f"discount rate must be > -1, got {rate}")
    if periods < 0:
        raise ConfigurationError(f"periods must be >= 0, got {periods}")
    return [1.0 / (1.0 + rate) ** k for k in range(periods)]


def discount_revenue(totals: Sequence[float], factors: Sequence[float]) -> Vector:
    """Elementwise present value; both sequences must be period-aligned."""
    if len(totals) != len(factors):
        raise ConfigurationError(
            f"Revenue ({len(totals)} periods) and discount factors ({len(factors)}) misaligned"
        )
    return [float(t) * float(d) for t, d in zip(totals, factors)]


def population_vector(snapshot: Snapshot) -> Vector:
    """Customer counts per segment in SEGMENT_ORDER."""
    counts = snapshot.features["segment"].astype(str).value_counts()
    return [float(counts.get(label, 0)) for label in SEGMENT_LABELS]


def segment_average_spend(snapshot: Snapshot, revenue: pd.Series) -> pd.Series:
    """Mean period revenue per segment; customers without purchases count as 0.

    *revenue* is indexed by customer_id (see ``features.period_revenue``).
    Empty segments get 0.
    """
    frame = snapshot.features[["customer_id", "segment"]].copy()
    frame["revenue"] = frame["customer_id"].map(revenue).fillna(0.0)
    means = frame.groupby("segment", observed=False)["revenue"].mean()
    means = means.rename(index=str).reindex(SEGMENT_LABELS).fillna(0.0)
    means.name = "avg_spend"
    return means


def forecast_table(
    trajectory: Sequence[Sequence[float]],
    avg_spend,
    discount_rate: float,
    start_year: int | None = None,
) -> pd.DataFrame:
    """Tabulate population, revenue and present value for every period.

    ``cumulative_discounted_revenue`` in the last row is the lifetime value
    of the current customer base over the horizon.
    """
    revenue = project_revenue(trajectory, avg_spend)
    totals = total_revenue(revenue)
    factors = discount_factors(discount_rate, len(totals))
    discounted = discount_revenue(totals, factors)

    rows: list[dict] = []
    cumulative = 0.0
    for k, (vector, total, factor, pv) in enumerate(zip(trajectory, totals, factors, discounted)):
        cumulative += pv
        row: dict = {"period": k}
        if start_year is not None:
            row["year"] = start_year + k
        for label, count in zip(SEGMENT_LABELS, vector):
            row[f"{label}_customers"] = count
        row["total_customers"] = float(sum(vector))
        row["total_revenue"] = total
        row["discount_factor"] = factor
        row["discounted_revenue"] = pv
        row["cumulative_discounted_revenue"] = cumulative
        rows.append(row)
    return pd.DataFrame(rows)


def trajectory_frame(trajectory: Sequence[Sequence[float]]) -> pd.DataFrame:
    """Trajectory as a DataFrame indexed by period, one column per segment."""
    frame = pd.DataFrame([list(v) for v in trajectory], columns=SEGMENT_LABELS, dtype=float)
    frame.index.name = "period"
    return frame
