"""Base types and helpers for all report analyses."""

from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd

from customer_ltv.settings import Settings


@dataclass
class AnalysisResult:
    """Outcome of a single analysis function."""

    name: str
    title: str
    df: pd.DataFrame
    error: str | None = None
    sheet_name: str | None = None
    metadata: dict = field(default_factory=dict)

    @classmethod
    def from_df(
        cls,
        name: str,
        title: str,
        df: pd.DataFrame,
        *,
        error: str | None = None,
        sheet_name: str | None = None,
        metadata: dict | None = None,
    ) -> AnalysisResult:
        return cls(
            name=name,
            title=title,
            df=df,
            error=error,
            sheet_name=sheet_name,
            metadata=dict(metadata or {}),
        )


def safe_percentage(part: float, total: float) -> float:
    """Return part/total * 100 without ZeroDivisionError."""
    if total == 0:
        return 0.0
    return round((part / total) * 100, 2)


def reference_dates(df: pd.DataFrame, settings: Settings) -> tuple[pd.Timestamp, pd.Timestamp]:
    """Return (prior, current) reference dates one period apart.

    The current reference date defaults to the day after the last purchase.
    """
    if settings.reference_date is not None:
        current = pd.Timestamp(settings.reference_date).normalize()
    else:
        current = df["order_date"].max().normalize() + pd.Timedelta(days=1)
    prior = current - pd.Timedelta(days=settings.period_days)
    return prior, current
