"""Per-customer behavioural features as of a reference date.

One row per customer with recency, first_purchase (both in whole days before
the reference date), frequency, avg_purchase and max_purchase.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Literal

import pandas as pd

from customer_ltv.column_map import REQUIRED_COLUMNS
from customer_ltv.exceptions import ColumnMismatchError, ConfigurationError, InputDataError

logger = logging.getLogger(__name__)

FEATURE_COLUMNS = [
    "customer_id",
    "recency",
    "first_purchase",
    "frequency",
    "avg_purchase",
    "max_purchase",
]

Inclusive = Literal["both", "neither", "left", "right"]

DateLike = date | str | pd.Timestamp


def require_transactions(transactions: pd.DataFrame) -> None:
    """Fail fast unless *transactions* carries clean canonical columns."""
    missing = REQUIRED_COLUMNS - set(transactions.columns)
    if missing:
        raise ColumnMismatchError(missing=missing, available=set(transactions.columns))
    if not pd.api.types.is_datetime64_any_dtype(transactions["order_date"]):
        raise InputDataError("order_date must be parsed to datetime before aggregation")
    if transactions["customer_id"].isna().any() or transactions["price"].isna().any():
        raise InputDataError("Incomplete rows (missing customer_id or price) must be removed first")
    if (transactions["price"] < 0).any():
        raise InputDataError("Negative prices in transaction batch")


def filter_window(
    transactions: pd.DataFrame,
    window_start: DateLike | None = None,
    window_end: DateLike | None = None,
    inclusive: Inclusive = "left",
) -> pd.DataFrame:
    """Keep transactions whose order_date lies in the window.

    *inclusive* follows ``pandas.Series.between``; omitted bounds are open.
    """
    if inclusive not in ("both", "neither", "left", "right"):
        raise ConfigurationError(f"Unknown inclusive={inclusive!r}")
    if window_start is not None and window_end is not None:
        if pd.Timestamp(window_start) > pd.Timestamp(window_end):
            raise ConfigurationError(f"window_start {window_start} is after window_end {window_end}")
    dates = transactions["order_date"]
    mask = pd.Series(True, index=transactions.index)
    if window_start is not None:
        start = pd.Timestamp(window_start)
        mask &= dates >= start if inclusive in ("both", "left") else dates > start
    if window_end is not None:
        end = pd.Timestamp(window_end)
        mask &= dates <= end if inclusive in ("both", "right") else dates < end
    return transactions.loc[mask]


def aggregate_features(
    transactions: pd.DataFrame,
    reference_date: DateLike,
    window_start: DateLike | None = None,
    window_end: DateLike | None = None,
    inclusive: Inclusive = "left",
) -> pd.DataFrame:
    """Reduce transactions to one feature row per customer.

    Raises ConfigurationError if any in-window transaction is dated after
    *reference_date* (negative recency is never clamped).
    """
    require_transactions(transactions)
    ref = pd.Timestamp(reference_date).normalize()
    window = filter_window(transactions, window_start, window_end, inclusive)

    if window.empty:
        logger.warning(
            "No transactions in window [%s, %s) for reference date %s",
            window_start,
            window_end,
            ref.date(),
        )
        return _empty_features(transactions)

    latest = window["order_date"].max()
    if latest > ref:
        raise ConfigurationError(
            f"Reference date {ref.date()} precedes transaction dated {latest.date()}; "
            "choose a reference date after the aggregation window"
        )

    grouped = window.groupby("customer_id", sort=True).agg(
        last_order=("order_date", "max"),
        first_order=("order_date", "min"),
        frequency=("price", "count"),
        avg_purchase=("price", "mean"),
        max_purchase=("price", "max"),
    )
    grouped["recency"] = (ref - grouped["last_order"]).dt.days.astype("int64")
    grouped["first_purchase"] = (ref - grouped["first_order"]).dt.days.astype("int64")
    grouped["frequency"] = grouped["frequency"].astype("int64")

    features = grouped.reset_index()[FEATURE_COLUMNS]
    logger.debug("Aggregated %d customers as of %s", len(features), ref.date())
    return features


def period_revenue(
    transactions: pd.DataFrame,
    start: DateLike,
    end: DateLike,
) -> pd.Series:
    """Total spend per customer in ``[start, end)``, indexed by customer_id."""
    require_transactions(transactions)
    window = filter_window(transactions, start, end, inclusive="left")
    revenue = window.groupby("customer_id", sort=True)["price"].sum()
    revenue.name = "revenue"
    return revenue


def _empty_features(transactions: pd.DataFrame) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "customer_id": pd.Series(dtype=transactions["customer_id"].dtype),
            "recency": pd.Series(dtype="int64"),
            "first_purchase": pd.Series(dtype="int64"),
            "frequency": pd.Series(dtype="int64"),
            "avg_purchase": pd.Series(dtype="float64"),
            "max_purchase": pd.Series(dtype="float64"),
        }
    )
