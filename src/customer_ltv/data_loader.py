"""Data loading, validation, and preparation of the purchase log.

Accepts CSV, tab-delimited (.tsv/.txt) and Excel files. Tab-delimited exports
without a header row are read with the classic ``customer_id / price /
order_date`` layout.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from customer_ltv.column_map import resolve_columns
from customer_ltv.exceptions import ColumnMismatchError, InputDataError
from customer_ltv.settings import Settings

logger = logging.getLogger(__name__)

# Column order of headerless purchase exports (purchases.txt style)
HEADERLESS_COLUMNS = ["customer_id", "price", "order_date"]

_TAB_SUFFIXES = (".tsv", ".txt")


def load_data(settings: Settings) -> pd.DataFrame:
    """Load, validate, and prepare the transaction dataset.

    Steps:
      1. Read data from file (CSV, tab-delimited or Excel)
      2. Resolve column aliases -> canonical names
      3. Drop incomplete rows (missing customer_id or price)
      4. Parse order_date and price; reject the whole batch on bad values

    Returns a DataFrame with columns customer_id, order_date, price
    (plus any extra source columns), sorted by order_date.
    """
    if settings.data_file is None:
        raise InputDataError("No data_file configured")
    df = _read_file(settings.data_file)
    df = _resolve_or_headerless(df, settings.data_file)
    df = drop_incomplete_rows(df)
    df = coerce_transactions(df)
    logger.info(
        "Loaded %d transactions from %d customers (%s to %s)",
        len(df),
        df["customer_id"].nunique(),
        _fmt_date(df["order_date"].min()),
        _fmt_date(df["order_date"].max()),
    )
    return df


def _read_file(path: Path, header: int | None = 0) -> pd.DataFrame:
    """Read a CSV, tab-delimited or Excel file into a DataFrame."""
    suffix = path.suffix.lower()
    try:
        if suffix == ".csv":
            return pd.read_csv(path, header=header)
        if suffix in _TAB_SUFFIXES:
            return pd.read_csv(path, sep="\t", header=header)
        return pd.read_excel(path, header=header)
    except Exception as e:
        raise InputDataError(f"Failed to read {path}: {e}") from e


def _resolve_or_headerless(df: pd.DataFrame, path: Path) -> pd.DataFrame:
    """Resolve aliases, falling back to the headerless three-column layout."""
    try:
        return resolve_columns(df)
    except ColumnMismatchError:
        if len(df.columns) != len(HEADERLESS_COLUMNS) or not _looks_like_data(df.columns[0]):
            raise
    logger.info("No header row detected in %s; using %s", path.name, HEADERLESS_COLUMNS)
    raw = _read_file(path, header=None)
    raw.columns = HEADERLESS_COLUMNS
    return raw


def _looks_like_data(header_value) -> bool:
    try:
        float(str(header_value))
    except ValueError:
        return False
    return True


def drop_incomplete_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Remove rows missing customer_id or price (logged, not an error)."""
    incomplete = df["customer_id"].isna() | df["price"].isna()
    dropped = int(incomplete.sum())
    if dropped:
        logger.warning("Dropped %d incomplete rows (missing customer_id or price)", dropped)
    return df.loc[~incomplete].reset_index(drop=True)


def coerce_transactions(df: pd.DataFrame) -> pd.DataFrame:
    """Parse dates and prices; raise InputDataError if any value is malformed.

    The batch is rejected as a whole -- no row-level coercion to NaT/NaN.
    """
    df = df.copy()

    dates = pd.to_datetime(df["order_date"], errors="coerce")
    bad_dates = dates.isna()
    if bad_dates.any():
        examples = df.loc[bad_dates, "order_date"].astype(str).unique()[:5].tolist()
        raise InputDataError(
            f"{int(bad_dates.sum())} rows with unparseable order_date, e.g. {examples}"
        )
    df["order_date"] = dates.dt.normalize()

    prices = pd.to_numeric(df["price"], errors="coerce")
    bad_prices = prices.isna()
    if bad_prices.any():
        examples = df.loc[bad_prices, "price"].astype(str).unique()[:5].tolist()
        raise InputDataError(f"{int(bad_prices.sum())} rows with non-numeric price, e.g. {examples}")
    negative = prices < 0
    if negative.any():
        raise InputDataError(
            f"{int(negative.sum())} rows with negative price "
            f"(total {prices[negative].sum():,.2f})"
        )
    df["price"] = prices.astype(float)

    ids = df["customer_id"]
    if pd.api.types.is_float_dtype(ids) and (ids % 1 == 0).all():
        df["customer_id"] = ids.astype("int64")

    return df.sort_values(["order_date", "customer_id"], kind="mergesort").reset_index(drop=True)


def _fmt_date(value) -> str:
    if pd.isna(value):
        return "n/a"
    return value.strftime("%Y-%m-%d")
