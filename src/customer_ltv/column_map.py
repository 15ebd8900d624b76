"""Column alias resolution and required column definitions."""

from __future__ import annotations

import pandas as pd

from customer_ltv.exceptions import ColumnMismatchError

REQUIRED_COLUMNS = {
    "customer_id",
    "order_date",
    "price",
}

# Maps raw header variations -> canonical name.
COLUMN_ALIASES: dict[str, str] = {
    # customer_id
    "customer_id": "customer_id",
    "customerid": "customer_id",
    "customer id": "customer_id",
    "customer": "customer_id",
    "cust_id": "customer_id",
    "client_id": "customer_id",
    "user_id": "customer_id",
    # order_date
    "order_date": "order_date",
    "orderdate": "order_date",
    "order date": "order_date",
    "date_of_purchase": "order_date",
    "purchase_date": "order_date",
    "invoice_date": "order_date",
    "invoicedate": "order_date",
    "date": "order_date",
    # price
    "price": "price",
    "purchase_amount": "price",
    "amount": "price",
    "sales": "price",
    "revenue": "price",
    "order_value": "price",
}


def resolve_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename columns to canonical names using COLUMN_ALIASES.

    Returns a new DataFrame with resolved column names.
    Raises ColumnMismatchError if required columns are missing after resolution.
    """
    rename_map: dict[str, str] = {}
    for col in df.columns:
        key = str(col).strip().lower().replace("-", "_")
        canonical = COLUMN_ALIASES.get(key)
        if canonical is None or col == canonical:
            continue
        # An exact canonical header, or the first alias seen, wins over later aliases
        if canonical in df.columns or canonical in rename_map.values():
            continue
        rename_map[col] = canonical

    result = df.rename(columns=rename_map)

    resolved = set(result.columns)
    missing = REQUIRED_COLUMNS - resolved
    if missing:
        raise ColumnMismatchError(missing=missing, available=resolved)

    return result
