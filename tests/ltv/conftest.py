"""Shared fixtures for customer_ltv tests."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from customer_ltv.data_loader import load_data
from customer_ltv.settings import Settings

HISTORY_START = pd.Timestamp("2012-01-01")
HISTORY_END = pd.Timestamp("2015-12-31")
REFERENCE_DATE = pd.Timestamp("2016-01-01")


def make_purchases(n_customers: int = 300, seed: int = 42) -> pd.DataFrame:
    """Deterministic synthetic purchase log spanning four calendar years."""
    rng = np.random.default_rng(seed)
    span = (HISTORY_END - HISTORY_START).days
    rows = []
    for cust in range(1, n_customers + 1):
        first = int(rng.integers(0, span))
        n_orders = int(rng.integers(1, 7))
        offsets = np.sort(rng.integers(first, span + 1, size=n_orders))
        offsets[0] = first
        for offset in offsets:
            rows.append(
                {
                    "customer_id": cust,
                    "order_date": HISTORY_START + pd.Timedelta(days=int(offset)),
                    "price": round(float(rng.uniform(5, 300)), 2),
                }
            )
    return pd.DataFrame(rows)


@pytest.fixture()
def purchases() -> pd.DataFrame:
    """Synthetic purchase log with canonical columns and parsed dates."""
    return make_purchases()


@pytest.fixture()
def sample_csv_path(purchases: pd.DataFrame, tmp_path: Path) -> Path:
    """The synthetic purchase log written to a CSV file."""
    path = tmp_path / "acme_purchases.csv"
    out = purchases.copy()
    out["order_date"] = out["order_date"].dt.strftime("%Y-%m-%d")
    out.to_csv(path, index=False)
    return path


@pytest.fixture()
def sample_settings(sample_csv_path: Path, tmp_path: Path) -> Settings:
    """Settings pointing at the sample CSV with chart images disabled."""
    return Settings(
        data_file=sample_csv_path,
        output_dir=tmp_path / "output",
        reference_date=REFERENCE_DATE.date(),
        outputs={"chart_images": False},
    )


@pytest.fixture()
def loaded_df(sample_settings: Settings) -> pd.DataFrame:
    return load_data(sample_settings)


@pytest.fixture()
def three_transactions() -> pd.DataFrame:
    """Two customers, three purchases."""
    return pd.DataFrame(
        {
            "customer_id": [1, 1, 2],
            "order_date": pd.to_datetime(["2020-01-01", "2021-06-01", "2019-01-01"]),
            "price": [100.0, 200.0, 50.0],
        }
    )
