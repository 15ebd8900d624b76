"""OLS models of next-period spend from current customer features."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf

from customer_ltv.exceptions import ConfigurationError
from customer_ltv.features import DateLike, aggregate_features, period_revenue

logger = logging.getLogger(__name__)

SPEND_FORMULAS: dict[str, str] = {
    "linear": "revenue ~ avg_purchase + max_purchase",
    "log_linear": "np.log(revenue) ~ np.log(avg_purchase) + np.log(max_purchase)",
}

MIN_OBSERVATIONS = 3


@dataclass
class SpendModel:
    """A fitted spend regression and the formula it came from."""

    kind: str
    formula: str
    result: object

    @property
    def r_squared(self) -> float:
        return float(self.result.rsquared)

    @property
    def n_obs(self) -> int:
        return int(self.result.nobs)


def build_training_frame(
    transactions: pd.DataFrame,
    reference_date: DateLike,
    period_days: int = 365,
) -> pd.DataFrame:
    """Features as of *reference_date* joined to spend over the following period.

    ``revenue`` is 0 for customers with no purchase in
    ``[reference_date, reference_date + period_days)``.
    """
    ref = pd.Timestamp(reference_date).normalize()
    features = aggregate_features(transactions, reference_date=ref, window_end=ref)
    revenue = period_revenue(transactions, ref, ref + pd.Timedelta(days=period_days))
    training = features.copy()
    training["revenue"] = training["customer_id"].map(revenue).fillna(0.0)
    training["purchased"] = training["revenue"] > 0
    return training


def fit_spend_model(training: pd.DataFrame, kind: str = "log_linear") -> SpendModel:
    """Fit the *kind* regression on customers who purchased in the target period."""
    if kind not in SPEND_FORMULAS:
        raise ConfigurationError(f"Unknown spend model {kind!r}; expected one of {sorted(SPEND_FORMULAS)}")

    sample = training[training["revenue"] > 0]
    if kind == "log_linear":
        sample = sample[(sample["avg_purchase"] > 0) & (sample["max_purchase"] > 0)]
    if len(sample) < MIN_OBSERVATIONS:
        raise ConfigurationError(
            f"Spend model needs at least {MIN_OBSERVATIONS} purchasers, got {len(sample)}"
        )

    formula = SPEND_FORMULAS[kind]
    result = smf.ols(formula, data=sample).fit()
    logger.info("Fitted %s spend model on %d purchasers (R^2=%.3f)", kind, len(sample), result.rsquared)
    return SpendModel(kind=kind, formula=formula, result=result)


def coefficient_table(model: SpendModel) -> pd.DataFrame:
    """Coefficient estimates with standard errors and p-values."""
    res = model.result
    table = pd.DataFrame(
        {
            "term": res.params.index,
            "coef": res.params.values,
            "std_err": res.bse.values,
            "t_value": res.tvalues.values,
            "p_value": res.pvalues.values,
        }
    )
    return table.round(4)


def predict_spend(model: SpendModel, features: pd.DataFrame) -> pd.Series:
    """Predicted spend on the revenue scale (log model predictions are exponentiated)."""
    frame = features
    if model.kind == "log_linear":
        frame = features[(features["avg_purchase"] > 0) & (features["max_purchase"] > 0)]
    predicted = model.result.predict(frame)
    if model.kind == "log_linear":
        predicted = np.exp(predicted)
    predicted.name = "predicted_revenue"
    return predicted
