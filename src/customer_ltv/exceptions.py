"""Exception hierarchy for customer_ltv."""


class LtvError(Exception):
    """Base exception for all customer_ltv errors."""


class ConfigurationError(LtvError):
    """Invalid configuration or inconsistent call arguments."""


class InputDataError(LtvError):
    """Failed to load, parse or validate the transaction data."""


class ColumnMismatchError(InputDataError):
    """Required columns missing from the dataset."""

    def __init__(self, missing: set[str], available: set[str]) -> None:
        self.missing = missing
        self.available = available
        super().__init__(f"Missing required columns: {sorted(missing)}")


class AnalysisError(LtvError):
    """An individual report analysis failed."""

    def __init__(self, analysis_name: str, cause: Exception) -> None:
        self.analysis_name = analysis_name
        self.cause = cause
        super().__init__(f"Analysis '{analysis_name}' failed: {cause}")


class DegenerateTransitionWarning(UserWarning):
    """A transition-matrix row had no observations and was left all-zero."""
