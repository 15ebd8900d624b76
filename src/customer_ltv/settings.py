"""Pydantic configuration for customer_ltv."""

from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from customer_ltv.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")

SUPPORTED_SUFFIXES = (".csv", ".tsv", ".txt", ".xlsx", ".xls")

BRAND_COLORS = [
    "#A2AAAD",
    "#4ABFBF",
    "#005EB8",
    "#E4573D",
    "#F3C13A",
    "#0090D4",
]


class ChartConfig(BaseModel):
    """Chart rendering settings."""

    theme: str = "consultant"
    colors: list[str] = Field(default_factory=lambda: BRAND_COLORS.copy())
    width: int = 900
    height: int = 500
    scale: int = 3


class OutputConfig(BaseModel):
    """Output format toggles."""

    excel: bool = True
    chart_images: bool = True


class SegmentationConfig(BaseModel):
    """Recency thresholds (days) for the inactive / cold / active rule."""

    model_config = {"frozen": True}

    cold_days: int = 365
    inactive_days: int = 730

    @model_validator(mode="after")
    def check_monotonic(self) -> SegmentationConfig:
        if self.cold_days <= 0:
            raise ValueError(f"cold_days must be positive, got {self.cold_days}")
        if self.cold_days >= self.inactive_days:
            raise ValueError(
                f"Thresholds must increase: cold_days={self.cold_days} "
                f">= inactive_days={self.inactive_days}"
            )
        return self


class ForecastConfig(BaseModel):
    """Markov projection and discounting parameters."""

    model_config = {"frozen": True}

    horizon: int = 10
    discount_rate: float = 0.10
    smoothing: float = 0.0

    @field_validator("horizon")
    @classmethod
    def validate_horizon(cls, v: int) -> int:
        if not 1 <= v <= 100:
            raise ValueError(f"horizon={v} outside valid range (1-100)")
        return v

    @field_validator("discount_rate")
    @classmethod
    def validate_discount_rate(cls, v: float) -> float:
        if not 0.0 <= v < 1.0:
            raise ValueError(
                f"discount_rate={v} outside valid range [0, 1). "
                "Use decimal form, e.g. 0.10 for 10%"
            )
        return v

    @field_validator("smoothing")
    @classmethod
    def validate_smoothing(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"smoothing must be >= 0, got {v}")
        return v


class SpendModelConfig(BaseModel):
    """Per-customer spend regression toggles."""

    model_config = {"frozen": True}

    enabled: bool = True
    kind: Literal["linear", "log_linear"] = "log_linear"


class Settings(BaseModel):
    """Application configuration -- immutable after creation."""

    model_config = {"frozen": True, "extra": "forbid"}

    data_file: Path | None = None
    client_name: str | None = None
    output_dir: Path = Path("output/")
    reference_date: date | None = None
    period_days: int = 365
    strict: bool = False
    segmentation: SegmentationConfig = SegmentationConfig()
    forecast: ForecastConfig = ForecastConfig()
    spend_model: SpendModelConfig = SpendModelConfig()
    outputs: OutputConfig = OutputConfig()
    charts: ChartConfig = ChartConfig()

    @field_validator("data_file", mode="before")
    @classmethod
    def expand_and_validate_data_file(cls, v: str | Path | None) -> Path | None:
        if v is None:
            return None
        p = Path(v).expanduser().resolve()
        if not p.exists():
            raise ValueError(f"Data file not found: {p}")
        if p.suffix.lower() not in SUPPORTED_SUFFIXES:
            raise ValueError(f"Unsupported file type: {p.suffix}")
        return p

    @field_validator("output_dir", mode="before")
    @classmethod
    def expand_output_dir(cls, v: str | Path) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("period_days")
    @classmethod
    def validate_period_days(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"period_days must be positive, got {v}")
        return v

    @model_validator(mode="after")
    def derive_client_name(self) -> Settings:
        if self.client_name is None and self.data_file is not None:
            stem = re.sub(r"[_\-]+", " ", self.data_file.stem).strip()
            object.__setattr__(self, "client_name", stem.title() or None)
        return self

    @classmethod
    def from_yaml(cls, config_path: Path = DEFAULT_CONFIG_PATH, **cli_overrides) -> Settings:
        """Load from YAML, merge CLI overrides (highest priority)."""
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            data = {}
        for key, value in cli_overrides.items():
            if value is None:
                continue
            # Nested sections merge key-by-key so a single CLI flag keeps the YAML siblings
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value
        try:
            return cls(**data)
        except Exception as e:
            raise ConfigurationError(f"Configuration error: {e}") from e

    @classmethod
    def from_args(cls, data_file: Path, **kwargs) -> Settings:
        """Create settings directly from arguments (no YAML needed)."""
        try:
            return cls(data_file=data_file, **kwargs)
        except Exception as e:
            raise ConfigurationError(f"Configuration error: {e}") from e
