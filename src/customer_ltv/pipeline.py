"""Pipeline orchestrator shared by CLI and run_report()."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pandas as pd
import plotly.graph_objects as go

from customer_ltv.analyses import run_all_analyses
from customer_ltv.analyses.base import AnalysisResult
from customer_ltv.data_loader import load_data
from customer_ltv.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Container for all pipeline outputs."""

    settings: Settings
    df: pd.DataFrame
    analyses: list[AnalysisResult] = field(default_factory=list)
    charts: dict[str, go.Figure] = field(default_factory=dict)
    chart_pngs: dict[str, bytes] = field(default_factory=dict)

    def get(self, name: str) -> AnalysisResult | None:
        """Return the analysis called *name*, or None."""
        for analysis in self.analyses:
            if analysis.name == name:
                return analysis
        return None


PIPELINE_STEPS = ("Loading data...", "Running analyses...", "Building charts...")


def run_pipeline(
    settings: Settings,
    on_progress: Callable[[int, int, str], None] | None = None,
) -> PipelineResult:
    """Load the purchase log, run every registered analysis and build charts.

    *on_progress* is called as (step, total, message) before each step.
    """

    def step(index: int) -> None:
        if on_progress:
            on_progress(index, len(PIPELINE_STEPS), PIPELINE_STEPS[index])

    step(0)
    df = load_data(settings)

    step(1)
    analyses = run_all_analyses(df, settings, strict=settings.strict)
    failed = [a.name for a in analyses if a.error is not None]
    logger.info("%d/%d analyses completed", len(analyses) - len(failed), len(analyses))
    if failed:
        logger.warning("Failed analyses: %s", ", ".join(failed))

    step(2)
    result = PipelineResult(settings=settings, df=df, analyses=analyses)
    result.charts = _build_charts(result)
    return result


def _build_charts(result: PipelineResult) -> dict[str, go.Figure]:
    from customer_ltv.charts import create_charts

    dates = result.df["order_date"]
    date_range = "" if dates.empty else f"{dates.min():%Y-%m-%d} to {dates.max():%Y-%m-%d}"
    try:
        charts = create_charts(
            result.analyses,
            result.settings.charts,
            client_name=result.settings.client_name or "",
            date_range=date_range,
        )
    except Exception as e:
        logger.error("Chart generation failed: %s", e, exc_info=True)
        return {}
    logger.info("Built %d charts", len(charts))
    return charts


def _render_chart_pngs(result: PipelineResult) -> dict[str, bytes]:
    """Render every chart once; the bytes serve both the PNG files and the workbook."""
    from customer_ltv.charts import chart_png_bytes

    pngs: dict[str, bytes] = {}
    for name, fig in result.charts.items():
        try:
            pngs[name] = chart_png_bytes(fig, result.settings.charts)
        except Exception as e:
            logger.warning("PNG render failed for '%s': %s", name, e)
    return pngs


def export_outputs(result: PipelineResult) -> list[Path]:
    """Write chart PNGs and the Excel report as configured.

    Returns the generated file paths.
    """
    settings = result.settings
    settings.output_dir.mkdir(parents=True, exist_ok=True)
    generated: list[Path] = []

    if result.charts and settings.outputs.chart_images:
        result.chart_pngs = _render_chart_pngs(result)
        logger.info("Rendered %d of %d charts", len(result.chart_pngs), len(result.charts))
        chart_dir = settings.output_dir / "charts"
        chart_dir.mkdir(parents=True, exist_ok=True)
        for name, png in result.chart_pngs.items():
            png_path = chart_dir / f"{name.replace(':', '_')}.png"
            png_path.write_bytes(png)
            generated.append(png_path)

    if settings.outputs.excel:
        from customer_ltv.exports.excel_report import write_excel_report

        stem = settings.data_file.stem if settings.data_file else "customers"
        path = settings.output_dir / f"{stem}_LTV_Report_{datetime.now():%Y%m%d}.xlsx"
        try:
            write_excel_report(result, path)
            generated.append(path)
            logger.info("Excel report: %s", path)
        except Exception as e:
            logger.error("Excel report failed: %s", e, exc_info=True)

    return generated
