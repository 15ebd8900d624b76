"""Typer CLI for customer_ltv."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from customer_ltv.exceptions import LtvError
from customer_ltv.formatting import format_value
from customer_ltv.pipeline import export_outputs, run_pipeline
from customer_ltv.settings import Settings

app = typer.Typer(help="Customer segmentation, transition and lifetime value forecasting.")
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


@app.command()
def analyze(
    data_file: Path = typer.Argument(..., help="Path to CSV/TXT/Excel purchase log."),
    config: Path = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    output_dir: Path = typer.Option(None, "--output-dir", "-o", help="Output directory"),
    client_name: str = typer.Option(None, "--client-name", help="Display name for the report"),
    reference_date: str = typer.Option(
        None, "--reference-date", help="Current reference date (YYYY-MM-DD)"
    ),
    horizon: int = typer.Option(None, "--horizon", help="Forecast periods"),
    discount_rate: float = typer.Option(None, "--discount-rate", help="Per-period discount rate"),
    smoothing: float = typer.Option(None, "--smoothing", help="Additive smoothing for transitions"),
    no_charts: bool = typer.Option(False, "--no-charts", help="Skip chart images"),
    no_excel: bool = typer.Option(False, "--no-excel", help="Skip the Excel report"),
    strict: bool = typer.Option(False, "--strict", help="Stop at the first failed analysis"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Run the full lifetime value pipeline."""
    _setup_logging(verbose)

    overrides: dict = {"data_file": data_file}
    if output_dir:
        overrides["output_dir"] = output_dir
    if client_name:
        overrides["client_name"] = client_name
    if reference_date:
        try:
            overrides["reference_date"] = datetime.strptime(reference_date, "%Y-%m-%d").date()
        except ValueError as e:
            raise typer.BadParameter(
                f"expected YYYY-MM-DD, got {reference_date!r}", param_hint="--reference-date"
            ) from e
    if strict:
        overrides["strict"] = True

    forecast = {
        k: v
        for k, v in (("horizon", horizon), ("discount_rate", discount_rate), ("smoothing", smoothing))
        if v is not None
    }
    if forecast:
        overrides["forecast"] = forecast
    outputs = {}
    if no_charts:
        outputs["chart_images"] = False
    if no_excel:
        outputs["excel"] = False
    if outputs:
        overrides["outputs"] = outputs

    def on_progress(step: int, total: int, msg: str) -> None:
        console.print(f"  [{step + 1}/{total}] {msg}")

    try:
        if config and config.exists():
            settings = Settings.from_yaml(config, **overrides)
        else:
            settings = Settings.from_args(**overrides)

        console.print(f"[bold]Customer Lifetime Value[/bold] -- {data_file.name}")
        result = run_pipeline(settings, on_progress=on_progress)
    except LtvError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    successful = sum(1 for a in result.analyses if a.error is None)
    console.print(f"  {successful}/{len(result.analyses)} analyses completed")
    console.print(f"  {len(result.charts)} charts generated")

    forecast_result = result.get("ltv_forecast")
    if forecast_result is not None and forecast_result.error is None:
        value = forecast_result.metadata["customer_base_value"]
        console.print(
            f"  Customer base value ({settings.forecast.horizon} periods): "
            f"[bold]{format_value(value, 'discounted_revenue')}[/bold]"
        )

    files = export_outputs(result)
    for f in files:
        console.print(f"  Output: {f}")

    console.print("[bold green]Done.[/bold green]")
