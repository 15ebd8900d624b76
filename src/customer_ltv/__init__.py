"""Customer segmentation, transition and lifetime value forecasting."""

from __future__ import annotations

from pathlib import Path

__version__ = "1.0.0"


def run_report(
    data_file: str | Path,
    output_dir: str | Path = "output/",
    **kwargs,
):
    """Convenience entry-point for Jupyter / REPL usage.

    Usage::

        from customer_ltv import run_report
        result = run_report("data/purchases.txt")
    """
    from customer_ltv.pipeline import export_outputs, run_pipeline
    from customer_ltv.settings import Settings

    settings = Settings.from_args(data_file=Path(data_file), output_dir=Path(output_dir), **kwargs)
    result = run_pipeline(settings)
    export_outputs(result)
    return result
