"""Fit CLI command wiring."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from seu_weibull.cli.validation import load_config, validate_fit_inputs
from seu_weibull.data.loader import load_observations
from seu_weibull.models import VerdictStatus
from seu_weibull.pipeline import run_validation_pipeline
from seu_weibull.utils.logging import get_logger

log = get_logger(__name__, component="cli_fit")


def fit(
    data: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV with let, fluence, count columns"),
    seed: int = typer.Option(..., help="Random seed for the bootstrap"),
    config: Optional[Path] = typer.Option(None, "--config", help="Optional JSON config path"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the JSON result here"),
    max_workers: Optional[int] = typer.Option(None, "--max-workers", help="Bootstrap worker processes"),
    confidence_level: Optional[float] = typer.Option(None, "--confidence-level", help="Interval confidence level"),
) -> None:
    """Fit and validate a Weibull cross-section curve."""

    validate_fit_inputs(seed=seed, max_workers=max_workers)
    cfg = load_config(config, {"max_workers": max_workers, "confidence_level": confidence_level})
    observations = load_observations(data)
    result = run_validation_pipeline(observations, seed, cfg)

    payload = result.to_json()
    if output is not None:
        tmp_path = output.with_suffix(output.suffix + ".tmp")
        tmp_path.write_text(payload)
        tmp_path.replace(output)
        log.info("Result written", extra={"stage": "done", "output": str(output)})
    else:
        typer.echo(payload)

    report = result.validation_report
    typer.echo(f"Validation: {report.aggregate_status.value}", err=True)
    for verdict in report.with_status(VerdictStatus.FAIL):
        typer.echo(f"  FAIL {verdict.check_name}", err=True)
