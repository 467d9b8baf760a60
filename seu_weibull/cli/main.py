"""Typer CLI entrypoint with structured error handling."""

from __future__ import annotations

import sys

import typer

from seu_weibull.cli.commands.fit import fit
from seu_weibull.exceptions import (
    BootstrapFailureRateError,
    ConfigValidationError,
    FitConvergenceError,
    InsufficientDataError,
    SchemaError,
)
from seu_weibull.utils.logging import configure_logging, get_logger

app = typer.Typer(help="SEU Weibull fit validation CLI")


app.command()(fit)


@app.callback()
def _root() -> None:
    """Fit 4-parameter Weibull curves to SEU cross-section data."""


log = get_logger(__name__, component="cli")


def main() -> None:
    configure_logging(component="cli")
    try:
        app()
    except SchemaError as exc:
        log.error(f"Invalid observations: {exc}")
        raise SystemExit(1)
    except InsufficientDataError as exc:
        log.error(f"Data validation failed: {exc}")
        raise SystemExit(2)
    except (FitConvergenceError, BootstrapFailureRateError) as exc:
        log.error(f"Weibull fitting failed: {exc}")
        raise SystemExit(3)
    except ConfigValidationError as exc:
        log.error(str(exc))
        raise SystemExit(4)
    except KeyboardInterrupt:
        log.info("Shutdown requested.")
        raise SystemExit(130)
    except Exception:
        log.exception("Unhandled exception")
        raise SystemExit(255)


if __name__ == "__main__":
    # Use sys.exit to ensure proper exit code propagation under raw python invocation
    sys.exit(main())
