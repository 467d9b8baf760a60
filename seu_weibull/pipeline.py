"""Linear SEU Weibull fit-and-validate pipeline.

Stages run strictly in order (validate input, characterize, handle zeros,
decide, fit, bootstrap, construct intervals, goodness of fit, validate). A stage
that raises moves the run to FAILED and records it as ``failed_stage``; nothing
downstream runs. PipelineErrors reach the caller tagged with the stage name,
while a SchemaError from input validation is re-raised as is.
"""

from __future__ import annotations

import json
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence, TypeVar

import numpy as np

from seu_weibull.bootstrap.engine import BootstrapEngine
from seu_weibull.characterization.characterizer import characterize
from seu_weibull.characterization.zero_events import ZeroSplit, split_zero_observations
from seu_weibull.data.validation import compute_fingerprint, validate_observations
from seu_weibull.decision.engine import select_methods
from seu_weibull.exceptions import PipelineError
from seu_weibull.fitting.mle_fitter import WeibullMLEFitter
from seu_weibull.intervals.constructor import construct_intervals
from seu_weibull.intervals.jackknife import jackknife_estimates
from seu_weibull.models import (
    BootstrapEnsemble,
    CharacterizationReport,
    CIMethod,
    FitResult,
    GoodnessOfFitResult,
    MethodSelection,
    Observation,
    ValidationReport,
    WeibullFit,
)
from seu_weibull.schema.run_config import PipelineConfig
from seu_weibull.schema.run_meta import RunMeta
from seu_weibull.utils.logging import get_logger
from seu_weibull.validation.goodness_of_fit import evaluate_goodness_of_fit
from seu_weibull.validation.parameter_validator import validate_parameters

log = get_logger(__name__, component="pipeline")

T = TypeVar("T")


class PipelineStage(str, Enum):
    INIT = "init"
    VALIDATE_INPUT = "validate_input"
    CHARACTERIZE = "characterize"
    HANDLE_ZEROS = "handle_zeros"
    DECIDE = "decide"
    FIT = "fit"
    BOOTSTRAP = "bootstrap"
    CONSTRUCT_CI = "construct_ci"
    TEST_GOF = "test_gof"
    VALIDATE = "validate"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PipelineResult:
    fit_result: FitResult
    validation_report: ValidationReport
    method_selection: MethodSelection
    characterization: CharacterizationReport
    ensemble_summary: Dict[str, Any]
    goodness_of_fit: GoodnessOfFitResult
    seed: int
    run_meta: Optional[RunMeta] = None

    def to_dict(self) -> Dict[str, Any]:
        gof = self.goodness_of_fit
        return {
            "seed": self.seed,
            "method_selection": self.method_selection.to_dict(),
            "characterization": {
                k: getattr(self.characterization, k) for k in self.characterization.__dataclass_fields__
            },
            "fit_result": self.fit_result.to_dict(),
            "bootstrap": self.ensemble_summary,
            "goodness_of_fit": {
                "deviance": gof.deviance,
                "degrees_of_freedom": gof.degrees_of_freedom,
                "p_value": gof.p_value,
                "pearson_dispersion": gof.pearson_dispersion,
            },
            "validation_report": self.validation_report.to_dict(),
            "run_meta": None if self.run_meta is None else json.loads(self.run_meta.to_json()),
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)


class PipelineRun:
    """One execution of the pipeline, exposing its current stage and failure reason."""

    def __init__(self, observations: Sequence[Observation], seed: int, config: Optional[PipelineConfig] = None) -> None:
        self.observations = list(observations)
        self.seed = int(seed)
        self.config = config or PipelineConfig()
        self.run_id = self.config.run_id or uuid.uuid4().hex[:12]
        self.state = PipelineStage.INIT
        self.failure_reason: Optional[str] = None
        self.failed_stage: Optional[PipelineStage] = None

    def _stage(self, stage: PipelineStage, func: Callable[[], T]) -> T:
        self.state = stage
        started = time.perf_counter()
        try:
            result = func()
        except Exception as exc:
            self.failed_stage = stage
            self.state = PipelineStage.FAILED
            self.failure_reason = str(exc)
            if isinstance(exc, PipelineError) and exc.stage is None:
                exc.stage = stage.value
            log.error(
                "Pipeline stage failed",
                extra={"run_id": self.run_id, "stage": stage.value, "error": str(exc)},
            )
            raise
        log.info(
            "Pipeline stage finished",
            extra={
                "run_id": self.run_id,
                "stage": stage.value,
                "duration_ms": round((time.perf_counter() - started) * 1000.0, 1),
            },
        )
        return result

    def execute(self) -> PipelineResult:
        observations = self._stage(PipelineStage.VALIDATE_INPUT, lambda: validate_observations(self.observations))
        report = self._stage(PipelineStage.CHARACTERIZE, lambda: characterize(observations))
        split: ZeroSplit = self._stage(PipelineStage.HANDLE_ZEROS, lambda: split_zero_observations(observations))
        selection = self._stage(PipelineStage.DECIDE, lambda: select_methods(report, split.has_zeros))
        log.info(
            "Methods selected",
            extra={"run_id": self.run_id, "stage": PipelineStage.DECIDE.value, **selection.to_dict()},
        )

        fit_obs = split.fit_observations
        lets = np.array([obs.let for obs in fit_obs], dtype=float)
        fluences = np.array([obs.fluence for obs in fit_obs], dtype=float)
        counts = np.array([obs.count for obs in fit_obs], dtype=float)

        fit: WeibullFit = self._stage(
            PipelineStage.FIT,
            lambda: WeibullMLEFitter(selection.mle_variant).fit(fit_obs, seed=self.seed),
        )
        ensemble: BootstrapEnsemble = self._stage(
            PipelineStage.BOOTSTRAP,
            lambda: BootstrapEngine.from_config(selection.bootstrap_variant, self.config).run(
                fit, lets, fluences, base_seed=self.seed
            ),
        )

        def build_intervals():
            jackknife = None
            if selection.ci_method is CIMethod.BCA:
                jackknife = jackknife_estimates(fit, lets, fluences, counts, seed=self.seed)
            return construct_intervals(
                ensemble,
                fit.parameters,
                selection.ci_method,
                self.config.confidence_level,
                jackknife=jackknife,
            )

        intervals = self._stage(PipelineStage.CONSTRUCT_CI, build_intervals)
        gof = self._stage(
            PipelineStage.TEST_GOF,
            lambda: evaluate_goodness_of_fit(
                fit.parameters,
                fit_obs,
                run=selection.run_goodness_of_fit,
                characterized_dof=report.degrees_of_freedom,
            ),
        )
        validation = self._stage(
            PipelineStage.VALIDATE,
            lambda: validate_parameters(
                fit,
                intervals,
                observations,
                ensemble,
                zero_limits=split.zero_limits,
                goodness_of_fit=gof,
            ),
        )

        self.state = PipelineStage.DONE
        log.info(
            "Pipeline finished",
            extra={
                "run_id": self.run_id,
                "stage": PipelineStage.DONE.value,
                "aggregate_status": validation.aggregate_status.value,
            },
        )
        return PipelineResult(
            fit_result=FitResult(
                parameters=fit.parameters,
                intervals=intervals,
                log_likelihood=fit.log_likelihood,
                zero_upper_limits=split.zero_limits,
                covariance=fit.covariance,
            ),
            validation_report=validation,
            method_selection=selection,
            characterization=report,
            ensemble_summary=ensemble.summary(),
            goodness_of_fit=gof,
            seed=self.seed,
            run_meta=RunMeta.capture_context(
                run_id=self.run_id,
                config=self.config.to_dict(),
                seed=self.seed,
                data_fingerprint=compute_fingerprint(observations),
            ),
        )


def run_validation_pipeline(
    observations: Sequence[Observation],
    seed: int,
    config: Optional[PipelineConfig] = None,
) -> PipelineResult:
    """Fit, bootstrap and validate a Weibull curve for the observations.

    Raises the stage's PipelineError (or SchemaError for invalid input) rather
    than returning a degraded result.
    """

    return PipelineRun(observations, seed, config).execute()


__all__ = ["PipelineResult", "PipelineRun", "PipelineStage", "run_validation_pipeline"]
