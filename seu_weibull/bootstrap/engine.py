"""Parametric bootstrap of the Weibull fit.

Each replicate draws Poisson counts from the fitted curve with its own
generator seeded ``base_seed + index`` and refits them with the bounds and
starting point of the original fit. Replicates are independent, so batches of
them run on a process pool; outcomes are re-ordered by replicate index, which
keeps the ensemble identical however the batches were scheduled.
"""

from __future__ import annotations

import time
from concurrent.futures import FIRST_COMPLETED, Future, ProcessPoolExecutor, wait
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from seu_weibull.bootstrap.errors import (
    ReplicateOutcome,
    check_failure_rate,
    record_replicate_failure,
)
from seu_weibull.exceptions import FitConvergenceError
from seu_weibull.fitting.likelihood import expected_counts
from seu_weibull.fitting.mle_fitter import WeibullMLEFitter
from seu_weibull.models import (
    BootstrapEnsemble,
    BootstrapVariant,
    MLEVariant,
    ParameterBounds,
    WeibullFit,
    WeibullParameters,
)
from seu_weibull.schema.run_config import DEFAULT_MAX_FAILURE_RATE, PipelineConfig
from seu_weibull.utils.logging import get_logger
from seu_weibull.utils.resources import clamp_workers, split_batches

log = get_logger(__name__, component="bootstrap")

CONSERVATIVE_TOLERANCE_SCALE = 0.1


@dataclass(frozen=True)
class ReplicateTask:
    """Read-only inputs shared by every replicate of one bootstrap run."""

    expected: np.ndarray
    lets: np.ndarray
    fluences: np.ndarray
    bounds: ParameterBounds
    guess: WeibullParameters
    tolerance_scale: float
    base_seed: int


def run_replicate(task: ReplicateTask, index: int) -> ReplicateOutcome:
    seed = task.base_seed + index
    rng = np.random.default_rng(seed)
    counts = rng.poisson(task.expected).astype(float)
    fitter = WeibullMLEFitter(MLEVariant.SMALL_SAMPLE, tolerance_scale=task.tolerance_scale)
    try:
        fit = fitter.refit(task.lets, task.fluences, counts, bounds=task.bounds, guess=task.guess, seed=seed)
    except (FitConvergenceError, ValueError, ArithmeticError) as exc:
        return record_replicate_failure(index, error=exc, seed=seed)
    p = fit.parameters
    return ReplicateOutcome(index=index, params=(p.sigma_sat, p.let_th, p.shape, p.width))


def run_replicate_batch(task: ReplicateTask, indices: Sequence[int]) -> List[ReplicateOutcome]:
    return [run_replicate(task, index) for index in indices]


class BootstrapEngine:
    """Generate a BootstrapEnsemble for a converged fit."""

    def __init__(
        self,
        variant: BootstrapVariant,
        *,
        n_replicates: Optional[int] = None,
        max_failure_rate: float = DEFAULT_MAX_FAILURE_RATE,
        max_workers: Optional[int] = None,
        batch_size: int = 250,
    ) -> None:
        self.variant = variant
        self.n_replicates = n_replicates if n_replicates is not None else PipelineConfig().replicates_for(variant)
        if self.n_replicates <= 0:
            raise ValueError("n_replicates must be > 0")
        self.max_failure_rate = max_failure_rate
        self.max_workers = max_workers
        self.batch_size = batch_size

    @classmethod
    def from_config(cls, variant: BootstrapVariant, config: PipelineConfig) -> "BootstrapEngine":
        return cls(
            variant,
            n_replicates=config.replicates_for(variant),
            max_failure_rate=config.max_failure_rate,
            max_workers=config.max_workers,
            batch_size=config.batch_size,
        )

    @property
    def tolerance_scale(self) -> float:
        return CONSERVATIVE_TOLERANCE_SCALE if self.variant is BootstrapVariant.CONSERVATIVE else 1.0

    def run(self, fit: WeibullFit, lets: np.ndarray, fluences: np.ndarray, *, base_seed: int) -> BootstrapEnsemble:
        lets = np.asarray(lets, dtype=float)
        fluences = np.asarray(fluences, dtype=float)
        task = ReplicateTask(
            expected=expected_counts(fit.parameters.as_array(), lets, fluences),
            lets=lets,
            fluences=fluences,
            bounds=fit.bounds,
            guess=fit.initial_guess,
            tolerance_scale=self.tolerance_scale,
            base_seed=base_seed,
        )
        batches = split_batches(self.n_replicates, self.batch_size)
        workers = clamp_workers(self.max_workers, n_tasks=len(batches))

        started = time.perf_counter()
        log.info(
            "Bootstrap started",
            extra={
                "stage": "bootstrap",
                "variant": self.variant.value,
                "seed": base_seed,
                "replicates": self.n_replicates,
                "workers": workers,
            },
        )
        if workers == 1:
            outcomes = self._run_serial(task, batches)
        else:
            outcomes = self._run_pool(task, batches, workers)

        ordered = [outcomes[i] for i in sorted(outcomes)]
        replicates = tuple(WeibullParameters.from_array(o.params) for o in ordered if o.params is not None)
        n_failed = sum(1 for o in ordered if o.params is None)
        ensemble = BootstrapEnsemble(
            replicates=replicates,
            n_failed=n_failed,
            n_requested=self.n_replicates,
            variant=self.variant,
            base_seed=base_seed,
        )
        log.info(
            "Bootstrap finished",
            extra={
                "stage": "bootstrap",
                "variant": self.variant.value,
                "n_success": ensemble.n_success,
                "n_failed": n_failed,
                "duration_ms": round((time.perf_counter() - started) * 1000.0, 1),
            },
        )
        return ensemble

    def _run_serial(self, task: ReplicateTask, batches: List[range]) -> Dict[int, ReplicateOutcome]:
        outcomes: Dict[int, ReplicateOutcome] = {}
        n_failed = 0
        for batch in batches:
            for outcome in run_replicate_batch(task, batch):
                outcomes[outcome.index] = outcome
                n_failed += not outcome.succeeded
            check_failure_rate(n_failed, self.n_replicates, self.max_failure_rate, completed=len(outcomes))
        return outcomes

    def _run_pool(self, task: ReplicateTask, batches: List[range], workers: int) -> Dict[int, ReplicateOutcome]:
        outcomes: Dict[int, ReplicateOutcome] = {}
        n_failed = 0
        executor = ProcessPoolExecutor(max_workers=workers)
        try:
            pending: set[Future] = {executor.submit(run_replicate_batch, task, list(batch)) for batch in batches}
            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    for outcome in future.result():
                        outcomes[outcome.index] = outcome
                        n_failed += not outcome.succeeded
                check_failure_rate(n_failed, self.n_replicates, self.max_failure_rate, completed=len(outcomes))
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return outcomes


def run_bootstrap(
    fit: WeibullFit,
    lets: np.ndarray,
    fluences: np.ndarray,
    variant: BootstrapVariant,
    *,
    base_seed: int,
    config: Optional[PipelineConfig] = None,
) -> BootstrapEnsemble:
    engine = BootstrapEngine.from_config(variant, config or PipelineConfig())
    return engine.run(fit, lets, fluences, base_seed=base_seed)


__all__ = ["BootstrapEngine", "ReplicateTask", "run_bootstrap", "run_replicate", "run_replicate_batch"]
