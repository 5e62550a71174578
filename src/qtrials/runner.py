"""Repeated-trial experiments.

Trials of one experiment run sequentially on one backend. Independent
experiments can run concurrently, each on its own backend.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor

import structlog

from qtrials.aggregate import summarize_results
from qtrials.backend import Backend
from qtrials.errors import InvalidConfiguration, QTrialsError
from qtrials.executor import prepare_trial, run_trial
from qtrials.types import AggregateSummary, ExperimentConfig, TrialResult

logger = structlog.get_logger(__name__)


def validate_config(config: ExperimentConfig, backend: Backend) -> None:
    if config.shots < 1:
        raise InvalidConfiguration(f"Trial count must be at least 1, got {config.shots}", circuit=config.circuit)
    _ = prepare_trial(backend, config.circuit, config.assignment, width=config.width)


def run_experiment(config: ExperimentConfig, backend: Backend) -> list[TrialResult]:
    """Run `config.shots` trials and return them in trial order.

    Any failing trial aborts the experiment; nothing partial is returned.
    """
    validate_config(config, backend)
    log = logger.bind(circuit=config.circuit, label=config.label, backend=backend.name)
    log.info("experiment_started", shots=config.shots)

    start = time.perf_counter()
    results: list[TrialResult] = []
    for trial in range(config.shots):
        try:
            result = run_trial(backend, config.circuit, config.assignment, width=config.width, trial=trial)
        except QTrialsError as error:
            log.warning("experiment_aborted", trial=trial, error=str(error), error_type=type(error).__name__)
            raise error.with_context(circuit=config.circuit, trial=trial)
        results.append(result)

    log.info("experiment_completed", shots=len(results), elapsed_s=round(time.perf_counter() - start, 4))
    return results


def summarize(config: ExperimentConfig, backend: Backend) -> AggregateSummary:
    """Run an experiment and reduce it with its family's aggregation rule."""
    return summarize_results(config, run_experiment(config, backend))


def run_many(
    configs: Sequence[ExperimentConfig],
    backend_factory: Callable[[int], Backend],
    *,
    max_workers: int | None = None,
) -> list[AggregateSummary]:
    """Summarize independent experiments concurrently.

    Each experiment gets a fresh backend from `backend_factory(index)`, where
    `index` is its position in `configs`, so seeded factories can give every
    experiment its own random stream. Results keep the order of `configs`;
    the first failure propagates.
    """
    if not configs:
        return []

    def _one(index: int, config: ExperimentConfig) -> AggregateSummary:
        return summarize(config, backend_factory(index))

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(_one, range(len(configs)), configs))
