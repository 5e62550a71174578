"""Reduction of trial results into an AggregateSummary.

Every rule first tallies Zero/One per observed qubit. Agreement and fidelity
add a match count; classification adds a majority verdict.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace

import numpy as np
import numpy.typing as npt

from qtrials.circuits import get_circuit
from qtrials.errors import InsufficientData, InvalidConfiguration, MalformedInput
from qtrials.types import (
    AggregateSummary,
    ExperimentConfig,
    Family,
    Outcome,
    TrialResult,
    Verdict,
    freeze_counts,
)


@dataclass(frozen=True)
class CountingRule:
    """Per-qubit Zero/One tallies only."""


@dataclass(frozen=True)
class AgreementRule:
    """Trials where two observed positions read the same outcome."""

    first: int = 0
    second: int = 1


@dataclass(frozen=True)
class FidelityRule:
    """Trials where the received outcome equals the classically known sent one."""

    expected: Outcome
    position: int = 0


@dataclass(frozen=True)
class ClassificationRule:
    """Balanced/constant vote: a trial votes balanced if any input read One."""

    n_input_qubits: int | None = None


AggregationRule = CountingRule | AgreementRule | FidelityRule | ClassificationRule


def rule_for(config: ExperimentConfig) -> AggregationRule:
    """Select the reduction rule for a config's circuit family."""
    contract = get_circuit(config.circuit)
    if contract.family is Family.ENTANGLEMENT:
        return AgreementRule()
    if contract.family is Family.TELEPORTATION:
        expected = config.assignment[0] if config.assignment else None
        if not isinstance(expected, Outcome):
            raise InvalidConfiguration(
                f"Teleportation needs the sent outcome first, got {expected!r}", circuit=contract.name,
            )
        return FidelityRule(expected=expected)
    return ClassificationRule(n_input_qubits=len(contract.observed(config.width)))


def outcome_matrix(results: Sequence[TrialResult], observed: tuple[int, ...], circuit: str | None = None) -> npt.NDArray[np.int8]:
    """Stack results into a (trials, observed) array of 0/1."""
    if not results:
        raise InsufficientData("Cannot aggregate an empty result sequence", circuit=circuit)

    rows: list[list[int]] = []
    for result in results:
        if circuit is not None and result.circuit != circuit:
            raise MalformedInput(
                f"Result from circuit {result.circuit} in an experiment on {circuit}",
                circuit=circuit, trial=result.trial,
            )
        if result.observed != observed or len(result.outcomes) != len(observed):
            raise MalformedInput(
                f"Result observes qubits {result.observed} with {len(result.outcomes)} outcomes; "
                f"expected qubits {observed}",
                circuit=circuit, trial=result.trial,
            )
        rows.append([outcome.bit for outcome in result.outcomes])

    return np.asarray(rows, dtype=np.int8)


def aggregate(
    results: Sequence[TrialResult],
    rule: AggregationRule,
    observed: tuple[int, ...],
    *,
    circuit: str | None = None,
    label: str = "",
) -> AggregateSummary:
    matrix = outcome_matrix(results, observed, circuit)
    shots = int(matrix.shape[0])
    ones = matrix.sum(axis=0)
    counts = tuple(freeze_counts(shots - int(n), int(n)) for n in ones)
    name = circuit if circuit is not None else results[0].circuit

    summary = AggregateSummary(circuit=name, shots=shots, observed=observed, counts=counts, label=label)

    if isinstance(rule, CountingRule):
        return summary

    if isinstance(rule, AgreementRule):
        _check_position(rule.first, observed, name)
        _check_position(rule.second, observed, name)
        agreement = int(np.count_nonzero(matrix[:, rule.first] == matrix[:, rule.second]))
        return replace(summary, agreement=agreement)

    if isinstance(rule, FidelityRule):
        _check_position(rule.position, observed, name)
        matches = int(np.count_nonzero(matrix[:, rule.position] == rule.expected.bit))
        return replace(summary, agreement=matches)

    if isinstance(rule, ClassificationRule):
        votes = int(np.count_nonzero(matrix.any(axis=1)))
        verdict = Verdict.BALANCED if 2 * votes > shots else Verdict.CONSTANT
        return replace(summary, verdict=verdict, balanced_votes=votes, n_input_qubits=rule.n_input_qubits)

    raise MalformedInput(f"Unknown aggregation rule {rule!r}", circuit=name)


def summarize_results(config: ExperimentConfig, results: Sequence[TrialResult]) -> AggregateSummary:
    """Aggregate with the rule and observed qubits the config's circuit declares."""
    contract = get_circuit(config.circuit)
    return aggregate(
        results,
        rule_for(config),
        contract.observed(config.width),
        circuit=contract.name,
        label=config.label,
    )


def _check_position(position: int, observed: tuple[int, ...], circuit: str) -> None:
    if not 0 <= position < len(observed):
        raise MalformedInput(f"Rule position {position} outside {len(observed)} observed qubits", circuit=circuit)

