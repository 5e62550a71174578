"""Single-trial execution against a backend."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager

import structlog

from qtrials.backend import Backend
from qtrials.circuits import CircuitContract, get_circuit
from qtrials.errors import BackendFailure, InvalidConfiguration, QTrialsError
from qtrials.types import AssignmentValue, TrialResult

logger = structlog.get_logger(__name__)


@contextmanager
def allocated(backend: Backend, n_qubits: int) -> Iterator[tuple[int, ...]]:
    """Hold `n_qubits` for the duration of the block.

    The register is released on every exit path, including errors raised
    inside the block and KeyboardInterrupt.
    """
    qubits = backend.allocate_qubits(n_qubits)
    try:
        yield qubits
    finally:
        backend.release(qubits)


def prepare_trial(
    backend: Backend,
    circuit_id: str,
    assignment: Sequence[AssignmentValue],
    *,
    width: int | None = None,
) -> CircuitContract:
    """Resolve and validate a circuit without touching the backend's qubits."""
    contract = get_circuit(circuit_id)
    contract.validate(assignment, width)
    required = contract.n_qubits(width)
    if required > backend.capacity:
        raise InvalidConfiguration(
            f"Circuit needs {required} qubits but backend {backend.name} holds {backend.capacity}",
            circuit=contract.name,
        )
    return contract


def run_trial(
    backend: Backend,
    circuit_id: str,
    assignment: Sequence[AssignmentValue],
    *,
    width: int | None = None,
    trial: int = 0,
) -> TrialResult:
    """Run one trial and measure each observed qubit exactly once."""
    contract = prepare_trial(backend, circuit_id, assignment, width=width)
    observed = contract.observed(width)

    try:
        with allocated(backend, contract.n_qubits(width)) as qubits:
            contract.drive(backend, qubits, assignment, width)
            outcomes = tuple(backend.measure(qubits[i]) for i in observed)
    except QTrialsError as error:
        raise error.with_context(circuit=contract.name, trial=trial)
    except Exception as error:
        logger.warning("backend_error", circuit=contract.name, trial=trial, error=repr(error))
        raise BackendFailure(
            f"Backend {backend.name} failed: {error}", circuit=contract.name, trial=trial,
        ) from error

    return TrialResult(circuit=contract.name, trial=trial, observed=observed, outcomes=outcomes)
