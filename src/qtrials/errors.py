"""Error taxonomy for experiment execution and aggregation."""

from __future__ import annotations


class QTrialsError(Exception):
    """Base error. Carries the circuit id and trial index when known."""

    circuit: str | None
    trial: int | None

    def __init__(self, message: str, *, circuit: str | None = None, trial: int | None = None):
        super().__init__(message)
        self.message = message
        self.circuit = circuit
        self.trial = trial

    def with_context(self, *, circuit: str | None = None, trial: int | None = None) -> "QTrialsError":
        """Fill in any context the raising site did not know about."""
        if self.circuit is None:
            self.circuit = circuit
        if self.trial is None:
            self.trial = trial
        return self

    def __str__(self) -> str:
        context: list[str] = []
        if self.circuit is not None:
            context.append(f"circuit={self.circuit}")
        if self.trial is not None:
            context.append(f"trial={self.trial}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class InvalidConfiguration(QTrialsError):
    """Bad trial count, bad initial assignment, unknown circuit or insufficient capacity."""


class BackendFailure(QTrialsError):
    """Qubit allocation, gate application or measurement failed."""


class InsufficientData(QTrialsError):
    """Aggregation was asked to reduce an empty result stream."""


class MalformedInput(QTrialsError):
    """A trial result does not match the experiment's observed qubits."""
