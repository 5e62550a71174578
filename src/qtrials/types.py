"""Value types shared by the executor, runner and aggregator."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class Outcome(Enum):
    """Single-shot measurement result of one qubit."""

    ZERO = 0
    ONE = 1

    @classmethod
    def from_bit(cls, bit: int) -> "Outcome":
        return cls.ONE if bit else cls.ZERO

    @property
    def bit(self) -> int:
        return self.value

    def __str__(self) -> str:
        return "One" if self is Outcome.ONE else "Zero"


class Basis(Enum):
    """Preparation and measurement basis for a single qubit."""

    PAULI_Z = "Z"
    PAULI_X = "X"
    PAULI_Y = "Y"


class Oracle(Enum):
    """Black-box functions understood by the classifier circuits."""

    CONSTANT_ZERO = "constant_zero"
    CONSTANT_ONE = "constant_one"
    IDENTITY = "identity"
    NEGATION = "negation"
    ODD_PARITY = "odd_parity"
    EVEN_PARITY = "even_parity"

    @property
    def is_balanced(self) -> bool:
        return self not in (Oracle.CONSTANT_ZERO, Oracle.CONSTANT_ONE)


class Verdict(Enum):
    BALANCED = "Balanced"
    CONSTANT = "Constant"

    def __str__(self) -> str:
        return self.value


class Family(Enum):
    """Circuit families. Each one maps to a single aggregation rule."""

    ENTANGLEMENT = "entanglement"
    CLASSIFICATION = "classification"
    TELEPORTATION = "teleportation"


AssignmentValue = Outcome | Basis | Oracle


@dataclass(frozen=True)
class TrialResult:
    """Outcomes of one trial, positionally aligned with `observed`."""

    circuit: str
    trial: int
    observed: tuple[int, ...]
    outcomes: tuple[Outcome, ...]


@dataclass(frozen=True)
class ExperimentConfig:
    """Parameters held fixed across every trial of one experiment.

    `width` is only meaningful for variable-width circuits (Deutsch-Jozsa),
    where it is the number of input qubits.
    """

    circuit: str
    assignment: tuple[AssignmentValue, ...]
    shots: int
    width: int | None = None
    label: str = ""


@dataclass(frozen=True)
class AggregateSummary:
    """Reduced statistics over all trial results of one experiment."""

    circuit: str
    shots: int
    observed: tuple[int, ...]
    counts: tuple[Mapping[Outcome, int], ...]
    agreement: int | None = None
    verdict: Verdict | None = None
    balanced_votes: int | None = None
    n_input_qubits: int | None = None
    label: str = field(default="", compare=False)

    @property
    def agreement_rate(self) -> float | None:
        if self.agreement is None:
            return None
        return self.agreement / self.shots

    def counts_for(self, qubit: int) -> Mapping[Outcome, int]:
        """Counts for an observed qubit, addressed by its circuit index."""
        try:
            position = self.observed.index(qubit)
        except ValueError:
            raise KeyError(f"Qubit {qubit} is not observed by {self.circuit}") from None
        return self.counts[position]


def freeze_counts(zeros: int, ones: int) -> Mapping[Outcome, int]:
    return MappingProxyType({Outcome.ZERO: zeros, Outcome.ONE: ones})
