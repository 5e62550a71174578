"""Standard experiment configurations for each circuit family."""

from __future__ import annotations

from qtrials.types import Basis, ExperimentConfig, Family, Oracle, Outcome

BELL_STATES: list[tuple[Outcome, Outcome, str]] = [
    (Outcome.ZERO, Outcome.ZERO, "|φ+⟩ = 1/√2 (|00⟩ + |11⟩)"),
    (Outcome.ZERO, Outcome.ONE, "|ψ+⟩ = 1/√2 (|01⟩ + |10⟩)"),
    (Outcome.ONE, Outcome.ZERO, "|φ-⟩ = 1/√2 (|00⟩ - |11⟩)"),
    (Outcome.ONE, Outcome.ONE, "|ψ-⟩ = 1/√2 (|01⟩ - |10⟩)"),
]

DEUTSCH_ORACLES: list[tuple[Oracle, str]] = [
    (Oracle.CONSTANT_ZERO, "Returns a constant output of |0⟩"),
    (Oracle.CONSTANT_ONE, "Returns a constant output of |1⟩"),
    (Oracle.IDENTITY, "Returns the same state as the input qubit"),
    (Oracle.NEGATION, "Returns the negation of the input qubit"),
]

DEUTSCH_JOZSA_ORACLES: list[tuple[Oracle, str]] = [
    (Oracle.CONSTANT_ZERO, "Returns a constant output of |0⟩"),
    (Oracle.CONSTANT_ONE, "Returns a constant output of |1⟩"),
    (Oracle.ODD_PARITY, "Returns |1⟩/|0⟩ for odd/even inputs with state |1⟩"),
    (Oracle.EVEN_PARITY, "Returns |1⟩/|0⟩ for even/odd inputs with state |1⟩"),
]

TELEPORTATION_MESSAGES: list[tuple[Outcome, Basis, str]] = [
    (Outcome.ZERO, Basis.PAULI_Z, "|0⟩"),
    (Outcome.ONE, Basis.PAULI_Z, "|1⟩"),
    (Outcome.ZERO, Basis.PAULI_X, "|+⟩ = 1/√2 (|0⟩ + |1⟩)"),
    (Outcome.ONE, Basis.PAULI_X, "|-⟩ = 1/√2 (|0⟩ - |1⟩)"),
    (Outcome.ZERO, Basis.PAULI_Y, "|+i⟩ = 1/√2 (|0⟩ + i|1⟩)"),
    (Outcome.ONE, Basis.PAULI_Y, "|-i⟩ = 1/√2 (|0⟩ - i|1⟩)"),
]


def standard_configs(family: Family, shots: int = 1000, *, width: int | None = None) -> list[ExperimentConfig]:
    """The configurations the hello-world drivers run, labelled for display.

    For the classification family this returns the Deutsch oracles followed by
    the Deutsch-Jozsa oracles; `width` only applies to the latter.
    """
    if family is Family.ENTANGLEMENT:
        return [
            ExperimentConfig("bell_pair", (q1, q2), shots, label=label)
            for q1, q2, label in BELL_STATES
        ]
    if family is Family.TELEPORTATION:
        return [
            ExperimentConfig("teleportation", (state, basis), shots, label=label)
            for state, basis, label in TELEPORTATION_MESSAGES
        ]
    configs = [
        ExperimentConfig("deutsch", (oracle,), shots, label=label)
        for oracle, label in DEUTSCH_ORACLES
    ]
    configs.extend(
        ExperimentConfig("deutsch_jozsa", (oracle,), shots, width=width, label=label)
        for oracle, label in DEUTSCH_JOZSA_ORACLES
    )
    return configs
