"""Circuit contracts: qubit requirements, input domains and gate sequences.

A contract never measures its observed qubits itself; the executor does that
once the contract has driven the register. Mid-circuit measurements that feed
classical corrections (teleportation) are part of the contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar, override

from qtrials.backend import Backend
from qtrials.errors import InvalidConfiguration
from qtrials.gates import CX, H, S, SDG, X, Z
from qtrials.types import AssignmentValue, Basis, Family, Oracle, Outcome

OUTCOMES: tuple[Outcome, ...] = (Outcome.ZERO, Outcome.ONE)
BASES: tuple[Basis, ...] = (Basis.PAULI_Z, Basis.PAULI_X, Basis.PAULI_Y)


@dataclass(frozen=True)
class Slot:
    """One position of an initial assignment and the values it accepts."""

    name: str
    domain: tuple[AssignmentValue, ...]


class CircuitContract(ABC):
    name: ClassVar[str]
    family: ClassVar[Family]
    slots: ClassVar[tuple[Slot, ...]]

    @abstractmethod
    def n_qubits(self, width: int | None = None) -> int:
        raise NotImplementedError

    @abstractmethod
    def observed(self, width: int | None = None) -> tuple[int, ...]:
        raise NotImplementedError

    def resolve_width(self, width: int | None) -> int | None:
        """Fixed-width circuits take no width."""
        if width is not None:
            raise InvalidConfiguration(f"Circuit {self.name} does not take a width", circuit=self.name)
        return None

    def validate(self, assignment: Sequence[AssignmentValue], width: int | None = None) -> None:
        _ = self.resolve_width(width)
        if len(assignment) != len(self.slots):
            raise InvalidConfiguration(
                f"Expected {len(self.slots)} assignment values ({', '.join(s.name for s in self.slots)}), "
                f"got {len(assignment)}",
                circuit=self.name,
            )
        for slot, value in zip(self.slots, assignment, strict=True):
            if value not in slot.domain:
                allowed = ", ".join(str(getattr(v, "name", v)) for v in slot.domain)
                raise InvalidConfiguration(
                    f"Invalid value {value!r} for {slot.name}; expected one of {allowed}",
                    circuit=self.name,
                )

    @abstractmethod
    def drive(
        self,
        backend: Backend,
        qubits: tuple[int, ...],
        assignment: Sequence[AssignmentValue],
        width: int | None = None,
    ) -> None:
        raise NotImplementedError


class BellPair(CircuitContract):
    """H on the first qubit then CNOT onto the second.

    (Zero, Zero) -> |Φ+⟩, (Zero, One) -> |Ψ+⟩, (One, Zero) -> |Φ-⟩,
    (One, One) -> |Ψ-⟩.
    """
    name = "bell_pair"
    family = Family.ENTANGLEMENT
    slots = (Slot("q1", OUTCOMES), Slot("q2", OUTCOMES))

    @override
    def n_qubits(self, width: int | None = None) -> int:
        return 2

    @override
    def observed(self, width: int | None = None) -> tuple[int, ...]:
        return (0, 1)

    @override
    def drive(self, backend, qubits, assignment, width=None) -> None:
        control, target = qubits
        _set_basis_state(backend, control, assignment[0])
        _set_basis_state(backend, target, assignment[1])
        backend.apply_gate(H(control))
        backend.apply_gate(CX(control, target))


class Deutsch(CircuitContract):
    """Deutsch's algorithm: the input qubit reads One iff the oracle is balanced."""
    name = "deutsch"
    family = Family.CLASSIFICATION
    slots = (Slot("oracle", (Oracle.CONSTANT_ZERO, Oracle.CONSTANT_ONE, Oracle.IDENTITY, Oracle.NEGATION)),)

    @override
    def n_qubits(self, width: int | None = None) -> int:
        return 2

    @override
    def observed(self, width: int | None = None) -> tuple[int, ...]:
        return (0,)

    @override
    def drive(self, backend, qubits, assignment, width=None) -> None:
        x, y = qubits
        backend.apply_gate(X(y))
        backend.apply_gate(H(x))
        backend.apply_gate(H(y))
        _apply_oracle(backend, assignment[0], (x,), y)
        backend.apply_gate(H(x))


class DeutschJozsa(CircuitContract):
    """Deutsch-Jozsa over `width` input qubits plus one output qubit.

    Every input reads Zero iff the oracle is constant.
    """
    name = "deutsch_jozsa"
    family = Family.CLASSIFICATION
    slots = (Slot("oracle", (Oracle.CONSTANT_ZERO, Oracle.CONSTANT_ONE, Oracle.ODD_PARITY, Oracle.EVEN_PARITY)),)
    default_width: ClassVar[int] = 3

    @override
    def resolve_width(self, width: int | None) -> int:
        if width is None:
            return self.default_width
        if width < 1:
            raise InvalidConfiguration(f"Width must be at least 1, got {width}", circuit=self.name)
        return width

    @override
    def n_qubits(self, width: int | None = None) -> int:
        return self.resolve_width(width) + 1

    @override
    def observed(self, width: int | None = None) -> tuple[int, ...]:
        return tuple(range(self.resolve_width(width)))

    @override
    def drive(self, backend, qubits, assignment, width=None) -> None:
        *inputs, output = qubits
        backend.apply_gate(X(output))
        for q in qubits:
            backend.apply_gate(H(q))
        _apply_oracle(backend, assignment[0], tuple(inputs), output)
        for q in inputs:
            backend.apply_gate(H(q))


class Teleportation(CircuitContract):
    """Teleports a prepared message qubit onto the receiver's half of a Bell pair.

    The receiver is rotated back out of the message basis before measurement,
    so an ideal run always reproduces the sent outcome.
    """
    name = "teleportation"
    family = Family.TELEPORTATION
    slots = (Slot("message", OUTCOMES), Slot("basis", BASES))

    @override
    def n_qubits(self, width: int | None = None) -> int:
        return 3

    @override
    def observed(self, width: int | None = None) -> tuple[int, ...]:
        return (2,)

    @override
    def drive(self, backend, qubits, assignment, width=None) -> None:
        message, here, there = qubits
        state, basis = assignment

        # Prepare the message
        _set_basis_state(backend, message, state)
        if basis is Basis.PAULI_X:
            backend.apply_gate(H(message))
        elif basis is Basis.PAULI_Y:
            backend.apply_gate(H(message))
            backend.apply_gate(S(message))

        # Shared Bell pair
        backend.apply_gate(H(here))
        backend.apply_gate(CX(here, there))

        # Bell measurement and corrections
        backend.apply_gate(CX(message, here))
        backend.apply_gate(H(message))
        m1 = backend.measure(message)
        m2 = backend.measure(here)
        if m2 is Outcome.ONE:
            backend.apply_gate(X(there))
        if m1 is Outcome.ONE:
            backend.apply_gate(Z(there))

        if basis is Basis.PAULI_X:
            backend.apply_gate(H(there))
        elif basis is Basis.PAULI_Y:
            backend.apply_gate(SDG(there))
            backend.apply_gate(H(there))


def _set_basis_state(backend: Backend, qubit: int, value: AssignmentValue) -> None:
    if value is Outcome.ONE:
        backend.apply_gate(X(qubit))


def _apply_oracle(backend: Backend, oracle: AssignmentValue, inputs: tuple[int, ...], output: int) -> None:
    """Phase-kickback oracle |x⟩|y⟩ -> |x⟩|y ⊕ f(x)⟩."""
    if oracle is Oracle.CONSTANT_ZERO:
        return
    if oracle is Oracle.CONSTANT_ONE:
        backend.apply_gate(X(output))
        return
    # identity/odd parity: f(x) = x_0 ⊕ ... ⊕ x_n, negation/even parity flips it
    for q in inputs:
        backend.apply_gate(CX(q, output))
    if oracle in (Oracle.NEGATION, Oracle.EVEN_PARITY):
        backend.apply_gate(X(output))


CIRCUITS: dict[str, CircuitContract] = {
    contract.name: contract
    for contract in (BellPair(), Deutsch(), DeutschJozsa(), Teleportation())
}


def get_circuit(name: str) -> CircuitContract:
    contract = CIRCUITS.get(name.lower())
    if contract is None:
        raise InvalidConfiguration(f"Unknown circuit: {name}", circuit=name)
    return contract


def known_circuits() -> list[str]:
    return list(CIRCUITS)
