"""Quantum execution backends.

A backend owns at most one register of qubits at a time. Circuits drive it
through `apply_gate` and `measure`; the executor brackets every trial with
`allocate_qubits` and `release`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter
from typing import Annotated, override

import torch

from qtrials.errors import BackendFailure
from qtrials.gates import Gate
from qtrials.types import Outcome

# Probabilities closer than this to 0 or 1 are snapped, so float drift can
# never select a branch with (near) zero amplitude.
_PROBABILITY_EPS = 1e-6


def default_device() -> torch.device:
    return torch.device(
        "cuda" if torch.cuda.is_available() else
        "mps"  if torch.backends.mps.is_available() else
        "cpu"
    )


class Backend(ABC):
    """Capability contract consumed by the trial executor."""

    @property
    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def capacity(self) -> int:
        """Largest register this backend can allocate."""
        raise NotImplementedError

    @abstractmethod
    def allocate_qubits(self, n: int) -> tuple[int, ...]:
        raise NotImplementedError

    @abstractmethod
    def apply_gate(self, gate: Gate) -> None:
        raise NotImplementedError

    @abstractmethod
    def measure(self, qubit: int) -> Outcome:
        raise NotImplementedError

    @abstractmethod
    def release(self, qubits: tuple[int, ...]) -> None:
        """Reset the qubits to the ground state and free them."""
        raise NotImplementedError


class StateVectorBackend(Backend):
    """Dense state-vector simulator for a single register.

    Qubit 0 is the most significant bit of the basis index.
    """
    state_vector: Annotated[torch.Tensor | None, "(2^n_qubits,) complex64"]
    n_qubits: int
    device: torch.device

    def __init__(self, capacity: int = 16, *, seed: int | None = None, device: torch.device | None = None):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self.device = device if device is not None else default_device()
        self.state_vector = None
        self.n_qubits = 0

        # Sampling always happens on the CPU generator so seeded runs are
        # reproducible regardless of where the amplitudes live.
        self._generator = torch.Generator(device="cpu")
        if seed is None:
            _ = self._generator.seed()
        else:
            _ = self._generator.manual_seed(seed)

    @property
    @override
    def name(self) -> str:
        return "statevector"

    @property
    @override
    def capacity(self) -> int:
        return self._capacity

    @property
    def in_flight(self) -> bool:
        return self.state_vector is not None

    @override
    def allocate_qubits(self, n: int) -> tuple[int, ...]:
        if self.in_flight:
            raise BackendFailure(f"{self.n_qubits} qubits are already allocated on this backend")
        if n < 1 or n > self._capacity:
            raise BackendFailure(f"Cannot allocate {n} qubits (capacity {self._capacity})")

        # Initialize the register to |000...0⟩
        dim = 1 << n
        state = torch.zeros(dim, dtype=torch.complex64, device=self.device)
        state[0] = 1.0
        self.state_vector = state
        self.n_qubits = n
        return tuple(range(n))

    @torch.inference_mode()
    @override
    def apply_gate(self, gate: Gate) -> None:
        """Apply a gate to the register.

        The targets are swapped into the leading positions, the gate is
        expanded with identities and applied, and the swaps are undone.
        """
        state = self._require_state()
        for target in gate.targets:
            self._check_qubit(target)

        tensor = gate.tensor.to(self.device)
        n_targets = len(gate.targets)

        swaps: list[torch.Tensor] = []
        positions = list(range(self.n_qubits))

        for i, target in enumerate(gate.targets):
            cur_pos = positions.index(target)
            if cur_pos != i:
                swaps.append(self._get_swap_matrix(cur_pos, i))
                positions[cur_pos], positions[i] = positions[i], positions[cur_pos]

        # state @ U.T is U @ state for a row vector
        for u in swaps:
            state = state @ u.T

        gate_full = self._gate_to_qubit(tensor, n_targets)
        state = state @ gate_full.T

        for u in reversed(swaps):
            state = state @ u.T

        self.state_vector = state / torch.linalg.vector_norm(state)

    @torch.inference_mode()
    @override
    def measure(self, qubit: int) -> Outcome:
        """Projective Z measurement of one qubit, collapsing the register."""
        state = self._require_state()
        self._check_qubit(qubit)

        bitpos = self.n_qubits - 1 - qubit
        indices = torch.arange(1 << self.n_qubits, device=self.device)
        mask_1 = ((indices >> bitpos) & 1).bool()

        probs = torch.abs(state) ** 2
        p1 = float(probs[mask_1].sum().item())
        if p1 < _PROBABILITY_EPS:
            bit = 0
        elif p1 > 1.0 - _PROBABILITY_EPS:
            bit = 1
        else:
            bit = int(torch.rand(1, generator=self._generator).item() < p1)

        keep = mask_1 if bit else ~mask_1
        collapsed = torch.where(keep, state, torch.zeros_like(state))
        self.state_vector = collapsed / torch.linalg.vector_norm(collapsed)
        return Outcome.from_bit(bit)

    @override
    def release(self, qubits: tuple[int, ...]) -> None:
        if not self.in_flight:
            return
        if tuple(qubits) != tuple(range(self.n_qubits)):
            raise BackendFailure(f"Release of {qubits} does not match the allocated register of {self.n_qubits} qubits")
        self.state_vector = None
        self.n_qubits = 0

    def _require_state(self) -> torch.Tensor:
        if self.state_vector is None:
            raise BackendFailure("No qubits are allocated")
        return self.state_vector

    def _check_qubit(self, qubit: int) -> None:
        if not 0 <= qubit < self.n_qubits:
            raise BackendFailure(f"Qubit {qubit} is outside the allocated register of {self.n_qubits}")

    def _gate_to_qubit(self, gate: torch.Tensor, n_targets: int = 1, offset: int = 0) -> torch.Tensor:
        I = torch.eye(2, dtype=gate.dtype, device=gate.device)
        factors = [*[I for _ in range(offset)], gate, *[I for _ in range(self.n_qubits - n_targets - offset)]]
        full = factors[0]
        for f in factors[1:]:
            full = torch.kron(full, f)
        return full

    def _get_swap_matrix(self, target_1: int, target_2: int) -> torch.Tensor:
        dim = 1 << self.n_qubits
        S = torch.zeros((dim, dim), dtype=torch.complex64, device=self.device)

        b1 = self.n_qubits - 1 - target_1
        b2 = self.n_qubits - 1 - target_2

        i, j = sorted((b1, b2))
        mask = (1 << i) | (1 << j)

        for x in range(dim):
            bi = (x >> i) & 1
            bj = (x >> j) & 1
            y = x if bi == bj else x ^ mask
            S[y, x] = 1

        return S


class CountingBackend(Backend):
    """Delegating backend that records resource usage of the circuits it runs.

    `width` is the largest register allocated so far.
    """

    def __init__(self, inner: Backend):
        self.inner = inner
        self.width = 0
        self.allocations = 0
        self.measurements = 0
        self.gate_counts: Counter[str] = Counter()

    @property
    @override
    def name(self) -> str:
        return f"counting[{self.inner.name}]"

    @property
    @override
    def capacity(self) -> int:
        return self.inner.capacity

    @property
    def gates(self) -> int:
        return sum(self.gate_counts.values())

    @override
    def allocate_qubits(self, n: int) -> tuple[int, ...]:
        qubits = self.inner.allocate_qubits(n)
        self.allocations += 1
        self.width = max(self.width, len(qubits))
        return qubits

    @override
    def apply_gate(self, gate: Gate) -> None:
        self.inner.apply_gate(gate)
        self.gate_counts[gate.name] += 1

    @override
    def measure(self, qubit: int) -> Outcome:
        outcome = self.inner.measure(qubit)
        self.measurements += 1
        return outcome

    @override
    def release(self, qubits: tuple[int, ...]) -> None:
        self.inner.release(qubits)

    def metrics(self) -> dict[str, int]:
        return {
            "width": self.width,
            "allocations": self.allocations,
            "gates": self.gates,
            "measurements": self.measurements,
        }
