import torch
import math
from typing import Callable, cast

def _complex_matrix(data: list[list[complex | int | float]]) -> torch.Tensor:
    return torch.tensor(data, dtype=torch.complex64)

expand_diagonal = cast(Callable[..., torch.Tensor], torch.block_diag)

class Gate:
    """A unitary bound to the qubits it acts on, in tensor-factor order."""
    name: str
    tensor: torch.Tensor
    targets: tuple[int, ...]

    def __init__(self, name: str, tensor: torch.Tensor, *targets: int):
        if len(targets) != math.log2(tensor.shape[0]):
            raise ValueError(f"Gate {name} expects {int(math.log2(tensor.shape[0]))} targets, got {len(targets)}")
        if len(set(targets)) != len(targets):
            raise ValueError(f"Gate {name} has repeated targets {targets}")

        self.name = name
        self.tensor = tensor
        self.targets = tuple(targets)

    def __eq__(self, other):
        if not isinstance(other, Gate):
            return False
        return torch.allclose(self.tensor, other.tensor) and self.targets == other.targets

    def __hash__(self):
        return hash((tuple(self.tensor.flatten().tolist()), self.targets))

    def __repr__(self) -> str:
        return f"{self.name}({', '.join(map(str, self.targets))})"

class GateType:
    name: str
    tensor: torch.Tensor

    def __init__(self, name: str, tensor: torch.Tensor):
        self.name = name
        self.tensor = tensor

    def __call__(self, *targets: int) -> Gate:
        return Gate(self.name, self.tensor, *targets)

    def adjoint(self) -> 'GateType':
        return GateType(f"{self.name}_DAG", self.tensor.conj().T.contiguous())

class ControlledGateType(GateType):
    def __init__(self, base_gate: GateType):
        # Controlled gate = identity on control=0, base gate on control=1
        # This expands the gate matrix by one qubit
        eye = torch.eye(base_gate.tensor.shape[0], dtype=torch.complex64)
        super().__init__(f"C{base_gate.name}", expand_diagonal(eye, base_gate.tensor))


H = GateType("H", _complex_matrix([[1, 1], [1, -1]]) / math.sqrt(2))
X = GateType("X", _complex_matrix([[0, 1], [1, 0]]))
Z = GateType("Z", _complex_matrix([[1, 0], [0, -1]]))
S = GateType("S", _complex_matrix([[1, 0], [0, 1j]]))
SDG = S.adjoint()

CX = ControlledGateType(X)   # Controlled-NOT (CNOT), control first
