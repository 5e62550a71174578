"""Runtime settings read from ``QTRIALS_*`` environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

import torch

from qtrials.backend import StateVectorBackend
from qtrials.errors import InvalidConfiguration

DEFAULT_SHOTS = 1000
DEFAULT_MAX_QUBITS = 16
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _optional_int_var(env: Mapping[str, str], name: str) -> int | None:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise InvalidConfiguration(f"{name} must be an integer, got {raw!r}") from None


def _int_var(env: Mapping[str, str], name: str, default: int) -> int:
    value = _optional_int_var(env, name)
    return default if value is None else value


def _bool_var(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise InvalidConfiguration(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    shots: int = DEFAULT_SHOTS
    seed: int | None = None
    device: str | None = None
    max_qubits: int = DEFAULT_MAX_QUBITS
    log_level: str = "info"
    log_json: bool = False

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if env is None else env
        shots = _int_var(env, "QTRIALS_SHOTS", DEFAULT_SHOTS)
        max_qubits = _int_var(env, "QTRIALS_MAX_QUBITS", DEFAULT_MAX_QUBITS)
        if shots < 1:
            raise InvalidConfiguration(f"QTRIALS_SHOTS must be at least 1, got {shots}")
        if max_qubits < 1:
            raise InvalidConfiguration(f"QTRIALS_MAX_QUBITS must be at least 1, got {max_qubits}")

        return cls(
            shots=shots,
            seed=_optional_int_var(env, "QTRIALS_SEED"),
            device=env.get("QTRIALS_DEVICE") or None,
            max_qubits=max_qubits,
            log_level=env.get("QTRIALS_LOG_LEVEL", "info").lower(),
            log_json=_bool_var(env, "QTRIALS_LOG_JSON", False),
        )

    def torch_device(self) -> torch.device | None:
        if self.device is None:
            return None
        try:
            return torch.device(self.device)
        except RuntimeError:
            raise InvalidConfiguration(f"QTRIALS_DEVICE is not a torch device: {self.device!r}") from None

    def create_backend(self, seed_offset: int = 0) -> StateVectorBackend:
        """Fresh simulator; `seed_offset` separates backends built from one seed.

        Matches the `run_many` factory signature, which passes each
        experiment's index as the offset.
        """
        seed = None if self.seed is None else self.seed + seed_offset
        return StateVectorBackend(self.max_qubits, seed=seed, device=self.torch_device())
