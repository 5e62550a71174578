from __future__ import annotations

import logging
import unittest

import structlog
import torch

from qtrials.backend import StateVectorBackend
from qtrials.config import DEFAULT_MAX_QUBITS, DEFAULT_SHOTS, Settings
from qtrials.errors import InvalidConfiguration
from qtrials.log import setup_logging
from qtrials.runner import run_experiment, run_many
from qtrials.types import ExperimentConfig, Outcome


class SettingsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = Settings.from_env({})
        self.assertEqual(settings.shots, DEFAULT_SHOTS)
        self.assertEqual(settings.max_qubits, DEFAULT_MAX_QUBITS)
        self.assertIsNone(settings.seed)
        self.assertIsNone(settings.torch_device())
        self.assertFalse(settings.log_json)

    def test_reads_environment(self) -> None:
        settings = Settings.from_env({
            "QTRIALS_SHOTS": "250",
            "QTRIALS_SEED": "42",
            "QTRIALS_DEVICE": "cpu",
            "QTRIALS_MAX_QUBITS": "6",
            "QTRIALS_LOG_LEVEL": "DEBUG",
            "QTRIALS_LOG_JSON": "yes",
        })
        self.assertEqual(settings.shots, 250)
        self.assertEqual(settings.seed, 42)
        self.assertEqual(settings.torch_device(), torch.device("cpu"))
        self.assertEqual(settings.max_qubits, 6)
        self.assertEqual(settings.log_level, "debug")
        self.assertTrue(settings.log_json)

    def test_rejects_bad_values(self) -> None:
        for env in (
            {"QTRIALS_SHOTS": "many"},
            {"QTRIALS_SHOTS": "0"},
            {"QTRIALS_MAX_QUBITS": "-1"},
            {"QTRIALS_LOG_JSON": "maybe"},
        ):
            with self.assertRaises(InvalidConfiguration, msg=str(env)):
                Settings.from_env(env)

    def test_seeded_backends(self) -> None:
        settings = Settings(seed=10, device="cpu", max_qubits=4)
        backend = settings.create_backend(seed_offset=2)
        self.assertEqual(backend.capacity, 4)
        self.assertEqual(backend.device, torch.device("cpu"))
        self.assertEqual(backend._generator.initial_seed(), 12)
        self.assertEqual(settings.create_backend()._generator.initial_seed(), 10)
        self.assertIsNone(Settings(device="cpu").create_backend().state_vector)

    def test_seed_is_optional(self) -> None:
        self.assertIsNone(Settings.from_env({"QTRIALS_SEED": ""}).seed)
        self.assertEqual(Settings.from_env({"QTRIALS_SEED": " 7 "}).seed, 7)
        self.assertEqual(Settings.from_env({"QTRIALS_SHOTS": "  "}).shots, DEFAULT_SHOTS)
        with self.assertRaisesRegex(InvalidConfiguration, "QTRIALS_SEED must be an integer"):
            Settings.from_env({"QTRIALS_SEED": "x"})

    def test_run_many_gives_each_experiment_its_own_stream(self) -> None:
        settings = Settings(seed=42, device="cpu", max_qubits=4)
        backends: dict[int, StateVectorBackend] = {}

        def factory(index: int) -> StateVectorBackend:
            backends[index] = settings.create_backend(index)
            return backends[index]

        config = ExperimentConfig("bell_pair", (Outcome.ZERO, Outcome.ZERO), 64)
        _ = run_many([config] * 3, factory)
        self.assertEqual(sorted(b._generator.initial_seed() for b in backends.values()), [42, 43, 44])

        first = [r.outcomes for r in run_experiment(config, settings.create_backend(0))]
        second = [r.outcomes for r in run_experiment(config, settings.create_backend(1))]
        again = [r.outcomes for r in run_experiment(config, settings.create_backend(0))]
        self.assertEqual(first, again)
        self.assertNotEqual(first, second)


class SetupLoggingTests(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        self.addCleanup(setattr, root, "handlers", list(root.handlers))
        self.addCleanup(root.setLevel, root.level)
        self.addCleanup(structlog.reset_defaults)

    def test_routes_structlog_through_root_handler(self) -> None:
        setup_logging("debug", json_output=True)
        root = logging.getLogger()
        self.assertEqual(root.level, logging.DEBUG)
        self.assertEqual(len(root.handlers), 1)
        self.assertIsInstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

        with self.assertLogs("qtrials.test", level="INFO") as captured:
            structlog.get_logger("qtrials.test").info("experiment_started", shots=3)
        self.assertEqual(len(captured.records), 1)

    def test_unknown_level_falls_back_to_info(self) -> None:
        setup_logging("chatty")
        self.assertEqual(logging.getLogger().level, logging.INFO)


if __name__ == "__main__":
    unittest.main()
