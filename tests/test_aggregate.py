from __future__ import annotations

import itertools
import unittest

from qtrials.aggregate import (
    AgreementRule,
    ClassificationRule,
    CountingRule,
    FidelityRule,
    aggregate,
    rule_for,
    summarize_results,
)
from qtrials.errors import InsufficientData, MalformedInput
from qtrials.types import Basis, ExperimentConfig, Oracle, Outcome, TrialResult, Verdict

ZERO, ONE = Outcome.ZERO, Outcome.ONE


def _results(circuit: str, observed: tuple[int, ...], rows: list[tuple[Outcome, ...]]) -> list[TrialResult]:
    return [TrialResult(circuit, i, observed, row) for i, row in enumerate(rows)]


def _pairs(n: int, *, equal: bool) -> list[tuple[Outcome, ...]]:
    rows = []
    for i in range(n):
        first = ONE if i % 3 == 0 else ZERO
        second = first if equal else (ZERO if first is ONE else ONE)
        rows.append((first, second))
    return rows


class CountingTests(unittest.TestCase):
    def test_counts_sum_to_trials(self) -> None:
        patterns = list(itertools.product((ZERO, ONE), repeat=2))
        for n in (1, 2, 5, 17, 100):
            rows = [patterns[(i * 7) % 4] for i in range(n)]
            summary = aggregate(_results("bell_pair", (0, 1), rows), CountingRule(), (0, 1))
            for counts in summary.counts:
                self.assertEqual(counts[ZERO] + counts[ONE], n)
            self.assertEqual(summary.shots, n)
            self.assertIsNone(summary.agreement)

    def test_counts_per_qubit(self) -> None:
        rows = [(ZERO, ONE), (ONE, ONE), (ZERO, ONE)]
        summary = aggregate(_results("bell_pair", (0, 1), rows), CountingRule(), (0, 1))
        self.assertEqual(dict(summary.counts_for(0)), {ZERO: 2, ONE: 1})
        self.assertEqual(dict(summary.counts_for(1)), {ZERO: 0, ONE: 3})
        with self.assertRaises(KeyError):
            summary.counts_for(2)


class AgreementTests(unittest.TestCase):
    def test_perfect_correlation_agrees_every_trial(self) -> None:
        for n in (1, 10, 250):
            summary = aggregate(_results("bell_pair", (0, 1), _pairs(n, equal=True)), AgreementRule(), (0, 1))
            self.assertEqual(summary.agreement, n)
            self.assertEqual(summary.agreement_rate, 1.0)

    def test_perfect_anti_correlation_never_agrees(self) -> None:
        for n in (1, 10, 250):
            summary = aggregate(_results("bell_pair", (0, 1), _pairs(n, equal=False)), AgreementRule(), (0, 1))
            self.assertEqual(summary.agreement, 0)

    def test_agreement_within_bounds(self) -> None:
        rows = [(ZERO, ZERO), (ZERO, ONE), (ONE, ONE), (ONE, ZERO), (ONE, ONE)]
        summary = aggregate(_results("bell_pair", (0, 1), rows), AgreementRule(), (0, 1))
        self.assertEqual(summary.agreement, 3)
        self.assertGreaterEqual(summary.agreement, 0)
        self.assertLessEqual(summary.agreement, summary.shots)

    def test_position_outside_observed(self) -> None:
        rows = [(ZERO,)]
        with self.assertRaises(MalformedInput):
            aggregate(_results("deutsch", (0,), rows), AgreementRule(), (0,))


class FidelityTests(unittest.TestCase):
    def test_counts_matches_against_sent_outcome(self) -> None:
        rows = [(ONE,), (ONE,), (ZERO,), (ONE,)]
        summary = aggregate(_results("teleportation", (2,), rows), FidelityRule(expected=ONE), (2,))
        self.assertEqual(summary.agreement, 3)
        self.assertEqual(dict(summary.counts_for(2)), {ZERO: 1, ONE: 3})

    def test_rule_for_uses_sent_outcome(self) -> None:
        config = ExperimentConfig("teleportation", (ZERO, Basis.PAULI_Y), 10)
        self.assertEqual(rule_for(config), FidelityRule(expected=ZERO))


class ClassificationTests(unittest.TestCase):
    def test_constant_law_is_constant_for_any_n(self) -> None:
        for n in (1, 3, 50):
            summary = aggregate(_results("deutsch", (0,), [(ZERO,)] * n), ClassificationRule(1), (0,))
            self.assertEqual(summary.verdict, Verdict.CONSTANT)
            self.assertEqual(summary.balanced_votes, 0)

    def test_balanced_law_is_balanced_for_any_n(self) -> None:
        for n in (1, 3, 50):
            summary = aggregate(_results("deutsch", (0,), [(ONE,)] * n), ClassificationRule(1), (0,))
            self.assertEqual(summary.verdict, Verdict.BALANCED)
            self.assertEqual(summary.balanced_votes, n)

    def test_any_input_one_votes_balanced(self) -> None:
        rows = [(ZERO, ZERO, ONE), (ZERO, ONE, ZERO), (ZERO, ZERO, ZERO)]
        summary = aggregate(_results("deutsch_jozsa", (0, 1, 2), rows), ClassificationRule(3), (0, 1, 2))
        self.assertEqual(summary.balanced_votes, 2)
        self.assertEqual(summary.verdict, Verdict.BALANCED)
        self.assertEqual(summary.n_input_qubits, 3)

    def test_tie_is_constant(self) -> None:
        rows = [(ONE,), (ZERO,)]
        summary = aggregate(_results("deutsch", (0,), rows), ClassificationRule(1), (0,))
        self.assertEqual(summary.verdict, Verdict.CONSTANT)

    def test_width_passes_through(self) -> None:
        config = ExperimentConfig("deutsch_jozsa", (Oracle.ODD_PARITY,), 1, width=4)
        results = _results("deutsch_jozsa", (0, 1, 2, 3), [(ONE, ONE, ONE, ONE)])
        summary = summarize_results(config, results)
        self.assertEqual(summary.n_input_qubits, 4)
        self.assertEqual(summary.verdict, Verdict.BALANCED)


class AggregationErrorTests(unittest.TestCase):
    def test_empty_sequence(self) -> None:
        for rule in (CountingRule(), AgreementRule(), FidelityRule(ONE), ClassificationRule()):
            with self.assertRaises(InsufficientData):
                aggregate([], rule, (0, 1))

    def test_observed_mismatch(self) -> None:
        results = _results("bell_pair", (0, 1), [(ZERO, ZERO)]) + [TrialResult("bell_pair", 1, (0,), (ZERO,))]
        with self.assertRaises(MalformedInput) as ctx:
            aggregate(results, AgreementRule(), (0, 1))
        self.assertEqual(ctx.exception.trial, 1)

    def test_circuit_mismatch(self) -> None:
        config = ExperimentConfig("bell_pair", (ZERO, ZERO), 1)
        results = _results("teleportation", (0, 1), [(ZERO, ZERO)])
        with self.assertRaises(MalformedInput):
            summarize_results(config, results)

    def test_unknown_rule_is_rejected(self) -> None:
        results = _results("deutsch", (0,), [(ONE,), (ONE,)])
        with self.assertRaisesRegex(MalformedInput, "Unknown aggregation rule") as ctx:
            aggregate(results, object(), (0,), circuit="deutsch")  # type: ignore[arg-type]
        self.assertEqual(ctx.exception.circuit, "deutsch")


if __name__ == "__main__":
    unittest.main()
