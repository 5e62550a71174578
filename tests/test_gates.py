from __future__ import annotations

import unittest

from qtrials.gates import CX, SDG, Gate, S, X, Z


class GateTests(unittest.TestCase):
    def test_equal_gates_hash_alike(self) -> None:
        renamed = Gate("NOT", X.tensor, 0)
        self.assertEqual(renamed, X(0))
        self.assertEqual(hash(renamed), hash(X(0)))
        self.assertEqual(len({renamed, X(0), X(0)}), 1)

    def test_targets_and_tensor_distinguish(self) -> None:
        self.assertNotEqual(X(0), X(1))
        self.assertNotEqual(X(0), Z(0))
        self.assertEqual(len({X(0), X(1), Z(0), CX(0, 1), CX(1, 0)}), 5)

    def test_adjoint(self) -> None:
        self.assertEqual(SDG.name, "S_DAG")
        self.assertNotEqual(SDG(0), S(0))

    def test_target_count_checked(self) -> None:
        with self.assertRaisesRegex(ValueError, "expects 2 targets"):
            CX(0)
        with self.assertRaisesRegex(ValueError, "repeated targets"):
            CX(1, 1)


if __name__ == "__main__":
    unittest.main()
