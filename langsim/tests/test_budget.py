import unittest
from langsim.budget import CFG_BUDGET, PDA_BUDGET, TM_BUDGET, Budget, CancellationToken, is_cancelled


class TestBudget(unittest.TestCase):
    def test_defaults(self):
        self.assertEqual(PDA_BUDGET.max_steps, 100)
        self.assertEqual(TM_BUDGET.max_steps, 1000)
        self.assertEqual(CFG_BUDGET.max_depth, 20)

    def test_merged_with_fills_unset_fields(self):
        merged = Budget(max_steps=5).merged_with(PDA_BUDGET)
        self.assertEqual(merged.max_steps, 5)
        self.assertEqual(merged.max_nodes, PDA_BUDGET.max_nodes)
        self.assertIsNone(merged.max_depth)

    def test_rejects_non_positive_values(self):
        with self.assertRaises(ValueError):
            Budget(max_steps=0)
        with self.assertRaises(ValueError):
            Budget(max_depth=-3)

    def test_rejects_non_integers(self):
        with self.assertRaises(ValueError):
            Budget(max_steps=2.5)
        with self.assertRaises(ValueError):
            Budget(max_nodes=True)


class TestCancellationToken(unittest.TestCase):
    def test_cancel(self):
        token = CancellationToken()
        self.assertFalse(is_cancelled(token))
        token.cancel()
        self.assertTrue(token.cancelled)
        self.assertTrue(is_cancelled(token))

    def test_no_token(self):
        self.assertFalse(is_cancelled(None))


if __name__ == '__main__':
    unittest.main()
