import unittest
from langsim.budget import Budget, CancellationToken, Outcome
from langsim.definitions import PDATransition, build_pushdown_automaton
from langsim.pda_simulation import SEARCH, apply_transition, simulate_pda


def transition(from_state, input_symbol, pop_symbol, to_state, push_symbols=()):
    return {
        'fromState': from_state,
        'inputSymbol': input_symbol,
        'popSymbol': pop_symbol,
        'toState': to_state,
        'pushSymbols': list(push_symbols)
    }


class TestPdaSimulation(unittest.TestCase):
    def setUp(self):
        # Balanced parentheses, accepted by final state after an ε-move on Z
        self.balanced = build_pushdown_automaton({
            'states': ['q0', 'q1'],
            'inputAlphabet': ['(', ')'],
            'stackAlphabet': ['Z', '('],
            'transitions': [
                transition('q0', '(', 'Z', 'q0', ['(', 'Z']),
                transition('q0', '(', '(', 'q0', ['(', '(']),
                transition('q0', ')', '(', 'q0'),
                transition('q0', 'ε', 'Z', 'q1', ['Z']),
            ],
            'startState': 'q0',
            'initialStackSymbol': 'Z',
            'acceptStates': ['q1']
        })

    def test_balanced_accepted(self):
        result = simulate_pda(self.balanced, '(())')

        self.assertTrue(result.accepted)
        self.assertEqual(result.outcome, Outcome.ACCEPTED)
        self.assertEqual(result.final_state, 'q1')
        self.assertTrue(result.steps[-1].accepted)

        # Four input moves plus the final ε-move
        self.assertEqual(len(result.steps), 6)
        self.assertEqual(result.steps[-1].transition.input_symbol, 'ε')
        self.assertEqual(result.steps[-1].stack, ('Z',))

    def test_unbalanced_rejected(self):
        result = simulate_pda(self.balanced, '(()')

        self.assertFalse(result.accepted)
        self.assertEqual(result.outcome, Outcome.REJECTED)
        self.assertEqual(result.final_state, 'q0')
        self.assertEqual(result.steps[-1].stack, ('Z', '('))
        self.assertFalse(result.steps[-1].accepted)

    def test_stack_discipline(self):
        result = simulate_pda(self.balanced, '((')

        # The stack is bottom first; the first push symbol ends up on top
        self.assertEqual(result.steps[1].stack, ('Z', '('))
        self.assertEqual(result.steps[2].stack, ('Z', '(', '('))
        self.assertEqual(result.steps[2].stack_top, '(')
        self.assertEqual(result.steps[2].consumed_input, '((')
        self.assertEqual(result.steps[2].remaining_input, '')

    def test_stuck_on_input(self):
        result = simulate_pda(self.balanced, '())')

        self.assertFalse(result.accepted)
        self.assertEqual(result.steps[-1].remaining_input, ')')

    def test_empty_stack_admits_only_epsilon_pop(self):
        automaton = build_pushdown_automaton({
            'states': ['q0', 'q1', 'q2'],
            'transitions': [
                transition('q0', 'ε', 'Z', 'q1'),
                transition('q1', 'ε', 'Z', 'q2', ['Z']),
            ],
            'startState': 'q0',
            'initialStackSymbol': 'Z',
            'acceptStates': ['q2']
        })

        result = simulate_pda(automaton, '')

        self.assertFalse(result.accepted)
        self.assertEqual(result.final_state, 'q1')
        self.assertEqual(result.steps[-1].stack, ())
        self.assertIsNone(result.steps[-1].stack_top)

    def test_epsilon_loop_exhausts_budget(self):
        automaton = build_pushdown_automaton({
            'states': ['q0'],
            'transitions': [transition('q0', 'ε', 'ε', 'q0')],
            'startState': 'q0',
            'initialStackSymbol': 'Z',
            'acceptStates': ['q0']
        })

        result = simulate_pda(automaton, '')
        self.assertFalse(result.accepted)
        self.assertEqual(result.outcome, Outcome.BUDGET_EXHAUSTED)
        self.assertEqual(len(result.steps), 101)

        result = simulate_pda(automaton, '', budget=Budget(max_steps=5))
        self.assertEqual(len(result.steps), 6)
        self.assertFalse(result.steps[-1].accepted)

    def test_cancelled(self):
        token = CancellationToken()
        token.cancel()

        result = simulate_pda(self.balanced, '()', cancel_token=token)
        self.assertEqual(result.outcome, Outcome.CANCELLED)
        self.assertFalse(result.accepted)

    def test_unknown_mode(self):
        with self.assertRaises(ValueError):
            simulate_pda(self.balanced, '()', mode='depth-first')

    def test_apply_transition(self):
        push = PDATransition('q0', 'a', 'Z', 'q0', ('A', 'B'))
        self.assertEqual(apply_transition(push, ('Z',)), ('B', 'A'))

        # ε push symbols are ignored and an ε pop leaves the stack alone
        keep = PDATransition('q0', 'a', 'ε', 'q0', ('ε',))
        self.assertEqual(apply_transition(keep, ('Z',)), ('Z',))


class TestPdaSearch(unittest.TestCase):
    def setUp(self):
        # Even-length palindromes over {a, b}: the machine has to guess the middle
        self.palindromes = build_pushdown_automaton({
            'states': ['push', 'pop', 'done'],
            'inputAlphabet': ['a', 'b'],
            'stackAlphabet': ['Z', 'a', 'b'],
            'transitions': [
                transition('push', 'a', 'ε', 'push', ['a']),
                transition('push', 'b', 'ε', 'push', ['b']),
                transition('push', 'ε', 'ε', 'pop'),
                transition('pop', 'a', 'a', 'pop'),
                transition('pop', 'b', 'b', 'pop'),
                transition('pop', 'ε', 'Z', 'done', ['Z']),
            ],
            'startState': 'push',
            'initialStackSymbol': 'Z',
            'acceptStates': ['done']
        })

    def test_first_match_cannot_guess(self):
        result = simulate_pda(self.palindromes, 'abba')
        self.assertFalse(result.accepted)

    def test_search_accepts(self):
        result = simulate_pda(self.palindromes, 'abba', mode=SEARCH)

        self.assertTrue(result.accepted)
        self.assertEqual(result.mode, SEARCH)
        self.assertEqual(result.final_state, 'done')
        self.assertEqual([s.state for s in result.steps],
                         ['push', 'push', 'push', 'pop', 'pop', 'pop', 'done'])
        self.assertEqual([s.step for s in result.steps], list(range(7)))
        self.assertTrue(result.steps[-1].accepted)

    def test_search_rejects(self):
        result = simulate_pda(self.palindromes, 'abb', mode=SEARCH)

        self.assertFalse(result.accepted)
        self.assertEqual(result.outcome, Outcome.REJECTED)
        self.assertFalse(result.steps[-1].accepted)

    def test_search_node_budget(self):
        result = simulate_pda(self.palindromes, 'abba', budget=Budget(max_nodes=1), mode=SEARCH)

        self.assertFalse(result.accepted)
        self.assertEqual(result.outcome, Outcome.BUDGET_EXHAUSTED)

    def test_search_step_budget(self):
        result = simulate_pda(self.palindromes, 'abba', budget=Budget(max_steps=3), mode=SEARCH)
        self.assertEqual(result.outcome, Outcome.BUDGET_EXHAUSTED)


if __name__ == '__main__':
    unittest.main()
