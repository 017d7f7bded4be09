import unittest
from langsim.definitions import (
    EPSILON,
    DefinitionError,
    Production,
    build_finite_automaton,
    build_grammar,
    build_pushdown_automaton,
    build_turing_machine
)


class TestBuildFiniteAutomaton(unittest.TestCase):
    def setUp(self):
        self.dfa = {
            'states': ['q0', 'q1'],
            'alphabet': ['0', '1'],
            'transitions': [
                {'from': 'q0', 'to': 'q1', 'symbol': '1'},
                {'from': 'q1', 'to': 'q0', 'symbol': '0'},
            ],
            'startState': 'q0',
            'acceptStates': ['q1']
        }

    def test_list_transitions(self):
        automaton = build_finite_automaton(self.dfa)

        self.assertEqual(automaton.state_names, ('q0', 'q1'))
        self.assertEqual(automaton.start_state, 'q0')
        self.assertEqual(automaton.accept_states, ('q1',))
        self.assertEqual(len(automaton.transitions), 2)
        self.assertEqual(automaton.transitions[0].to_state, 'q1')

        # State flags are derived from startState / acceptStates
        self.assertTrue(automaton.states[0].is_start)
        self.assertTrue(automaton.states[1].is_accept)

    def test_nested_transitions(self):
        # The nested {state: {symbol: [targets]}} form, '' meaning ε
        automaton = build_finite_automaton({
            'states': ['S0', 'S1', 'S2'],
            'alphabet': ['a'],
            'transitions': {
                'S0': {'a': ['S0', 'S1'], '': ['S2']},
                'S1': {},
                'S2': {'a': 'S2'}
            },
            'startState': 'S0',
            'acceptStates': ['S2']
        })

        symbols = [(t.from_state, t.symbol, t.to_state) for t in automaton.transitions]
        self.assertEqual(symbols, [
            ('S0', 'a', 'S0'),
            ('S0', 'a', 'S1'),
            ('S0', EPSILON, 'S2'),
            ('S2', 'a', 'S2'),
        ])

    def test_state_records_with_flags(self):
        automaton = build_finite_automaton({
            'states': [
                {'name': 'A', 'isStart': True},
                {'name': 'B', 'isAccept': True},
            ],
            'alphabet': ['x'],
            'transitions': [{'from': 'A', 'to': 'B', 'symbol': 'x'}]
        })

        self.assertEqual(automaton.start_state, 'A')
        self.assertEqual(automaton.accept_states, ('B',))

    def test_to_dict_round_trip_shape(self):
        data = build_finite_automaton(self.dfa).to_dict()
        self.assertEqual(data['startState'], 'q0')
        self.assertEqual(data['transitions'][0], {'from': 'q0', 'to': 'q1', 'symbol': '1'})
        self.assertEqual(data['states'][1], {'name': 'q1', 'isStart': False, 'isAccept': True})

    def test_missing_start_state(self):
        del self.dfa['startState']
        with self.assertRaises(DefinitionError):
            build_finite_automaton(self.dfa)

    def test_start_state_not_declared(self):
        self.dfa['startState'] = 'q9'
        with self.assertRaises(DefinitionError) as ctx:
            build_finite_automaton(self.dfa)
        self.assertIn('q9', str(ctx.exception))

    def test_multiple_flagged_start_states(self):
        with self.assertRaises(DefinitionError):
            build_finite_automaton({
                'states': [{'name': 'A', 'isStart': True}, {'name': 'B', 'isStart': True}],
                'alphabet': [],
                'transitions': []
            })

    def test_transition_to_undeclared_state(self):
        self.dfa['transitions'].append({'from': 'q1', 'to': 'q7', 'symbol': '1'})
        with self.assertRaises(DefinitionError):
            build_finite_automaton(self.dfa)

    def test_accept_state_not_declared(self):
        self.dfa['acceptStates'] = ['q2']
        with self.assertRaises(DefinitionError):
            build_finite_automaton(self.dfa)

    def test_missing_required_key(self):
        del self.dfa['states']
        with self.assertRaises(DefinitionError):
            build_finite_automaton(self.dfa)

    def test_not_a_dictionary(self):
        with self.assertRaises(DefinitionError):
            build_finite_automaton(['q0'])

    def test_definition_error_is_value_error(self):
        self.assertTrue(issubclass(DefinitionError, ValueError))


class TestBuildPushdownAutomaton(unittest.TestCase):
    def test_build(self):
        automaton = build_pushdown_automaton({
            'states': ['q0', 'q1'],
            'inputAlphabet': ['('],
            'stackAlphabet': ['Z', '('],
            'transitions': [
                {'fromState': 'q0', 'inputSymbol': '(', 'popSymbol': 'Z', 'toState': 'q0', 'pushSymbols': ['(', 'Z']},
                {'fromState': 'q0', 'inputSymbol': '', 'popSymbol': 'ε', 'toState': 'q1'},
            ],
            'startState': 'q0',
            'initialStackSymbol': 'Z',
            'acceptStates': ['q1']
        })

        self.assertEqual(automaton.transitions[0].push_symbols, ('(', 'Z'))
        # '' is read as ε and a missing pushSymbols means push nothing
        self.assertEqual(automaton.transitions[1].input_symbol, EPSILON)
        self.assertEqual(automaton.transitions[1].push_symbols, ())

    def test_missing_initial_stack_symbol(self):
        with self.assertRaises(DefinitionError):
            build_pushdown_automaton({
                'states': ['q0'],
                'transitions': [],
                'startState': 'q0',
                'acceptStates': []
            })

    def test_push_symbols_must_be_list(self):
        with self.assertRaises(DefinitionError):
            build_pushdown_automaton({
                'states': ['q0'],
                'transitions': [
                    {'fromState': 'q0', 'inputSymbol': 'a', 'popSymbol': 'Z', 'toState': 'q0', 'pushSymbols': 'AZ'}
                ],
                'startState': 'q0',
                'initialStackSymbol': 'Z',
                'acceptStates': []
            })


class TestBuildTuringMachine(unittest.TestCase):
    def setUp(self):
        self.machine = {
            'states': ['q0', 'qa', 'qr'],
            'alphabet': ['0', '1'],
            'tapeAlphabet': ['0', '1', '_'],
            'transitions': [
                {'currentState': 'q0', 'readSymbol': '0', 'writeSymbol': '1', 'moveDirection': 'r', 'nextState': 'q0'},
            ],
            'startState': 'q0',
            'acceptState': 'qa',
            'rejectState': 'qr',
            'blankSymbol': '_'
        }

    def test_move_direction_is_normalised(self):
        machine = build_turing_machine(self.machine)
        self.assertEqual(machine.transitions[0].move_direction, 'R')

    def test_invalid_move_direction(self):
        self.machine['transitions'][0]['moveDirection'] = 'S'
        with self.assertRaises(DefinitionError):
            build_turing_machine(self.machine)

    def test_accept_and_reject_must_differ(self):
        self.machine['rejectState'] = 'qa'
        with self.assertRaises(DefinitionError):
            build_turing_machine(self.machine)

    def test_blank_symbol_required(self):
        del self.machine['blankSymbol']
        with self.assertRaises(DefinitionError):
            build_turing_machine(self.machine)


class TestBuildGrammar(unittest.TestCase):
    def setUp(self):
        self.grammar = {
            'terminals': ['(', ')'],
            'nonTerminals': ['S'],
            'productions': [
                {'left': 'S', 'right': ['(', 'S', ')']},
                {'left': 'S', 'right': 'S S'},
                {'left': 'S', 'right': []},
            ],
            'startSymbol': 'S'
        }

    def test_build(self):
        grammar = build_grammar(self.grammar)

        # Whitespace separated right sides are split into symbols
        self.assertEqual(grammar.productions[1].right, ('S', 'S'))
        self.assertEqual(grammar.productions[2].symbols, ())
        self.assertEqual(grammar.productions[0].symbols, ('(', 'S', ')'))
        self.assertTrue(grammar.is_non_terminal('S'))
        self.assertFalse(grammar.is_non_terminal('('))
        self.assertEqual(len(grammar.productions_for('S')), 3)

    def test_production_str(self):
        self.assertEqual(str(Production('S', ('(', 'S', ')'))), 'S -> ( S )')
        self.assertEqual(str(Production('S', ())), 'S -> ε')
        self.assertEqual(str(Production('S', (EPSILON,))), 'S -> ε')

        # ε markers mixed into a right side are dropped when it is applied
        self.assertEqual(Production('S', ('a', EPSILON, 'b')).symbols, ('a', 'b'))

    def test_start_symbol_must_be_non_terminal(self):
        self.grammar['startSymbol'] = 'T'
        with self.assertRaises(DefinitionError):
            build_grammar(self.grammar)

    def test_undeclared_symbol_in_production(self):
        self.grammar['productions'].append({'left': 'S', 'right': ['x']})
        with self.assertRaises(DefinitionError):
            build_grammar(self.grammar)

    def test_left_side_must_be_non_terminal(self):
        self.grammar['productions'].append({'left': '(', 'right': ['S']})
        with self.assertRaises(DefinitionError):
            build_grammar(self.grammar)

    def test_terminals_and_non_terminals_are_disjoint(self):
        self.grammar['terminals'].append('S')
        with self.assertRaises(DefinitionError):
            build_grammar(self.grammar)


if __name__ == '__main__':
    unittest.main()
