from typing import Dict, List

from .definitions import EPSILON, FiniteAutomaton


def is_deterministic(automaton: FiniteAutomaton) -> bool:
    """
    Checks if the automaton is deterministic.

    An automaton is deterministic if:
    1. It has no transitions labelled with ε
    2. For each state and each symbol, there is at most one transition

    Args:
        automaton: The FiniteAutomaton to check

    Returns:
        bool: True if the automaton is deterministic, False otherwise
    """
    seen = set()
    for transition in automaton.transitions:
        if transition.symbol == EPSILON:
            return False
        key = (transition.from_state, transition.symbol)
        if key in seen:
            return False
        seen.add(key)
    return True


def is_complete(automaton: FiniteAutomaton) -> bool:
    """
    Checks if every state has at least one transition for every alphabet symbol.
    ε-labelled transitions are ignored.
    """
    defined = {(t.from_state, t.symbol) for t in automaton.transitions if t.symbol != EPSILON}
    return all(
        (state, symbol) in defined
        for state in automaton.state_names
        for symbol in automaton.alphabet
        if symbol != EPSILON
    )


def nondeterministic_choices(automaton: FiniteAutomaton) -> List[Dict]:
    """
    Lists every (state, symbol) pair with more than one target, plus every
    ε-labelled transition, in authoring order.
    """
    targets: Dict = {}
    for transition in automaton.transitions:
        targets.setdefault((transition.from_state, transition.symbol), []).append(transition.to_state)

    return [
        {'state': state, 'symbol': symbol, 'targets': to_states}
        for (state, symbol), to_states in targets.items()
        if len(to_states) > 1 or symbol == EPSILON
    ]
