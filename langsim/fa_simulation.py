import logging
from typing import Iterable, List, Optional, Tuple

from .budget import CancellationToken, Outcome, is_cancelled
from .definitions import EPSILON, FATransition, FiniteAutomaton
from .fa_properties import is_deterministic
from .results import FAResult, FAStep

logger = logging.getLogger(__name__)

DFA = 'dfa'
NFA = 'nfa'
MODES = (DFA, NFA)

# ε is an ordinary input symbol (a transition labelled ε fires only on a literal ε in the input)
LITERAL = 'literal'
# Textbook ε-NFA: closure of the start set and after every move
CLOSURE = 'closure'
EPSILON_MODES = (LITERAL, CLOSURE)


def simulate_finite_automaton(automaton: FiniteAutomaton, input_string: str, mode: Optional[str] = None,
                              epsilon_mode: str = LITERAL,
                              cancel_token: Optional[CancellationToken] = None) -> FAResult:
    """
    Simulates a DFA or NFA on the given input string.

    Args:
        automaton: The FiniteAutomaton to run
        input_string: The input string to simulate
        mode: 'dfa', 'nfa', or None to pick from the automaton's shape
        epsilon_mode: 'literal' or 'closure' (NFA mode only)
        cancel_token: Optional token checked before each input symbol

    Returns:
        FAResult: The verdict and the full step trace

    Raises:
        ValueError: If mode or epsilon_mode is unknown
    """
    if mode is None:
        mode = DFA if is_deterministic(automaton) else NFA
    if not isinstance(mode, str):
        raise ValueError(f"Finite automaton mode must be a string, got {mode!r}")
    mode = mode.lower()

    if mode == DFA:
        return simulate_dfa(automaton, input_string, cancel_token=cancel_token)
    if mode == NFA:
        return simulate_nfa(automaton, input_string, epsilon_mode=epsilon_mode, cancel_token=cancel_token)
    raise ValueError(f"Unknown finite automaton mode '{mode}', expected one of {MODES}")


def simulate_dfa(automaton: FiniteAutomaton, input_string: str,
                 cancel_token: Optional[CancellationToken] = None) -> FAResult:
    """
    Simulates a deterministic automaton, one input symbol at a time.

    The first transition matching (current state, symbol) in authoring order is
    taken. If none exists the run stops right there and rejects; the rest of the
    input is not consumed.
    """
    logger.debug("DFA run on %r from %s", input_string, automaton.start_state)

    current_state = automaton.start_state
    consumed = ''
    steps = [FAStep((current_state,), input_string, consumed)]

    for position, symbol in enumerate(input_string):
        if is_cancelled(cancel_token):
            return _stopped(steps, (current_state,), Outcome.CANCELLED, DFA)

        transition = next(iter(_transitions_from(automaton, current_state, symbol)), None)
        if transition is None:
            steps.append(FAStep((current_state,), input_string[position:], consumed, accepted=False))
            return FAResult(False, steps, (current_state,), Outcome.REJECTED, DFA)

        current_state = transition.to_state
        consumed += symbol
        steps.append(FAStep((current_state,), input_string[position + 1:], consumed, (transition,)))

    return _finish(automaton, steps, (current_state,), DFA)


def simulate_nfa(automaton: FiniteAutomaton, input_string: str, epsilon_mode: str = LITERAL,
                 cancel_token: Optional[CancellationToken] = None) -> FAResult:
    """
    Simulates a non-deterministic automaton by tracking the set of current states.

    For each symbol the next set is the union, over all current states, of the
    targets of matching transitions (an on-the-fly subset construction). An
    empty next set rejects immediately. The input is accepted if the final set
    contains an accepting state.

    Args:
        automaton: The FiniteAutomaton to run
        input_string: The input string to simulate
        epsilon_mode: 'literal' treats ε as an ordinary symbol; 'closure' follows
            ε-transitions automatically before and after every move
        cancel_token: Optional token checked before each input symbol
    """
    if epsilon_mode not in EPSILON_MODES:
        raise ValueError(f"Unknown epsilon mode '{epsilon_mode}', expected one of {EPSILON_MODES}")

    logger.debug("NFA run on %r from %s (%s)", input_string, automaton.start_state, epsilon_mode)

    current_states: Tuple[str, ...] = (automaton.start_state,)
    if epsilon_mode == CLOSURE:
        current_states = epsilon_closure(automaton, current_states)

    consumed = ''
    steps = [FAStep(current_states, input_string, consumed)]

    for position, symbol in enumerate(input_string):
        if is_cancelled(cancel_token):
            return _stopped(steps, current_states, Outcome.CANCELLED, NFA)

        fired = [
            transition
            for state in current_states
            for transition in _transitions_from(automaton, state, symbol)
        ]
        next_states = tuple(dict.fromkeys(t.to_state for t in fired))
        if next_states and epsilon_mode == CLOSURE:
            next_states = epsilon_closure(automaton, next_states)

        if not next_states:
            steps.append(FAStep(current_states, input_string[position:], consumed, accepted=False))
            return FAResult(False, steps, current_states, Outcome.REJECTED, NFA)

        current_states = next_states
        consumed += symbol
        steps.append(FAStep(current_states, input_string[position + 1:], consumed, tuple(fired)))

    return _finish(automaton, steps, current_states, NFA)


def epsilon_closure(automaton: FiniteAutomaton, states: Iterable[str]) -> Tuple[str, ...]:
    """
    Compute epsilon closure of a set of states.

    Args:
        automaton: The FiniteAutomaton
        states: States to compute closure for

    Returns:
        The given states followed by every state reachable from them via
        ε-labelled transitions, in discovery order
    """
    closure = dict.fromkeys(states)
    stack = list(closure)

    while stack:
        current = stack.pop()
        for transition in _transitions_from(automaton, current, EPSILON):
            if transition.to_state not in closure:
                closure[transition.to_state] = None
                stack.append(transition.to_state)

    return tuple(closure)


def _transitions_from(automaton: FiniteAutomaton, state: str, symbol: str) -> List[FATransition]:
    return [
        t for t in automaton.transitions
        if t.from_state == state and t.symbol == symbol
    ]


def _finish(automaton: FiniteAutomaton, steps: List[FAStep], final_states: Tuple[str, ...], mode: str) -> FAResult:
    accepted = any(state in automaton.accept_states for state in final_states)
    steps[-1].accepted = accepted
    return FAResult(accepted, steps, final_states, Outcome.ACCEPTED if accepted else Outcome.REJECTED, mode)


def _stopped(steps: List[FAStep], states: Tuple[str, ...], outcome: Outcome, mode: str) -> FAResult:
    logger.info("%s run stopped after %d steps: %s", mode.upper(), len(steps) - 1, outcome.value)
    steps[-1].accepted = False
    return FAResult(False, steps, states, outcome, mode)
