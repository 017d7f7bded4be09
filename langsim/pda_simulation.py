import logging
from collections import deque
from typing import List, NamedTuple, Optional, Sequence, Tuple

from .budget import PDA_BUDGET, Budget, CancellationToken, Outcome, is_cancelled
from .definitions import EPSILON, PDATransition, PushdownAutomaton
from .results import PDAResult, PDAStep

logger = logging.getLogger(__name__)

FIRST_MATCH = 'first-match'
SEARCH = 'search'
MODES = (FIRST_MATCH, SEARCH)


def simulate_pda(automaton: PushdownAutomaton, input_string: str, budget: Optional[Budget] = None,
                 mode: str = FIRST_MATCH, cancel_token: Optional[CancellationToken] = None) -> PDAResult:
    """
    Simulates a pushdown automaton on the given input string.

    Acceptance is by final state once the input is consumed.

    Args:
        automaton: The PushdownAutomaton to run
        input_string: The input string to simulate
        budget: Step limit (max_steps) and, for search mode, the number of
            configurations to expand (max_nodes); unset fields use PDA_BUDGET
        mode: 'first-match' fires the first applicable transition at every step
            and never backtracks; 'search' explores every applicable transition
            breadth-first and returns the shortest accepting run
        cancel_token: Optional token checked before each step

    Returns:
        PDAResult: The verdict and the step trace. In search mode a rejected
        run carries the trace of the configuration that consumed the most input.

    Raises:
        ValueError: If mode is unknown
    """
    budget = (budget or Budget()).merged_with(PDA_BUDGET)

    if mode == FIRST_MATCH:
        return _simulate_first_match(automaton, input_string, budget, cancel_token)
    if mode == SEARCH:
        return _simulate_search(automaton, input_string, budget, cancel_token)
    raise ValueError(f"Unknown PDA mode '{mode}', expected one of {MODES}")


def _simulate_first_match(automaton: PushdownAutomaton, input_string: str, budget: Budget,
                          cancel_token: Optional[CancellationToken]) -> PDAResult:
    logger.debug("PDA run on %r from %s (first match, %d steps)", input_string, automaton.start_state,
                 budget.max_steps)

    state = automaton.start_state
    stack = (automaton.initial_stack_symbol,)
    position = 0
    fired = 0
    steps = [PDAStep(0, state, input_string, '', stack)]

    while True:
        if is_cancelled(cancel_token):
            return _stopped(steps, state, Outcome.CANCELLED, FIRST_MATCH)

        if position >= len(input_string):
            # Input exhausted: keep firing ε-moves, then decide by final state
            transition = _first_applicable(automaton.transitions, state, EPSILON, stack)
            if transition is None:
                accepted = state in automaton.accept_states
                steps[-1].accepted = accepted
                outcome = Outcome.ACCEPTED if accepted else Outcome.REJECTED
                return PDAResult(accepted, steps, state, outcome, FIRST_MATCH)
        else:
            symbol = input_string[position]
            transition = (_first_applicable(automaton.transitions, state, symbol, stack)
                          or _first_applicable(automaton.transitions, state, EPSILON, stack))
            if transition is None:
                steps[-1].accepted = False
                return PDAResult(False, steps, state, Outcome.REJECTED, FIRST_MATCH)

        if fired >= budget.max_steps:
            return _stopped(steps, state, Outcome.BUDGET_EXHAUSTED, FIRST_MATCH)

        state = transition.to_state
        stack = apply_transition(transition, stack)
        if transition.input_symbol != EPSILON:
            position += 1
        fired += 1

        steps.append(PDAStep(
            step=fired,
            state=state,
            remaining_input=input_string[position:],
            consumed_input=input_string[:position],
            stack=stack,
            transition=transition
        ))


class _Configuration(NamedTuple):
    state: str
    position: int
    stack: Tuple[str, ...]
    depth: int
    transition: Optional[PDATransition]
    parent: Optional['_Configuration']


def _simulate_search(automaton: PushdownAutomaton, input_string: str, budget: Budget,
                     cancel_token: Optional[CancellationToken]) -> PDAResult:
    logger.debug("PDA search on %r from %s (%d steps, %d nodes)", input_string, automaton.start_state,
                 budget.max_steps, budget.max_nodes)

    start = _Configuration(automaton.start_state, 0, (automaton.initial_stack_symbol,), 0, None, None)

    # Configuration: (state, input position, stack), each expanded at most once
    queue = deque([start])
    seen = {(start.state, start.position, start.stack)}
    furthest = start
    expanded = 0
    truncated = False

    while queue:
        if is_cancelled(cancel_token):
            return _stopped(_trace(furthest, input_string), furthest.state, Outcome.CANCELLED, SEARCH)

        node = queue.popleft()

        if node.position == len(input_string) and node.state in automaton.accept_states:
            steps = _trace(node, input_string)
            steps[-1].accepted = True
            logger.debug("PDA search accepted after expanding %d configurations", expanded)
            return PDAResult(True, steps, node.state, Outcome.ACCEPTED, SEARCH)

        if node.position > furthest.position:
            furthest = node

        if expanded >= budget.max_nodes:
            truncated = True
            break
        expanded += 1

        symbol = input_string[node.position] if node.position < len(input_string) else None
        for transition in automaton.transitions:
            if transition.input_symbol != EPSILON and transition.input_symbol != symbol:
                continue
            if not _is_applicable(transition, node.state, transition.input_symbol, node.stack):
                continue
            if node.depth >= budget.max_steps:
                truncated = True
                break

            position = node.position + (0 if transition.input_symbol == EPSILON else 1)
            stack = apply_transition(transition, node.stack)
            key = (transition.to_state, position, stack)
            if key in seen:
                continue
            seen.add(key)
            queue.append(_Configuration(transition.to_state, position, stack, node.depth + 1, transition, node))

    outcome = Outcome.BUDGET_EXHAUSTED if truncated else Outcome.REJECTED
    steps = _trace(furthest, input_string)
    if truncated:
        return _stopped(steps, furthest.state, outcome, SEARCH)
    steps[-1].accepted = False
    return PDAResult(False, steps, furthest.state, outcome, SEARCH)


def apply_transition(transition: PDATransition, stack: Sequence[str]) -> Tuple[str, ...]:
    """
    Returns the stack after firing ``transition``; the top of the stack is the last element.

    One symbol is popped when the transition names a pop symbol, then the push
    symbols are pushed in reverse so that push_symbols[0] ends up on top.
    """
    stack = list(stack)
    if transition.pop_symbol != EPSILON and stack:
        stack.pop()
    for symbol in reversed(transition.push_symbols):
        if symbol != EPSILON:
            stack.append(symbol)
    return tuple(stack)


def _is_applicable(transition: PDATransition, state: str, input_symbol: str, stack: Sequence[str]) -> bool:
    if transition.from_state != state or transition.input_symbol != input_symbol:
        return False
    # An empty stack only admits transitions that do not pop
    return transition.pop_symbol == EPSILON or (bool(stack) and stack[-1] == transition.pop_symbol)


def _first_applicable(transitions: Sequence[PDATransition], state: str, input_symbol: str,
                      stack: Sequence[str]) -> Optional[PDATransition]:
    for transition in transitions:
        if _is_applicable(transition, state, input_symbol, stack):
            return transition
    return None


def _trace(node: _Configuration, input_string: str) -> List[PDAStep]:
    path = []
    while node is not None:
        path.append(node)
        node = node.parent
    path.reverse()

    return [
        PDAStep(
            step=config.depth,
            state=config.state,
            remaining_input=input_string[config.position:],
            consumed_input=input_string[:config.position],
            stack=config.stack,
            transition=config.transition
        )
        for config in path
    ]


def _stopped(steps: List[PDAStep], state: str, outcome: Outcome, mode: str) -> PDAResult:
    logger.info("PDA run stopped after %d steps: %s", steps[-1].step, outcome.value)
    steps[-1].accepted = False
    return PDAResult(False, steps, state, outcome, mode)
