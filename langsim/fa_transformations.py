from collections import defaultdict, deque
from typing import Dict, FrozenSet, List, Optional, Set

from .definitions import EPSILON, FAState, FATransition, FiniteAutomaton
from .fa_properties import is_deterministic
from .fa_simulation import CLOSURE, EPSILON_MODES, LITERAL, epsilon_closure

DEAD_STATE = '∅'


def subset_construction(automaton: FiniteAutomaton, epsilon_mode: str = LITERAL,
                        add_dead_state: bool = False) -> FiniteAutomaton:
    """
    Converts a non-deterministic finite automaton (NFA) to a deterministic finite
    automaton (DFA) using subset construction algorithm.

    With epsilon_mode='literal' ε is an ordinary alphabet symbol, which is the
    same reading the NFA stepper uses by default, so the DFA stepper on the
    result accepts exactly what the NFA stepper accepts. With 'closure' the
    textbook ε-closure is applied and ε is dropped from the alphabet.

    Args:
        automaton: The FiniteAutomaton to determinise
        epsilon_mode: 'literal' or 'closure'
        add_dead_state: Route missing transitions to an explicit dead state
            instead of leaving them undefined

    Returns:
        FiniteAutomaton: A DFA where each state represents a subset of NFA states

    Raises:
        ValueError: If epsilon_mode is unknown
    """
    if epsilon_mode not in EPSILON_MODES:
        raise ValueError(f"Unknown epsilon mode '{epsilon_mode}', expected one of {EPSILON_MODES}")

    alphabet = _alphabet(automaton, epsilon_mode)

    def close(states) -> FrozenSet[str]:
        if epsilon_mode == CLOSURE:
            return frozenset(epsilon_closure(automaton, states))
        return frozenset(states)

    def move(states: FrozenSet[str], symbol: str) -> FrozenSet[str]:
        """Compute all states reachable from given states on given symbol"""
        return frozenset(
            t.to_state for t in automaton.transitions
            if t.from_state in states and t.symbol == symbol
        )

    start_set = close([automaton.start_state])

    # Discovery order keeps the output stable between runs
    names: Dict[FrozenSet[str], str] = {start_set: _subset_name(start_set)}
    transitions: List[FATransition] = []
    needs_dead_state = False
    queue = deque([start_set])

    while queue:
        current = queue.popleft()

        for symbol in alphabet:
            moved = move(current, symbol)
            if not moved:
                if add_dead_state:
                    needs_dead_state = True
                    transitions.append(FATransition(names[current], DEAD_STATE, symbol))
                continue

            target = close(moved)
            if target not in names:
                names[target] = _subset_name(target)
                queue.append(target)
            transitions.append(FATransition(names[current], names[target], symbol))

    accepting = frozenset(automaton.accept_states)
    accept_states = tuple(name for subset, name in names.items() if subset & accepting)

    state_names = list(names.values())
    if needs_dead_state:
        state_names.append(DEAD_STATE)
        transitions.extend(FATransition(DEAD_STATE, DEAD_STATE, symbol) for symbol in alphabet)

    start_name = names[start_set]
    return FiniteAutomaton(
        states=tuple(FAState(name, name == start_name, name in accept_states) for name in state_names),
        alphabet=alphabet,
        transitions=tuple(transitions),
        start_state=start_name,
        accept_states=accept_states
    )


def _alphabet(automaton: FiniteAutomaton, epsilon_mode: str):
    # Symbols used on transitions but missing from the declared alphabet still count
    symbols = list(automaton.alphabet) + [t.symbol for t in automaton.transitions]
    if epsilon_mode == CLOSURE:
        symbols = [s for s in symbols if s != EPSILON]
    return tuple(dict.fromkeys(symbols))


def _subset_name(states: FrozenSet[str]) -> str:
    """Convert a frozenset of states to a canonical state name"""
    return '{' + ','.join(sorted(states)) + '}'


def minimise_dfa(automaton: FiniteAutomaton) -> FiniteAutomaton:
    """
    Minimises a deterministic finite automaton (DFA) using Hopcroft's algorithm.

    Unreachable states are dropped first. Missing moves are treated as moves
    into an implicit sink, so states that can never reach acceptance merge
    with it and disappear; the result is partial in the same way as the
    input. Each merged state is named by joining its members with '_'.

    Args:
        automaton: A deterministic FiniteAutomaton

    Returns:
        FiniteAutomaton: The minimal DFA accepting the same language

    Raises:
        ValueError: If the automaton is not deterministic
    """
    if not is_deterministic(automaton):
        raise ValueError("DFA minimisation requires a deterministic automaton")

    alphabet = _alphabet(automaton, LITERAL)
    delta = {(t.from_state, t.symbol): t.to_state for t in automaton.transitions}

    reachable = {automaton.start_state: None}
    queue = deque([automaton.start_state])
    while queue:
        state = queue.popleft()
        for symbol in alphabet:
            target = delta.get((state, symbol))
            if target is not None and target not in reachable:
                reachable[target] = None
                queue.append(target)

    # None stands for the implicit sink
    states: Set[Optional[str]] = set(reachable) | {None}
    accepting = {state for state in reachable if state in automaton.accept_states}
    non_accepting = states - accepting

    reverse = {symbol: defaultdict(set) for symbol in alphabet}
    for state in states:
        for symbol in alphabet:
            reverse[symbol][delta.get((state, symbol))].add(state)

    partition: List[Set] = [group for group in (accepting, non_accepting) if group]
    worklist: List[Set] = [group.copy() for group in partition]

    while worklist:
        splitter = worklist.pop()
        for symbol in alphabet:
            involved = set()
            for state in splitter:
                involved |= reverse[symbol].get(state, set())
            new_partition = []
            for group in partition:
                inter = group & involved
                diff = group - involved
                if inter and diff:
                    new_partition.extend([inter, diff])
                    if group in worklist:
                        worklist.remove(group)
                        worklist.extend([inter, diff])
                    else:
                        worklist.append(inter if len(inter) <= len(diff) else diff)
                else:
                    new_partition.append(group)
            partition = new_partition

    sink = next(group for group in partition if None in group)
    if automaton.start_state in sink:
        # Empty language
        return FiniteAutomaton(
            states=(FAState(automaton.start_state, True, False),),
            alphabet=alphabet,
            transitions=(),
            start_state=automaton.start_state,
            accept_states=()
        )

    names: Dict[str, str] = {}
    for group in partition:
        if group is not sink:
            name = '_'.join(sorted(group))
            for state in group:
                names[state] = name

    # One representative per merged state, in discovery order
    ordered: List[str] = []
    transitions: List[FATransition] = []
    for state in reachable:
        name = names.get(state)
        if name is None or name in ordered:
            continue
        ordered.append(name)
        for symbol in alphabet:
            target = delta.get((state, symbol))
            if target in names:
                transitions.append(FATransition(name, names[target], symbol))

    start_name = names[automaton.start_state]
    accept_states = tuple(dict.fromkeys(names[state] for state in reachable if state in accepting))
    return FiniteAutomaton(
        states=tuple(FAState(name, name == start_name, name in accept_states) for name in ordered),
        alphabet=alphabet,
        transitions=tuple(transitions),
        start_state=start_name,
        accept_states=accept_states
    )
