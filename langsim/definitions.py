"""
Immutable machine and grammar definitions.

Definitions arrive from callers as JSON-shaped dictionaries (camelCase keys, the
same shape the JSON views receive) and are turned into frozen value objects by
the ``build_*`` functions below. Construction fails fast with a
``DefinitionError`` instead of guessing defaults, so every stepper can assume
its definition is referentially sound.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

EPSILON = 'ε'

LEFT = 'L'
RIGHT = 'R'


class DefinitionError(ValueError):
    """Raised when a machine or grammar definition is malformed."""


@dataclass(frozen=True)
class FAState:
    name: str
    is_start: bool = False
    is_accept: bool = False


@dataclass(frozen=True)
class FATransition:
    from_state: str
    to_state: str
    symbol: str

    def to_dict(self) -> Dict:
        return {'from': self.from_state, 'to': self.to_state, 'symbol': self.symbol}


@dataclass(frozen=True)
class PDATransition:
    from_state: str
    input_symbol: str
    pop_symbol: str
    to_state: str
    push_symbols: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        return {
            'fromState': self.from_state,
            'inputSymbol': self.input_symbol,
            'popSymbol': self.pop_symbol,
            'toState': self.to_state,
            'pushSymbols': list(self.push_symbols)
        }


@dataclass(frozen=True)
class TMTransition:
    current_state: str
    read_symbol: str
    write_symbol: str
    move_direction: str
    next_state: str

    def to_dict(self) -> Dict:
        return {
            'currentState': self.current_state,
            'readSymbol': self.read_symbol,
            'writeSymbol': self.write_symbol,
            'moveDirection': self.move_direction,
            'nextState': self.next_state
        }


@dataclass(frozen=True)
class Production:
    left: str
    right: Tuple[str, ...] = ()

    @property
    def symbols(self) -> Tuple[str, ...]:
        """The right side with ε markers removed; empty for an ε-production."""
        return tuple(s for s in self.right if s != EPSILON)

    def to_dict(self) -> Dict:
        return {'left': self.left, 'right': list(self.right)}

    def __str__(self) -> str:
        return f"{self.left} -> {' '.join(self.symbols) or EPSILON}"


@dataclass(frozen=True)
class FiniteAutomaton:
    states: Tuple[FAState, ...]
    alphabet: Tuple[str, ...]
    transitions: Tuple[FATransition, ...]
    start_state: str
    accept_states: Tuple[str, ...]

    def __post_init__(self) -> None:
        names = self.state_names
        _check_unique(names, 'states')
        _check_member(self.start_state, names, 'Start state')
        for state in self.accept_states:
            _check_member(state, names, 'Accepting state')
        for transition in self.transitions:
            _check_member(transition.from_state, names, 'Transition source')
            _check_member(transition.to_state, names, 'Transition target')

    @property
    def state_names(self) -> Tuple[str, ...]:
        return tuple(state.name for state in self.states)

    def to_dict(self) -> Dict:
        return {
            'states': [
                {'name': s.name, 'isStart': s.is_start, 'isAccept': s.is_accept}
                for s in self.states
            ],
            'alphabet': list(self.alphabet),
            'transitions': [t.to_dict() for t in self.transitions],
            'startState': self.start_state,
            'acceptStates': list(self.accept_states)
        }


@dataclass(frozen=True)
class PushdownAutomaton:
    states: Tuple[str, ...]
    input_alphabet: Tuple[str, ...]
    stack_alphabet: Tuple[str, ...]
    transitions: Tuple[PDATransition, ...]
    start_state: str
    initial_stack_symbol: str
    accept_states: Tuple[str, ...]

    def __post_init__(self) -> None:
        _check_unique(self.states, 'states')
        _check_member(self.start_state, self.states, 'Start state')
        for state in self.accept_states:
            _check_member(state, self.states, 'Accepting state')
        if not self.initial_stack_symbol or self.initial_stack_symbol == EPSILON:
            raise DefinitionError("initialStackSymbol must be a non-empty stack symbol")
        for transition in self.transitions:
            _check_member(transition.from_state, self.states, 'Transition source')
            _check_member(transition.to_state, self.states, 'Transition target')


@dataclass(frozen=True)
class TuringMachine:
    states: Tuple[str, ...]
    alphabet: Tuple[str, ...]
    tape_alphabet: Tuple[str, ...]
    transitions: Tuple[TMTransition, ...]
    start_state: str
    accept_state: str
    reject_state: str
    blank_symbol: str

    def __post_init__(self) -> None:
        _check_unique(self.states, 'states')
        _check_member(self.start_state, self.states, 'Start state')
        _check_member(self.accept_state, self.states, 'Accept state')
        _check_member(self.reject_state, self.states, 'Reject state')
        if self.accept_state == self.reject_state:
            raise DefinitionError("acceptState and rejectState must differ")
        if not self.blank_symbol:
            raise DefinitionError("blankSymbol must be a non-empty symbol")
        for transition in self.transitions:
            _check_member(transition.current_state, self.states, 'Transition source')
            _check_member(transition.next_state, self.states, 'Transition target')
            if transition.move_direction not in (LEFT, RIGHT):
                raise DefinitionError(
                    f"Move direction must be 'L' or 'R', got '{transition.move_direction}'"
                )


@dataclass(frozen=True)
class ContextFreeGrammar:
    terminals: Tuple[str, ...]
    non_terminals: Tuple[str, ...]
    productions: Tuple[Production, ...]
    start_symbol: str
    _non_terminal_set: frozenset = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        _check_unique(self.non_terminals, 'nonTerminals')
        overlap = set(self.terminals) & set(self.non_terminals)
        if overlap:
            raise DefinitionError(f"Symbols declared as both terminal and non-terminal: {sorted(overlap)}")
        _check_member(self.start_symbol, self.non_terminals, 'Start symbol')

        known = set(self.terminals) | set(self.non_terminals) | {EPSILON}
        for production in self.productions:
            _check_member(production.left, self.non_terminals, 'Production left-hand side')
            for symbol in production.right:
                if symbol not in known:
                    raise DefinitionError(f"Production '{production}' uses undeclared symbol '{symbol}'")

        object.__setattr__(self, '_non_terminal_set', frozenset(self.non_terminals))

    def is_non_terminal(self, symbol: str) -> bool:
        return symbol in self._non_terminal_set

    def productions_for(self, non_terminal: str) -> List[Production]:
        return [p for p in self.productions if p.left == non_terminal]


def build_finite_automaton(data: Dict) -> FiniteAutomaton:
    """
    Builds a FiniteAutomaton from its dictionary form.

    Args:
        data: A dictionary with the following keys:
            - states: List of state names or {name, isStart, isAccept} records
            - alphabet: List of symbols in the alphabet
            - transitions: List of {from, to, symbol} records, or the nested
              {state: {symbol: [targets]}} mapping ('' is read as ε)
            - startState: The start state (optional if exactly one state is flagged isStart)
            - acceptStates: List of accepting states (merged with flagged states)

    Returns:
        FiniteAutomaton: The validated automaton

    Raises:
        DefinitionError: If the definition is malformed
    """
    _check_mapping(data, 'automaton')

    declared = []
    for raw in _require_list(data, 'states'):
        if isinstance(raw, str):
            declared.append((raw, False, False))
        elif isinstance(raw, dict) and isinstance(raw.get('name'), str):
            declared.append((raw['name'], bool(raw.get('isStart')), bool(raw.get('isAccept'))))
        else:
            raise DefinitionError(f"Invalid state entry: {raw!r}")

    flagged_start = [name for name, is_start, _ in declared if is_start]
    start_state = data.get('startState')
    if start_state in (None, ''):
        if len(flagged_start) > 1:
            raise DefinitionError(f"More than one start state flagged: {flagged_start}")
        if not flagged_start:
            raise DefinitionError("No start state given")
        start_state = flagged_start[0]
    elif not isinstance(start_state, str):
        raise DefinitionError("startState must be a string")
    elif flagged_start and flagged_start != [start_state]:
        raise DefinitionError(
            f"startState '{start_state}' disagrees with flagged start states {flagged_start}"
        )

    accept_states = list(_optional_list(data, 'acceptStates'))
    accept_states += [name for name, _, is_accept in declared if is_accept]
    accept_states = tuple(dict.fromkeys(accept_states))

    states = tuple(
        FAState(name, name == start_state, name in accept_states)
        for name, _, _ in declared
    )

    return FiniteAutomaton(
        states=states,
        alphabet=tuple(_require_list(data, 'alphabet')),
        transitions=tuple(_build_fa_transitions(data.get('transitions'))),
        start_state=start_state,
        accept_states=accept_states
    )


def _build_fa_transitions(raw) -> Iterable[FATransition]:
    if isinstance(raw, dict):
        # Nested {state: {symbol: [targets]}} form
        for from_state, by_symbol in raw.items():
            if not isinstance(by_symbol, dict):
                raise DefinitionError(f"Transitions for state '{from_state}' must be a dictionary")
            for symbol, targets in by_symbol.items():
                if isinstance(targets, str):
                    targets = [targets]
                for to_state in targets:
                    yield FATransition(from_state, to_state, symbol or EPSILON)
        return

    if not isinstance(raw, list):
        raise DefinitionError("transitions must be a list or a dictionary")

    for entry in raw:
        _check_mapping(entry, 'transition')
        yield FATransition(
            from_state=_require_str(entry, 'from'),
            to_state=_require_str(entry, 'to'),
            symbol=_require_str(entry, 'symbol')
        )


def build_pushdown_automaton(data: Dict) -> PushdownAutomaton:
    """
    Builds a PushdownAutomaton from its dictionary form.

    Transitions are {fromState, inputSymbol, popSymbol, toState, pushSymbols}
    records; 'ε' as input or pop symbol means "consume nothing" / "any top".
    pushSymbols[0] ends up on top of the stack.

    Raises:
        DefinitionError: If the definition is malformed
    """
    _check_mapping(data, 'automaton')

    transitions = []
    for entry in _require_list(data, 'transitions'):
        _check_mapping(entry, 'transition')
        push_symbols = entry.get('pushSymbols', [])
        if not isinstance(push_symbols, list) or not all(isinstance(s, str) for s in push_symbols):
            raise DefinitionError("pushSymbols must be a list of symbols")
        transitions.append(PDATransition(
            from_state=_require_str(entry, 'fromState'),
            input_symbol=_require_symbol(entry, 'inputSymbol'),
            pop_symbol=_require_symbol(entry, 'popSymbol'),
            to_state=_require_str(entry, 'toState'),
            push_symbols=tuple(push_symbols)
        ))

    return PushdownAutomaton(
        states=tuple(_require_list(data, 'states')),
        input_alphabet=tuple(_optional_list(data, 'inputAlphabet')),
        stack_alphabet=tuple(_optional_list(data, 'stackAlphabet')),
        transitions=tuple(transitions),
        start_state=_require_str(data, 'startState'),
        initial_stack_symbol=_require_str(data, 'initialStackSymbol'),
        accept_states=tuple(_optional_list(data, 'acceptStates'))
    )


def build_turing_machine(data: Dict) -> TuringMachine:
    """
    Builds a TuringMachine from its dictionary form.

    Raises:
        DefinitionError: If the definition is malformed
    """
    _check_mapping(data, 'machine')

    transitions = []
    for entry in _require_list(data, 'transitions'):
        _check_mapping(entry, 'transition')
        transitions.append(TMTransition(
            current_state=_require_str(entry, 'currentState'),
            read_symbol=_require_str(entry, 'readSymbol'),
            write_symbol=_require_str(entry, 'writeSymbol'),
            move_direction=_require_str(entry, 'moveDirection').upper(),
            next_state=_require_str(entry, 'nextState')
        ))

    return TuringMachine(
        states=tuple(_require_list(data, 'states')),
        alphabet=tuple(_optional_list(data, 'alphabet')),
        tape_alphabet=tuple(_optional_list(data, 'tapeAlphabet')),
        transitions=tuple(transitions),
        start_state=_require_str(data, 'startState'),
        accept_state=_require_str(data, 'acceptState'),
        reject_state=_require_str(data, 'rejectState'),
        blank_symbol=_require_str(data, 'blankSymbol')
    )


def build_grammar(data: Dict) -> ContextFreeGrammar:
    """
    Builds a ContextFreeGrammar from its dictionary form.

    A production's right side is a list of symbols or a whitespace separated
    string; an empty right side (or one made of 'ε') is an ε-production.

    Raises:
        DefinitionError: If the definition is malformed
    """
    _check_mapping(data, 'grammar')

    productions = []
    for entry in _require_list(data, 'productions'):
        _check_mapping(entry, 'production')
        right = entry.get('right', [])
        if isinstance(right, str):
            right = right.split()
        if not isinstance(right, list) or not all(isinstance(s, str) for s in right):
            raise DefinitionError("Production right side must be a list of symbols")
        productions.append(Production(_require_str(entry, 'left'), tuple(right)))

    return ContextFreeGrammar(
        terminals=tuple(_require_list(data, 'terminals')),
        non_terminals=tuple(_require_list(data, 'nonTerminals')),
        productions=tuple(productions),
        start_symbol=_require_str(data, 'startSymbol')
    )


def _check_mapping(value, what: str) -> None:
    if not isinstance(value, dict):
        raise DefinitionError(f"{what} must be a dictionary")


def _require_list(data: Dict, key: str) -> List:
    if key not in data:
        raise DefinitionError(f"Missing required key: {key}")
    return _optional_list(data, key)


def _optional_list(data: Dict, key: str) -> List:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise DefinitionError(f"{key} must be a list")
    return value


def _require_str(data: Dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or value == '':
        raise DefinitionError(f"Missing required key: {key}")
    return value


def _require_symbol(data: Dict, key: str) -> str:
    # '' is accepted as ε, as in the nested FA transition form
    value = data.get(key)
    if value == '':
        return EPSILON
    return _require_str(data, key)


def _check_unique(names: Tuple[str, ...], what: str) -> None:
    if len(set(names)) != len(names):
        raise DefinitionError(f"{what} must be unique")


def _check_member(name: Optional[str], names: Tuple[str, ...], what: str) -> None:
    if name not in names:
        raise DefinitionError(f"{what} '{name}' not in declared list")
