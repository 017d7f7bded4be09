"""
Step and result records produced by the steppers.

A step records the configuration *after* applying zero or one transitions. The
``accepted``/``rejected`` flags of the last step are authoritative; earlier
steps leave them as None.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .budget import Outcome
from .definitions import FATransition, PDATransition, Production, TMTransition


@dataclass
class FAStep:
    states: Tuple[str, ...]
    remaining_input: str
    consumed_input: str
    transitions: Tuple[FATransition, ...] = ()
    accepted: Optional[bool] = None

    @property
    def current_state(self) -> str:
        return ','.join(self.states)

    def to_dict(self) -> Dict:
        return {
            'currentState': self.current_state,
            'states': list(self.states),
            'remainingInput': self.remaining_input,
            'consumedInput': self.consumed_input,
            'transitions': [t.to_dict() for t in self.transitions],
            'accepted': self.accepted
        }


@dataclass
class FAResult:
    accepted: bool
    steps: List[FAStep]
    final_states: Tuple[str, ...]
    outcome: Outcome
    mode: str

    @property
    def final_state(self) -> str:
        return ','.join(self.final_states)

    def to_dict(self) -> Dict:
        return {
            'accepted': self.accepted,
            'outcome': self.outcome.value,
            'mode': self.mode,
            'finalState': self.final_state,
            'finalStates': list(self.final_states),
            'steps': [s.to_dict() for s in self.steps]
        }


@dataclass
class PDAStep:
    step: int
    state: str
    remaining_input: str
    consumed_input: str
    stack: Tuple[str, ...]
    transition: Optional[PDATransition] = None
    accepted: Optional[bool] = None

    @property
    def stack_top(self) -> Optional[str]:
        return self.stack[-1] if self.stack else None

    def to_dict(self) -> Dict:
        return {
            'step': self.step,
            'state': self.state,
            'remainingInput': self.remaining_input,
            'consumedInput': self.consumed_input,
            # Bottom of the stack first, top last
            'stack': list(self.stack),
            'transition': self.transition.to_dict() if self.transition else None,
            'accepted': self.accepted
        }


@dataclass
class PDAResult:
    accepted: bool
    steps: List[PDAStep]
    final_state: str
    outcome: Outcome
    mode: str

    def to_dict(self) -> Dict:
        return {
            'accepted': self.accepted,
            'outcome': self.outcome.value,
            'mode': self.mode,
            'finalState': self.final_state,
            'steps': [s.to_dict() for s in self.steps]
        }


@dataclass
class TMStep:
    step: int
    state: str
    tape: Tuple[str, ...]
    head_position: int
    transition: Optional[TMTransition] = None
    accepted: Optional[bool] = None
    rejected: Optional[bool] = None

    def to_dict(self) -> Dict:
        return {
            'step': self.step,
            'state': self.state,
            'tape': list(self.tape),
            'headPosition': self.head_position,
            'transition': self.transition.to_dict() if self.transition else None,
            'accepted': self.accepted,
            'rejected': self.rejected
        }


@dataclass
class TMResult:
    accepted: bool
    rejected: bool
    steps: List[TMStep]
    final_tape: Tuple[str, ...]
    outcome: Outcome
    blank_symbol: str

    def tape_contents(self) -> str:
        """The final tape with the blank padding at both ends trimmed."""
        cells = list(self.final_tape)
        while cells and cells[0] == self.blank_symbol:
            cells.pop(0)
        while cells and cells[-1] == self.blank_symbol:
            cells.pop()
        return ''.join(cells)

    def to_dict(self) -> Dict:
        return {
            'accepted': self.accepted,
            'rejected': self.rejected,
            'outcome': self.outcome.value,
            'finalTape': list(self.final_tape),
            'tapeContents': self.tape_contents(),
            'steps': [s.to_dict() for s in self.steps]
        }


@dataclass
class DerivationStep:
    step: int
    sentential_form: Tuple[str, ...]
    production_used: Optional[Production] = None
    applied_at: Optional[int] = None

    def to_dict(self) -> Dict:
        return {
            'step': self.step,
            'sententialForm': list(self.sentential_form),
            'productionUsed': self.production_used.to_dict() if self.production_used else None,
            'appliedAt': self.applied_at
        }


@dataclass
class CFGResult:
    can_derive: bool
    derivation: List[DerivationStep]
    outcome: Outcome
    depth: Optional[int] = None
    nodes_explored: int = field(default=0, compare=False)

    def to_dict(self) -> Dict:
        return {
            'canDerive': self.can_derive,
            'outcome': self.outcome.value,
            'depth': self.depth,
            'nodesExplored': self.nodes_explored,
            'derivation': [s.to_dict() for s in self.derivation]
        }
