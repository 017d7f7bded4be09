import logging
from typing import List, Optional

from .budget import TM_BUDGET, Budget, CancellationToken, Outcome, is_cancelled
from .definitions import LEFT, TMTransition, TuringMachine
from .results import TMResult, TMStep

logger = logging.getLogger(__name__)

# The tape starts with at least this many cells, padded with blanks
MIN_TAPE_LENGTH = 20


def simulate_tm(machine: TuringMachine, input_string: str, budget: Optional[Budget] = None,
                cancel_token: Optional[CancellationToken] = None) -> TMResult:
    """
    Simulates a Turing machine on the given input string.

    The tape grows at both ends: moving left of cell 0 prepends a blank and the
    head stays at 0, moving right past the last cell appends a blank. A missing
    transition for (state, symbol) is an implicit move to the reject state.

    Args:
        machine: The TuringMachine to run
        input_string: The initial tape contents, one symbol per character
        budget: Step limit (max_steps); unset fields use TM_BUDGET
        cancel_token: Optional token checked before each step

    Returns:
        TMResult: accepted / rejected flags, the step trace and the final tape.
        When the step budget runs out both flags are False and the outcome is
        BUDGET_EXHAUSTED.
    """
    budget = (budget or Budget()).merged_with(TM_BUDGET)
    logger.debug("TM run on %r from %s (%d steps)", input_string, machine.start_state, budget.max_steps)

    tape = list(input_string)
    while len(tape) < MIN_TAPE_LENGTH:
        tape.append(machine.blank_symbol)

    state = machine.start_state
    head = 0
    step_count = 0
    steps = [TMStep(step_count, state, tuple(tape), head)]

    while True:
        if state == machine.accept_state:
            steps[-1].accepted = True
            return _result(machine, steps, tape, Outcome.ACCEPTED)

        if state == machine.reject_state:
            steps[-1].rejected = True
            return _result(machine, steps, tape, Outcome.REJECTED)

        if is_cancelled(cancel_token):
            return _result(machine, steps, tape, Outcome.CANCELLED)

        if step_count >= budget.max_steps:
            return _result(machine, steps, tape, Outcome.BUDGET_EXHAUSTED)

        transition = _find_transition(machine.transitions, state, tape[head])
        step_count += 1

        if transition is None:
            steps.append(TMStep(step_count, machine.reject_state, tuple(tape), head, rejected=True))
            return _result(machine, steps, tape, Outcome.REJECTED)

        tape[head] = transition.write_symbol
        state = transition.next_state

        if transition.move_direction == LEFT:
            head -= 1
            if head < 0:
                tape.insert(0, machine.blank_symbol)
                head = 0
        else:
            head += 1
            if head >= len(tape):
                tape.append(machine.blank_symbol)

        steps.append(TMStep(step_count, state, tuple(tape), head, transition))


def _find_transition(transitions, state: str, symbol: str) -> Optional[TMTransition]:
    for transition in transitions:
        if transition.current_state == state and transition.read_symbol == symbol:
            return transition
    return None


def _result(machine: TuringMachine, steps: List[TMStep], tape: List[str], outcome: Outcome) -> TMResult:
    if outcome in (Outcome.BUDGET_EXHAUSTED, Outcome.CANCELLED):
        logger.info("TM run stopped after %d steps: %s", steps[-1].step, outcome.value)
        steps[-1].accepted = False
        steps[-1].rejected = False

    return TMResult(
        accepted=outcome == Outcome.ACCEPTED,
        rejected=outcome == Outcome.REJECTED,
        steps=steps,
        final_tape=tuple(tape),
        outcome=outcome,
        blank_symbol=machine.blank_symbol
    )
