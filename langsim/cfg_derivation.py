"""
Bounded leftmost-derivation search for context-free grammars.

``derive`` runs an iterative deepening depth-first search over leftmost
derivations: for max_depth = 1, 2, ... up to the budget's max_depth it expands
the leftmost non-terminal with every production of that non-terminal in
authoring order. The first derivation found at the smallest depth is returned,
so among several derivations of equal length the authoring order decides which
one comes back. Derivations longer than the depth ceiling are never found; that
is reported as BUDGET_EXHAUSTED, not as a definitive rejection.

Each recursive call returns the path below it (or None), and only the path that
succeeds is concatenated into the result; nothing speculative is recorded.
"""
import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

from .budget import CFG_BUDGET, Budget, CancellationToken, Outcome, is_cancelled
from .definitions import ContextFreeGrammar, Production
from .results import CFGResult, DerivationStep

logger = logging.getLogger(__name__)

# (sentential form after the step, production used, index of the rewritten symbol)
_Applied = Tuple[Tuple[str, ...], Production, int]


class _SearchStopped(Exception):
    def __init__(self, outcome: Outcome):
        super().__init__(outcome.value)
        self.outcome = outcome


def derive(grammar: ContextFreeGrammar, target: str, budget: Optional[Budget] = None,
           cancel_token: Optional[CancellationToken] = None) -> CFGResult:
    """
    Decides whether ``target`` is derivable from the grammar's start symbol.

    Args:
        grammar: The ContextFreeGrammar to search
        target: The terminal string to derive
        budget: Depth ceiling (max_depth) and optional node limit (max_nodes);
            unset fields use CFG_BUDGET
        cancel_token: Optional token checked at every search node

    Returns:
        CFGResult: can_derive plus the derivation (initial form first, then one
        step per production applied). The derivation is empty on failure.
    """
    budget = (budget or Budget()).merged_with(CFG_BUDGET)
    logger.debug("CFG search for %r from %s (depth %d)", target, grammar.start_symbol, budget.max_depth)

    search = _DerivationSearch(grammar, target, budget.max_nodes, cancel_token)
    start_form = (grammar.start_symbol,)

    for max_depth in range(1, budget.max_depth + 1):
        try:
            path, truncated = search.expand(start_form, max_depth)
        except _SearchStopped as stopped:
            logger.info("CFG search for %r stopped at depth %d: %s", target, max_depth, stopped.outcome.value)
            return CFGResult(False, [], stopped.outcome, nodes_explored=search.nodes)

        if path is not None:
            derivation = [DerivationStep(0, start_form)]
            for form, production, index in path:
                derivation.append(DerivationStep(len(derivation), form, production, index))
            logger.debug("CFG search for %r succeeded at depth %d", target, max_depth)
            return CFGResult(True, derivation, Outcome.ACCEPTED, depth=max_depth, nodes_explored=search.nodes)

        if not truncated:
            # Nothing was cut off by the depth limit, so a deeper search cannot help
            return CFGResult(False, [], Outcome.REJECTED, nodes_explored=search.nodes)

    logger.info("CFG search for %r exhausted depth %d", target, budget.max_depth)
    return CFGResult(False, [], Outcome.BUDGET_EXHAUSTED, nodes_explored=search.nodes)


class _DerivationSearch:
    """
    Depth-limited search state for one ``derive`` call.

    Failed sentential forms are remembered with the depth they failed at, so a
    form reached again with no more depth left is not searched twice. A form
    that failed without hitting the depth limit fails at any depth.
    """

    def __init__(self, grammar: ContextFreeGrammar, target: str, max_nodes: Optional[int],
                 cancel_token: Optional[CancellationToken]):
        self.grammar = grammar
        self.target = target
        self.max_nodes = max_nodes
        self.cancel_token = cancel_token
        self.nodes = 0
        self._failed: Dict[Tuple, float] = {}
        self._min_yield, self._min_steps = minimum_costs(grammar)
        self._productions = {nt: grammar.productions_for(nt) for nt in grammar.non_terminals}

    def expand(self, form: Tuple[str, ...], remaining: int) -> Tuple[Optional[List[_Applied]], bool]:
        """
        Returns (path, truncated): the steps that turn ``form`` into the target,
        or None, and whether the depth limit cut any branch off.
        """
        self.nodes += 1
        if is_cancelled(self.cancel_token):
            raise _SearchStopped(Outcome.CANCELLED)
        if self.max_nodes is not None and self.nodes > self.max_nodes:
            raise _SearchStopped(Outcome.BUDGET_EXHAUSTED)

        index = self._leftmost_non_terminal(form)
        if index is None:
            return ([] if ''.join(form) == self.target else None), False

        # Terminals left of the leftmost non-terminal never change again
        prefix = ''.join(form[:index])
        if not self.target.startswith(prefix):
            return None, False

        shortest_yield = 0
        fewest_steps = 0
        for symbol in form:
            if self.grammar.is_non_terminal(symbol):
                shortest_yield += self._min_yield[symbol]
                fewest_steps += self._min_steps[symbol]
            else:
                shortest_yield += len(symbol)

        if shortest_yield > len(self.target):
            return None, False
        if fewest_steps > remaining:
            return None, True

        key = (len(prefix), form[index:])
        failed_at = self._failed.get(key)
        if failed_at is not None and failed_at >= remaining:
            return None, failed_at != math.inf

        truncated = False
        for production in self._productions[form[index]]:
            replacement = production.symbols
            child = form[:index] + replacement + form[index + 1:]

            path, child_truncated = self.expand(child, remaining - 1)
            if path is not None:
                return [(child, production, index)] + path, False
            truncated = truncated or child_truncated

        self._failed[key] = remaining if truncated else math.inf
        return None, truncated

    def _leftmost_non_terminal(self, form: Sequence[str]) -> Optional[int]:
        for index, symbol in enumerate(form):
            if self.grammar.is_non_terminal(symbol):
                return index
        return None


def minimum_costs(grammar: ContextFreeGrammar) -> Tuple[Dict[str, float], Dict[str, float]]:
    """
    Lower bounds for every non-terminal, computed to a fixed point.

    Returns:
        (min_yield, min_steps): the length of the shortest terminal string the
        non-terminal derives, and the fewest productions needed to derive any
        terminal string. Both are math.inf for a non-terminal that derives no
        terminal string at all.
    """
    min_yield = {symbol: math.inf for symbol in grammar.non_terminals}
    min_steps = {symbol: math.inf for symbol in grammar.non_terminals}

    changed = True
    while changed:
        changed = False
        for production in grammar.productions:
            length = 0
            steps = 1
            for symbol in production.symbols:
                if grammar.is_non_terminal(symbol):
                    length += min_yield[symbol]
                    steps += min_steps[symbol]
                else:
                    length += len(symbol)

            if length < min_yield[production.left]:
                min_yield[production.left] = length
                changed = True
            if steps < min_steps[production.left]:
                min_steps[production.left] = steps
                changed = True

    return min_yield, min_steps


def replay_derivation(grammar: ContextFreeGrammar, derivation: Sequence[DerivationStep]) -> Tuple[str, ...]:
    """
    Re-applies the productions recorded in ``derivation`` to the start symbol.

    Returns:
        The final sentential form

    Raises:
        ValueError: If a step does not rewrite a matching non-terminal or does
            not reproduce the recorded sentential form
    """
    form: Tuple[str, ...] = (grammar.start_symbol,)

    for step in derivation:
        production = step.production_used
        if production is None:
            continue

        index = step.applied_at
        if index is None or not 0 <= index < len(form) or form[index] != production.left:
            raise ValueError(f"Step {step.step} applies '{production}' where '{production.left}' is not present")

        replacement = production.symbols
        form = form[:index] + replacement + form[index + 1:]
        if form != tuple(step.sentential_form):
            raise ValueError(f"Step {step.step} does not reproduce its recorded sentential form")

    return form
