from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Outcome(str, Enum):
    """How a run ended."""
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'
    BUDGET_EXHAUSTED = 'budget_exhausted'
    CANCELLED = 'cancelled'


@dataclass(frozen=True)
class Budget:
    """
    Resource limits for a single run. A field left as None falls back to the
    default budget of the machine kind being run.

    Args:
        max_steps: Maximum number of transitions a stepper may fire
        max_depth: Maximum derivation depth for grammar search
        max_nodes: Maximum number of configurations a search may expand
    """
    max_steps: Optional[int] = None
    max_depth: Optional[int] = None
    max_nodes: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ('max_steps', 'max_depth', 'max_nodes'):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer")
            if value <= 0:
                raise ValueError(f"{name} must be a positive integer")

    def merged_with(self, default: 'Budget') -> 'Budget':
        """Fill the unset fields from ``default``."""
        return Budget(
            max_steps=self.max_steps if self.max_steps is not None else default.max_steps,
            max_depth=self.max_depth if self.max_depth is not None else default.max_depth,
            max_nodes=self.max_nodes if self.max_nodes is not None else default.max_nodes
        )


PDA_BUDGET = Budget(max_steps=100, max_nodes=10000)
TM_BUDGET = Budget(max_steps=1000)
CFG_BUDGET = Budget(max_depth=20)


class CancellationToken:
    """Cooperative cancellation flag checked by the steppers between steps."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def is_cancelled(token: Optional[CancellationToken]) -> bool:
    return token is not None and token.cancelled
