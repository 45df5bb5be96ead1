"""
Data models for scenarios.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, List, Optional

if TYPE_CHECKING:
    from .scenario import Scenario

Predicate = Callable[[], bool]
ScenarioCallback = Callable[["Scenario", Any], Any]


class GroupKind(Enum):
    """Role of a constraint group within a scenario."""

    DEFAULT = "default"  # Implicit always-true group used by a bare then()
    CONSTRAINT = "constraint"  # Opened by constraint()
    ELSE = "else"  # Opened by else_(), runs only if nothing else matched


@dataclass
class ConstraintGroup:
    """
    AND-combined predicates guarding one callback.

    A group without predicates is vacuously true.
    """

    kind: GroupKind = GroupKind.CONSTRAINT
    predicates: List[Predicate] = field(default_factory=list)
    callback: Optional[ScenarioCallback] = None

    def matches(self) -> bool:
        """Evaluate predicates in order, stopping at the first false one."""
        return all(predicate() for predicate in self.predicates)
