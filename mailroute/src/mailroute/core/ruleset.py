"""Priority-ordered rule collection with conflict rejection.

What:
  Hold one account's rules in evaluation order and refuse ambiguous
  insertions.

Why:
  Two rules at the same priority with identical criteria but different target
  folders would make routing depend on container order. Rejecting the second
  one keeps the router's choice well defined.

How:
  Keep a list sorted by ``(priority, sequence)`` where ``sequence`` is a
  monotonically increasing insertion counter. Ties at equal priority resolve
  to the earlier insertion regardless of hashing or container internals.

Invariants & Safety:
  - Iteration always yields rules from highest to lowest precedence.
  - :meth:`RuleSet.add` never raises for conflicts; it returns ``False``.
"""
from __future__ import annotations

import bisect
import itertools
from typing import Iterator, List, Optional, Tuple

from .rules import Rule


class RuleSet:
    """Ordered collection of one account's rules."""

    def __init__(self) -> None:
        self._entries: List[Tuple[int, int, Rule]] = []
        self._sequence = itertools.count()

    def __iter__(self) -> Iterator[Rule]:
        return (rule for _, _, rule in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def find_conflict(self, rule: Rule) -> Optional[Rule]:
        """Return an existing rule ``rule`` conflicts with, if any."""

        for existing in self:
            if existing.conflicts_with(rule):
                return existing
        return None

    def add(self, rule: Rule) -> bool:
        """Insert ``rule`` unless it conflicts with an existing rule.

        Returns:
          ``True`` when the rule was inserted, ``False`` for the conflict
          no-op.
        """

        if self.find_conflict(rule) is not None:
            return False
        entry = (rule.priority, next(self._sequence), rule)
        # Sequence numbers are unique, so tuple comparison never reaches the rule.
        bisect.insort(self._entries, entry)
        return True

    def ordered(self) -> Tuple[Rule, ...]:
        return tuple(self)


__all__ = ["RuleSet"]
