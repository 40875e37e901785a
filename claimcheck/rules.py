"""
Rules — Ordered, Tagged Rule Evaluation

Every rule cascade in claimcheck (claim classification, keyword
signals, explicit fact-check verdicts, the stance pipeline itself)
is an ordered list evaluated by the helpers in this module:

  - first_match:  the first rule whose conditions hold wins
  - any_match:    True if any rule holds
  - count_matches: how many rules hold
  - first_result: the first step of a cascade that returns a value

Rules are deterministic regex checks. A rule fires when its pattern
matches, every pattern in `requires` matches, and no pattern in
`excludes` matches. Order in the list encodes priority.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence


@dataclass(frozen=True)
class Rule:
    """A single tagged detection rule."""
    id: str                                  # e.g., "OPINION_FIRST_PERSON"
    label: str                               # Outcome when the rule fires
    pattern: re.Pattern
    requires: tuple[re.Pattern, ...] = ()    # Must ALL match as well
    excludes: tuple[re.Pattern, ...] = ()    # Must NOT match

    def matches(self, text: str) -> bool:
        if not self.pattern.search(text):
            return False
        if not all(r.search(text) for r in self.requires):
            return False
        return not any(e.search(text) for e in self.excludes)


def rule(
    rule_id: str,
    label: str,
    pattern: str,
    requires: Iterable[str] = (),
    excludes: Iterable[str] = (),
    flags: int = re.IGNORECASE,
) -> Rule:
    """Build a Rule from raw regex strings."""
    return Rule(
        id=rule_id,
        label=label,
        pattern=re.compile(pattern, flags),
        requires=tuple(re.compile(p, flags) for p in requires),
        excludes=tuple(re.compile(p, flags) for p in excludes),
    )


def first_match(rules: Sequence[Rule], text: str) -> Optional[Rule]:
    """Return the first rule that fires on text, or None."""
    for r in rules:
        if r.matches(text):
            return r
    return None


def any_match(rules: Sequence[Rule], text: str) -> bool:
    return first_match(rules, text) is not None


def count_matches(rules: Sequence[Rule], text: str) -> int:
    return sum(1 for r in rules if r.matches(text))


def first_result(
    steps: Sequence[Callable[..., Optional[Any]]],
    *args: Any,
) -> Optional[Any]:
    """
    Run cascade steps in order and return the first non-None result.

    Each step receives the same positional arguments. A step returning
    None defers to the next one.
    """
    for step in steps:
        result = step(*args)
        if result is not None:
            return result
    return None
