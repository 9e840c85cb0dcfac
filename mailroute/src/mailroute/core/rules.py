"""mailroute.core.rules

What:
  Compile textual rule definitions into structured predicates and evaluate
  them against :class:`~mailroute.core.models.Mail` values.

Why:
  Routing decisions, conflict detection, and reclassification all depend on a
  single, well-defined interpretation of a rule. Parsing once into immutable
  criteria keeps matching cheap and makes two rules comparable by value.

How:
  - :func:`parse_definition` scans the definition line by line, splits each
    line on its first colon into ``keyword`` and values, and splits values on
    commas. Each keyword may appear once; a repeat raises
    :class:`RuleAlreadyDefined`. Unknown keywords are skipped unless strict
    parsing is requested.
  - :class:`RuleCriteria` stores the four optional clauses as frozensets (plus
    the optional sender) and implements the matching contract.
  - :class:`Rule` binds criteria to a target folder and a priority.

Interfaces:
  :class:`RuleCriteria`, :class:`Rule`, :func:`parse_definition`, keyword
  constants.

Invariants & Safety:
  - Matching is case sensitive substring containment on trimmed tokens.
  - ``from`` narrows a match but never qualifies one on its own; a rule with
    no recipient, subject, or subject-or-body clause never matches.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional

from .errors import InvalidArgument, RuleAlreadyDefined
from .models import Mail

SUBJECT_INCLUDES = "subject-includes"
SUBJECT_OR_BODY_INCLUDES = "subject-or-body-includes"
RECIPIENTS_INCLUDES = "recipients-includes"
FROM = "from"

KEYWORDS = (SUBJECT_INCLUDES, SUBJECT_OR_BODY_INCLUDES, RECIPIENTS_INCLUDES, FROM)

_KEYWORD_SEPARATOR = ":"
_TOKEN_SEPARATOR = ","


@dataclass(frozen=True)
class RuleCriteria:
    """Structured predicate compiled from a rule definition.

    Attributes:
      subject_includes: Tokens that must all occur in the subject.
      subject_or_body_includes: Tokens that must each occur in the subject or
        the body.
      recipients_includes: Addresses of which at least one must be a recipient.
      sender: Exact sender address required, or ``None`` when unset.
    """

    subject_includes: FrozenSet[str] = field(default_factory=frozenset)
    subject_or_body_includes: FrozenSet[str] = field(default_factory=frozenset)
    recipients_includes: FrozenSet[str] = field(default_factory=frozenset)
    sender: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (
            self.subject_includes
            or self.subject_or_body_includes
            or self.recipients_includes
            or self.sender is not None
        )

    def matches(self, mail: Mail) -> bool:
        """Evaluate the criteria against ``mail``.

        What:
          Apply the sender, recipients, subject, and subject-or-body clauses in
          that order, short-circuiting on the first failure.

        How:
          Each non-empty clause must hold. ``qualified`` records whether any
          clause other than the sender was checked; without one the result is
          ``False`` even if every present clause held.

        Args:
          mail: Message under evaluation.

        Returns:
          ``True`` when the mail satisfies the rule.
        """

        if self.sender is not None and self.sender != mail.sender.email:
            return False
        qualified = False
        if self.recipients_includes:
            qualified = True
            if self.recipients_includes.isdisjoint(mail.recipients):
                return False
        if self.subject_includes:
            qualified = True
            if not all(token in mail.subject for token in self.subject_includes):
                return False
        if self.subject_or_body_includes:
            qualified = True
            for token in self.subject_or_body_includes:
                if token not in mail.subject and token not in mail.body:
                    return False
        return qualified

    def describe(self) -> Dict[str, Any]:
        return {
            SUBJECT_INCLUDES: sorted(self.subject_includes),
            SUBJECT_OR_BODY_INCLUDES: sorted(self.subject_or_body_includes),
            RECIPIENTS_INCLUDES: sorted(self.recipients_includes),
            FROM: self.sender,
        }


@dataclass(frozen=True)
class Rule:
    """Prioritised predicate mapped to a destination folder.

    Lower ``priority`` values take precedence (``1`` is evaluated first).
    """

    folder: str
    priority: int
    criteria: RuleCriteria = field(default_factory=RuleCriteria)

    @classmethod
    def parse(
        cls,
        definition: str,
        *,
        folder: str,
        priority: int,
        strict: bool = False,
    ) -> "Rule":
        return cls(folder=folder, priority=priority, criteria=parse_definition(definition, strict=strict))

    def matches(self, mail: Mail) -> bool:
        return self.criteria.matches(mail)

    def criteria_equal(self, other: "Rule") -> bool:
        """Return whether ``other`` is equivalent to this rule ignoring folders.

        Two rules are equivalent when their priorities match and every
        criterion clause compares set-equal (an unset sender only equals an
        unset sender).
        """

        return self.priority == other.priority and self.criteria == other.criteria

    def conflicts_with(self, other: "Rule") -> bool:
        return self.folder != other.folder and self.criteria_equal(other)

    def describe(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"folder": self.folder, "priority": self.priority}
        payload.update(self.criteria.describe())
        return payload


def _split_tokens(raw: str) -> Iterable[str]:
    for token in raw.split(_TOKEN_SEPARATOR):
        token = token.strip()
        if token:
            yield token


def parse_definition(definition: str, *, strict: bool = False) -> RuleCriteria:
    """Parse a rule definition into :class:`RuleCriteria`.

    What:
      Read the ``keyword: value, value`` lines of a definition and collect the
      tokens of each recognised keyword.

    Why:
      Definitions arrive as free text from users; a lenient line scanner keeps
      older and newer clients compatible while still catching ambiguous
      definitions that repeat a keyword.

    How:
      Split on line boundaries, skip blank lines and lines without a colon, and
      partition each remaining line on its first colon. Keyword names are
      trimmed; values are split on commas and trimmed with empty tokens
      dropped. ``from`` keeps its first token only.

    Args:
      definition: Raw definition text.
      strict: When ``True`` unknown keywords raise instead of being ignored.

    Returns:
      Immutable criteria; empty when no recognised keyword was present.

    Raises:
      RuleAlreadyDefined: A keyword occurs more than once.
      InvalidArgument: ``strict`` is set and an unknown keyword is present.
    """

    seen: set[str] = set()
    values: Dict[str, FrozenSet[str]] = {}
    sender: Optional[str] = None
    for line in definition.splitlines():
        if _KEYWORD_SEPARATOR not in line:
            continue
        keyword, _, raw_values = line.partition(_KEYWORD_SEPARATOR)
        keyword = keyword.strip()
        if keyword not in KEYWORDS:
            if strict:
                raise InvalidArgument(f"Unknown rule keyword {keyword!r}")
            continue
        if keyword in seen:
            raise RuleAlreadyDefined(f"Rule condition {keyword!r} is defined more than once")
        seen.add(keyword)
        tokens = list(_split_tokens(raw_values))
        if keyword == FROM:
            sender = tokens[0] if tokens else None
        else:
            values[keyword] = frozenset(tokens)
    return RuleCriteria(
        subject_includes=values.get(SUBJECT_INCLUDES, frozenset()),
        subject_or_body_includes=values.get(SUBJECT_OR_BODY_INCLUDES, frozenset()),
        recipients_includes=values.get(RECIPIENTS_INCLUDES, frozenset()),
        sender=sender,
    )


__all__ = [
    "Rule",
    "RuleCriteria",
    "parse_definition",
    "KEYWORDS",
    "SUBJECT_INCLUDES",
    "SUBJECT_OR_BODY_INCLUDES",
    "RECIPIENTS_INCLUDES",
    "FROM",
]
