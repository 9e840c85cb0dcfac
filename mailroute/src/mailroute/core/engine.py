"""mailroute.core.engine

What:
  Decide which folder a mail belongs in and move already-received default
  folder mail when the rule set grows.

Why:
  Inbound delivery and retroactive reclassification must agree on the same
  first-match-by-priority semantics. Centralising both here keeps the mail
  store free of routing logic and lets tests drive the router directly with a
  :class:`~mailroute.core.folders.FolderTree` and a
  :class:`~mailroute.core.ruleset.RuleSet`.

How:
  - :meth:`Router.best_folder_for` walks the rule set in precedence order and
    returns the first matching rule's folder, or the default folder.
  - :meth:`Router.reclassify` snapshots the default folder, computes the best
    folder for each mail, and moves the ones claimed by a rule while leaving
    the relative order of the remaining mail untouched.
  - :meth:`Router.receive` places a new mail straight into its destination.

Interfaces:
  :class:`Router`, :class:`Move`.

Invariants & Safety:
  - For a fixed rule set and mail the chosen folder is deterministic.
  - Reclassification only ever moves mail out of the default folder; mail in
    rule folders is never re-evaluated.
  - Destination folders are assumed to exist; rules are only accepted for
    existing folders.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from .folders import DEFAULT_FOLDER, FolderTree
from .models import Mail
from .rules import Rule
from ..utils.logging import JsonLogger


@dataclass(frozen=True)
class Move:
    """Record of one reclassified mail.

    Attributes:
      mail: Mail that left the default folder.
      source: Folder the mail was taken from.
      destination: Folder the mail was appended to.
    """

    mail: Mail
    source: str
    destination: str


class Router:
    """Route mail against an account's rules.

    Attributes:
      default_folder: Folder returned when no rule matches.
      logger: Optional structured logger for move events.
    """

    def __init__(self, default_folder: str = DEFAULT_FOLDER, *, logger: Optional[JsonLogger] = None) -> None:
        self.default_folder = default_folder
        self.logger = logger

    def best_folder_for(self, mail: Mail, rules: Optional[Iterable[Rule]]) -> str:
        """Return the destination folder for ``mail``.

        Args:
          mail: Mail to classify.
          rules: Rules in precedence order, or ``None`` when the account has
            none yet.

        Returns:
          The first matching rule's folder, otherwise the default folder.
        """

        if rules is None:
            return self.default_folder
        for rule in rules:
            if rule.matches(mail):
                return rule.folder
        return self.default_folder

    def reclassify(self, tree: FolderTree, rules: Iterable[Rule]) -> List[Move]:
        """Move default folder mail claimed by ``rules`` into rule folders.

        What:
          Re-evaluate every mail currently in the default folder and move those
          whose best folder differs.

        Why:
          Adding a rule should apply to mail that arrived before it, but mail
          that a rule already filed stays where it is.

        How:
          Materialise the rules once, iterate over a snapshot of the default
          folder, and use :meth:`FolderTree.move` (remove then append) for each
          claimed mail. Destinations receive mail in default folder order.

        Args:
          tree: The account's folder tree.
          rules: Rules in precedence order.

        Returns:
          The moves performed, in the order they were applied.
        """

        ordered = list(rules)
        moves: List[Move] = []
        source = self.default_folder
        for mail in list(tree.mails_in(source)):
            destination = self.best_folder_for(mail, ordered)
            if destination == source:
                continue
            tree.move(mail, source, destination)
            moves.append(Move(mail=mail, source=source, destination=destination))
        if moves and self.logger is not None:
            self.logger.info("mail_reclassified", moved=len(moves), source=source)
        return moves

    def receive(self, tree: FolderTree, mail: Mail, rules: Optional[Iterable[Rule]]) -> str:
        """Place a freshly delivered ``mail`` and return the chosen folder."""

        destination = self.best_folder_for(mail, rules)
        tree.place(destination, mail)
        return destination


__all__ = ["Router", "Move"]
