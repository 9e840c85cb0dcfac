"""Exception taxonomy shared by the folder tree, rule engine, and mail store.

What:
  Declare the typed failures raised synchronously by every mailroute
  operation.

Why:
  Callers (CLI, tests, embedding services) need to distinguish user input
  mistakes from missing folders or accounts without string matching.

How:
  A single :class:`MailRouteError` base with narrow subclasses. Lookup failures
  also derive from :class:`KeyError` and argument failures from
  :class:`ValueError` so generic handlers keep working.

Invariants & Safety:
  - Conflicting rule insertions are not errors; they never raise from here.
"""
from __future__ import annotations


class MailRouteError(Exception):
    """Base class for all mailroute domain errors."""


class InvalidArgument(MailRouteError, ValueError):
    """A required text field is blank or a payload is malformed."""


class InvalidPriority(InvalidArgument):
    """Rule priority falls outside the configured closed range."""


class InvalidPath(MailRouteError):
    """Folder path is malformed, outside the default root, or skips a level."""


class FolderAlreadyExists(MailRouteError):
    """Folder path is already present in the account's tree."""


class FolderNotFound(MailRouteError, KeyError):
    """Folder path is not present in the account's tree."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class RuleAlreadyDefined(MailRouteError):
    """A criterion keyword appears more than once in one rule definition."""


class AccountAlreadyExists(MailRouteError):
    """Account name or email address is already registered."""


class AccountNotFound(MailRouteError, KeyError):
    """No account is registered under the requested name."""

    def __str__(self) -> str:
        return Exception.__str__(self)


__all__ = [
    "MailRouteError",
    "InvalidArgument",
    "InvalidPriority",
    "InvalidPath",
    "FolderAlreadyExists",
    "FolderNotFound",
    "RuleAlreadyDefined",
    "AccountAlreadyExists",
    "AccountNotFound",
]
