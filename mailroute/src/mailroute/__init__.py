"""
Module: mailroute.__init__

What:
  Aggregate package exports for the mailroute account service: a per-account
  folder tree, a priority-ordered rule engine that files incoming mail, and
  the mail store that ties accounts, folders, and rules together.

Interfaces:
  - config: Runtime configuration and scenario schemas and loaders.
  - core: Folder tree, rules, rule sets, router, models, and errors.
  - store: The :class:`~mailroute.store.MailStore` account directory.
  - utils: Structured logging helpers.
"""

__all__ = [
    "config",
    "core",
    "store",
    "utils",
]
