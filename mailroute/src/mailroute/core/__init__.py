"""Aggregated exports for mailroute's routing core.

What:
  Provide a light-weight package facade exposing the folder tree, rule,
  rule set, router, and model primitives.

How:
  Defines ``__all__`` explicitly and implements ``__getattr__`` to import the
  owning submodule on first attribute access.

Invariants & Safety:
  - ``__getattr__`` only exposes names from ``__all__``; anything else raises
    :class:`AttributeError`.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "Account",
    "Mail",
    "FolderTree",
    "Rule",
    "RuleCriteria",
    "parse_definition",
    "RuleSet",
    "Router",
    "Move",
    "parse_mail_metadata",
]

_OWNERS = {
    "Account": "models",
    "Mail": "models",
    "FolderTree": "folders",
    "Rule": "rules",
    "RuleCriteria": "rules",
    "parse_definition": "rules",
    "RuleSet": "ruleset",
    "Router": "engine",
    "Move": "engine",
    "parse_mail_metadata": "metadata",
}


def __getattr__(name: str) -> Any:
    """Resolve ``name`` lazily from the submodule that owns it.

    Raises:
      AttributeError: If ``name`` is not part of the public surface.
    """

    owner = _OWNERS.get(name)
    if owner is None:
        raise AttributeError(name)
    from importlib import import_module

    module = import_module(f"{__name__}.{owner}")
    return getattr(module, name)
