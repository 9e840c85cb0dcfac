"""mailroute command-line interface.

What:
  Provide a Typer-based entry point with two commands: ``parse-rule`` prints a
  compiled rule definition and ``replay`` runs a scenario document through a
  fresh :class:`~mailroute.store.MailStore` and prints where every mail ended
  up.

Why:
  Operators writing rules want to see how a definition is interpreted and
  which folder a batch of mail lands in before deploying the rules to a live
  service.

How:
  Load the runtime configuration from ``--config`` or, failing that, the
  discovery chain of :func:`~mailroute.config.loader.load_runtime_config`.
  Build the store, apply each scenario account's folders, rules, inbox, and
  outbox in that order, and dump a JSON summary to stdout. Log lines go to stderr.

Interfaces:
  ``app`` (Typer application), ``parse_rule``, ``replay``.

Invariants & Safety:
  - Exit codes follow shell expectations (``0`` success, ``1`` failure).
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from .config.loader import ConfigLoadError, ConfigNotFoundError, load_runtime_config, load_scenario
from .config.schema import RuntimeConfig, Scenario
from .core.errors import MailRouteError
from .core.rules import Rule
from .store import MailStore
from .utils.logging import get_logger


app = typer.Typer(help="mailroute rule engine tools")


def _resolve_config(config_path: Optional[Path]) -> RuntimeConfig:
    """Return the explicit configuration or the first discovered file.

    Built-in defaults apply only when no candidate file exists; a file that is
    present but invalid still fails the command.
    """

    if config_path is not None:
        return load_runtime_config(config_path, reload=True)
    try:
        return load_runtime_config()
    except ConfigNotFoundError:
        return RuntimeConfig()


def apply_scenario(store: MailStore, scenario: Scenario) -> None:
    """Register every scenario account, then replay its folders, rules, and mail.

    Accounts are all registered first so that outbox mail can reach accounts
    listed later in the document.
    """

    for entry in scenario.accounts:
        store.add_account(entry.name, entry.email)
    for entry in scenario.accounts:
        for folder in entry.folders:
            store.create_folder(entry.name, folder)
        for rule in entry.rules:
            store.add_rule(entry.name, rule.folder, rule.definition, rule.priority)
        for mail in entry.inbox:
            store.receive_mail(entry.name, mail.metadata, mail.body)
        for mail in entry.outbox:
            store.send_mail(entry.name, mail.metadata, mail.body)


def summarise(store: MailStore) -> Dict[str, Dict[str, List[str]]]:
    summary: Dict[str, Dict[str, List[str]]] = {}
    for account in store.accounts():
        folders: Dict[str, List[str]] = {}
        for folder in (*store.folders(account.name), store.sent_folder):
            folders[folder] = [mail.subject for mail in store.mails_in(account.name, folder)]
        summary[account.name] = folders
    return summary


@app.command("parse-rule")
def parse_rule(
    definition_file: Path = typer.Argument(..., help="File containing the rule definition"),
    folder: str = typer.Option("/inbox", help="Target folder recorded on the rule"),
    priority: int = typer.Option(1, help="Rule priority (1 is evaluated first)"),
    strict: bool = typer.Option(False, help="Reject unknown keywords"),
) -> None:
    """Print the parsed form of a rule definition as JSON."""

    try:
        definition = definition_file.read_text()
        rule = Rule.parse(definition, folder=folder, priority=priority, strict=strict)
    except (OSError, MailRouteError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    payload: Dict[str, Any] = rule.describe()
    payload["empty"] = rule.criteria.is_empty
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))


@app.command("replay")
def replay(
    scenario_file: Path = typer.Argument(..., help="Scenario YAML document"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Runtime configuration file"),
) -> None:
    """Replay a scenario and print the resulting folder contents as JSON."""

    try:
        config = _resolve_config(config_path)
        scenario = load_scenario(scenario_file)
    except ConfigLoadError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    logger = get_logger(config.logging.component, level=config.logging.level)
    with MailStore(config, logger=logger) as store:
        try:
            apply_scenario(store, scenario)
        except MailRouteError as exc:
            logger.error("replay_failed", error=str(exc), kind=type(exc).__name__)
            typer.echo(f"error: {exc}", err=True)
            raise typer.Exit(code=1) from exc
        summary = summarise(store)
    typer.echo(json.dumps(summary, indent=2))


def main() -> None:  # pragma: no cover - console script entry point
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
