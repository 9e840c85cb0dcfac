"""End-to-end tests asserting CLI commands execute successfully.

What:
  Launch ``mailroute.cli`` through ``python -m`` and validate the
  ``parse-rule`` and ``replay`` commands against fixture files.

Why:
  These tests ensure the entry point wiring and the scenario flow work when
  invoked the same way operators do.

How:
  Construct subprocess invocations with a ``PYTHONPATH`` pointing to the
  in-repo source tree and assert on return codes and JSON stdout.

Interfaces:
  ``test_parse_rule``, ``test_replay_scenario`` and error-path variants.
"""

import json
import os
import pathlib
import subprocess
import sys
from typing import Dict, Optional


PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[2]
DATA_DIR = PROJECT_ROOT / "tests" / "data"


def _run_cli(
    *args: str,
    cwd: Optional[pathlib.Path] = None,
    env_overrides: Optional[Dict[str, Optional[str]]] = None,
) -> subprocess.CompletedProcess[str]:
    """Execute the mailroute CLI with the provided arguments.

    Args:
      *args: Command-line arguments to pass to ``mailroute.cli``.
      cwd: Working directory for the subprocess (defaults to the project root).
      env_overrides: Environment variables to set; ``None`` values unset them.

    Returns:
      Completed subprocess result containing return code and output.
    """

    cmd = [sys.executable, "-m", "mailroute.cli", *args]
    env = dict(os.environ)
    env["PYTHONPATH"] = f"{PROJECT_ROOT / 'mailroute' / 'src'}{os.pathsep}{env.get('PYTHONPATH', '')}"
    for key, value in (env_overrides or {}).items():
        if value is None:
            env.pop(key, None)
        else:
            env[key] = value
    return subprocess.run(cmd, text=True, capture_output=True, cwd=cwd or PROJECT_ROOT, env=env)


def test_parse_rule(tmp_path: pathlib.Path) -> None:
    """Verify ``parse-rule`` prints the compiled criteria as JSON."""

    definition = tmp_path / "rule.txt"
    definition.write_text("subject-includes: MJT\nsubject-or-body-includes: best, course\nfrom: gosho@abv.bg\n")
    result = _run_cli("parse-rule", str(definition), "--folder", "/inbox/documents", "--priority", "3")
    assert result.returncode == 0, result.stderr
    payload = json.loads(result.stdout)
    assert payload["folder"] == "/inbox/documents"
    assert payload["priority"] == 3
    assert payload["subject-includes"] == ["MJT"]
    assert payload["subject-or-body-includes"] == ["best", "course"]
    assert payload["from"] == "gosho@abv.bg"
    assert payload["empty"] is False


def test_parse_rule_repeated_keyword_fails(tmp_path: pathlib.Path) -> None:
    definition = tmp_path / "rule.txt"
    definition.write_text("from: a@x\nfrom: b@x\n")
    result = _run_cli("parse-rule", str(definition))
    assert result.returncode == 1
    assert "more than once" in result.stderr


def test_replay_scenario() -> None:
    """Replay the fixture scenario and check where each mail was filed.

    What:
      Nikolay's rules file the MJT course mail into ``/inbox/documents`` and
      Gosho's exam mail into ``/inbox/documents/important``.
    """

    result = _run_cli("replay", str(DATA_DIR / "scenario.yaml"), "--config", str(DATA_DIR / "config.yaml"))
    assert result.returncode == 0, result.stderr
    summary = json.loads(result.stdout)
    assert summary["Nikolay"] == {
        "/inbox": ["Lunch?"],
        "/inbox/documents": ["Hello, MJT!"],
        "/inbox/documents/important": ["MJT exam results"],
        "/sent": [],
    }
    assert summary["Gosho"] == {"/inbox": [], "/sent": ["MJT exam results"]}


def test_replay_reports_domain_errors(tmp_path: pathlib.Path) -> None:
    scenario = tmp_path / "scenario.yaml"
    scenario.write_text(
        "accounts:\n"
        "  - name: Ivan\n"
        "    email: ivan@abv.bg\n"
        "    folders: [/inbox/a/b]\n"
    )
    result = _run_cli("replay", str(scenario))
    assert result.returncode == 1
    assert "missing intermediate folder" in result.stderr


def test_replay_rejects_invalid_scenario(tmp_path: pathlib.Path) -> None:
    scenario = tmp_path / "scenario.yaml"
    scenario.write_text("accounts:\n  - name: Ivan\n")
    result = _run_cli("replay", str(scenario))
    assert result.returncode == 1
    assert "Invalid scenario" in result.stderr


def _write_priority_scenario(path: pathlib.Path, priority: int) -> pathlib.Path:
    path.write_text(
        "accounts:\n"
        "  - name: Ivan\n"
        "    email: ivan@abv.bg\n"
        "    folders: [/inbox/news]\n"
        "    rules:\n"
        "      - folder: /inbox/news\n"
        f"        priority: {priority}\n"
        "        definition: 'subject-includes: news'\n"
    )
    return path


def test_replay_applies_config_from_environment(tmp_path: pathlib.Path) -> None:
    """The ``MAILROUTE_CONFIG_PATH`` file narrows the accepted priority range."""

    config = tmp_path / "narrow.yaml"
    config.write_text("rules:\n  max_priority: 5\n")
    scenario = _write_priority_scenario(tmp_path / "scenario.yaml", 7)
    result = _run_cli("replay", str(scenario), env_overrides={"MAILROUTE_CONFIG_PATH": str(config)})
    assert result.returncode == 1
    assert "out of range" in result.stderr


def test_replay_discovers_config_in_working_directory(tmp_path: pathlib.Path) -> None:
    (tmp_path / "mailroute.yaml").write_text("folders:\n  sent: /outbox\n")
    scenario = _write_priority_scenario(tmp_path / "scenario.yaml", 3)
    result = _run_cli("replay", str(scenario), cwd=tmp_path, env_overrides={"MAILROUTE_CONFIG_PATH": None})
    assert result.returncode == 0, result.stderr
    assert json.loads(result.stdout)["Ivan"] == {"/inbox": [], "/inbox/news": [], "/outbox": []}


def test_replay_rejects_invalid_discovered_config(tmp_path: pathlib.Path) -> None:
    config = tmp_path / "broken.yaml"
    config.write_text("unknown_section: {}\n")
    scenario = _write_priority_scenario(tmp_path / "scenario.yaml", 3)
    result = _run_cli("replay", str(scenario), env_overrides={"MAILROUTE_CONFIG_PATH": str(config)})
    assert result.returncode == 1
    assert "Invalid runtime configuration" in result.stderr
