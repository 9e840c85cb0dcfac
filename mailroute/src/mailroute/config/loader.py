"""Strict loaders for mailroute configuration and scenario documents.

What:
  Locate, parse, and validate the runtime configuration (``mailroute.yaml``)
  and scenario documents replayed by the CLI.

Why:
  Configuration lives outside the package and can be malformed. Centralising
  the parsing enforces consistent validation so that the mail store and CLI can
  trust the resulting models.

How:
  Resolve candidate file locations based on explicit parameters, the
  ``MAILROUTE_CONFIG_PATH`` environment variable, and defaults. Parse YAML with
  :func:`yaml.safe_load`, validate with Pydantic models, and cache the runtime
  configuration until :func:`reset_runtime_config` is called.

Interfaces:
  - :func:`load_runtime_config` / :func:`get_runtime_config` /
    :func:`reset_runtime_config` / :func:`parse_runtime_config`.
  - :func:`load_scenario` / :func:`parse_scenario`.

Invariants:
  - All external payloads pass strict Pydantic validation before they are
    returned to callers.
  - The runtime cache respects explicit reload requests and the precedence
    order of candidate paths.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple

import yaml
from pydantic import ValidationError as _PydanticValidationError

from .schema import RuntimeConfig, Scenario


class ConfigLoadError(Exception):
    """Base error for configuration parsing or validation failures."""


class RuntimeConfigError(ConfigLoadError):
    """Error raised when ``mailroute.yaml`` cannot be loaded or validated."""


class ConfigNotFoundError(RuntimeConfigError):
    """Error raised when no candidate configuration file exists."""


_CONFIG_ENV = "MAILROUTE_CONFIG_PATH"
_DEFAULT_LOCATIONS: Tuple[Path, ...] = (
    Path("mailroute.yaml"),
    Path("/etc/mailroute/config.yaml"),
)
_RUNTIME_CACHE: Optional[Tuple[Path, RuntimeConfig]] = None


def _candidate_paths(path: Optional[Path]) -> Iterable[Path]:
    """Yield configuration file locations in priority order.

    What:
      Produce the explicit argument, the ``MAILROUTE_CONFIG_PATH`` override,
      and the default locations, deduplicated and ``~``-expanded.

    Args:
      path: Explicit path requested by the caller, or ``None``.

    Yields:
      Candidate paths ordered from most specific to least specific.
    """

    seen: set[Path] = set()
    explicit = [path] if path is not None else []
    env_path = os.environ.get(_CONFIG_ENV)
    env = [Path(env_path)] if env_path else []
    for raw in (*explicit, *env, *_DEFAULT_LOCATIONS):
        candidate = raw.expanduser()
        if candidate not in seen:
            seen.add(candidate)
            yield candidate


def _parse_mapping(text: str, source: str, error: type[ConfigLoadError]) -> dict[str, Any]:
    try:
        payload = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise error(f"Invalid YAML in {source}: {exc}") from exc
    if not isinstance(payload, dict):
        raise error(f"{source} must contain a mapping at the top-level")
    return payload


def parse_runtime_config(text: str, *, source: str = "<string>") -> RuntimeConfig:
    """Validate runtime configuration YAML ``text``.

    Raises:
      RuntimeConfigError: If the YAML is invalid or fails schema validation.
    """

    payload = _parse_mapping(text, source, RuntimeConfigError)
    try:
        return RuntimeConfig.model_validate(payload)
    except _PydanticValidationError as exc:
        raise RuntimeConfigError(f"Invalid runtime configuration in {source}: {exc}") from exc


def _load_runtime_from_path(path: Path) -> RuntimeConfig:
    try:
        text = path.read_text()
    except FileNotFoundError as exc:
        raise RuntimeConfigError(f"Configuration file missing: {path}") from exc
    except OSError as exc:  # pragma: no cover - filesystem surface
        raise RuntimeConfigError(f"Unable to read configuration file {path}: {exc}") from exc
    return parse_runtime_config(text, source=str(path))


def load_runtime_config(
    path: Optional[Path | str] = None,
    *,
    reload: bool = False,
) -> RuntimeConfig:
    """Resolve, parse, and cache the runtime configuration.

    What:
      Locate ``mailroute.yaml`` using the precedence chain, parse it, and
      return a validated :class:`RuntimeConfig`.

    How:
      Consult the cache unless ``reload`` is requested or a different explicit
      path is given, then try each candidate path until one exists.

    Args:
      path: Optional explicit location of the configuration file.
      reload: When ``True`` forces a fresh load bypassing the cache.

    Returns:
      The validated runtime configuration.

    Raises:
      ConfigNotFoundError: If no candidate file exists.
      RuntimeConfigError: If the located file is invalid.
    """

    global _RUNTIME_CACHE

    requested_path = Path(path).expanduser() if isinstance(path, (str, Path)) else None
    if not reload and _RUNTIME_CACHE is not None:
        cached_path, cached_config = _RUNTIME_CACHE
        if requested_path is None or cached_path == requested_path:
            return cached_config

    searched: list[str] = []
    for candidate in _candidate_paths(requested_path):
        if not candidate.exists():
            searched.append(str(candidate))
            continue
        config = _load_runtime_from_path(candidate)
        _RUNTIME_CACHE = (candidate, config)
        return config

    raise ConfigNotFoundError(f"Unable to locate mailroute.yaml (searched: {', '.join(searched)})")


def get_runtime_config() -> RuntimeConfig:
    """Return the cached runtime configuration, loading it on demand."""

    return load_runtime_config()


def reset_runtime_config() -> None:
    """Forget the cached runtime configuration."""

    global _RUNTIME_CACHE
    _RUNTIME_CACHE = None


def parse_scenario(text: str, *, source: str = "<string>") -> Scenario:
    """Validate scenario YAML ``text``.

    Raises:
      ConfigLoadError: If the YAML is invalid or fails schema validation.
    """

    payload = _parse_mapping(text, source, ConfigLoadError)
    try:
        return Scenario.model_validate(payload)
    except _PydanticValidationError as exc:
        raise ConfigLoadError(f"Invalid scenario in {source}: {exc}") from exc


def load_scenario(path: Path | str) -> Scenario:
    """Read and validate the scenario document stored at ``path``."""

    scenario_path = Path(path).expanduser()
    try:
        text = scenario_path.read_text()
    except OSError as exc:
        raise ConfigLoadError(f"Unable to read scenario {scenario_path}: {exc}") from exc
    return parse_scenario(text, source=str(scenario_path))


__all__ = [
    "ConfigLoadError",
    "RuntimeConfigError",
    "ConfigNotFoundError",
    "parse_runtime_config",
    "load_runtime_config",
    "get_runtime_config",
    "reset_runtime_config",
    "parse_scenario",
    "load_scenario",
]
