"""mailroute configuration package.

What:
  Provide a cohesive import surface for runtime configuration and scenario
  loading.

Interfaces:
  - load_runtime_config / get_runtime_config / reset_runtime_config /
    parse_runtime_config: Resolve and cache ``mailroute.yaml``.
  - load_scenario / parse_scenario: Validate replayable scenario documents.
  - RuntimeConfig / Scenario / ValidationError: Pydantic models and the error
    type raised by their validators.
"""

from .loader import (
    ConfigLoadError,
    ConfigNotFoundError,
    RuntimeConfigError,
    get_runtime_config,
    load_runtime_config,
    load_scenario,
    parse_runtime_config,
    parse_scenario,
    reset_runtime_config,
)
from .schema import RuntimeConfig, Scenario, ValidationError

__all__ = [
    "ConfigLoadError",
    "ConfigNotFoundError",
    "RuntimeConfigError",
    "get_runtime_config",
    "load_runtime_config",
    "load_scenario",
    "parse_runtime_config",
    "parse_scenario",
    "reset_runtime_config",
    "RuntimeConfig",
    "Scenario",
    "ValidationError",
]
