"""mailroute logging helpers with deterministic JSON emission and redaction.

What:
  Offer a tiny facade over Python streams so every mailroute component can
  emit JSON log lines with consistent fields and automatic removal of mail
  content.

Why:
  Routing decisions are easiest to audit by grepping structured lines, but
  subjects and bodies are user content and must not land in logs verbatim.

How:
  Provide a :class:`JsonLogger` dataclass that accepts a target stream, a
  component label, and a minimum level. ``extra`` dictionaries are scrubbed via
  a recursive redaction helper before being serialised with ``json.dump``.

Interfaces:
  :class:`JsonLogger`, :func:`get_logger`.

Invariants & Safety:
  - Every payload includes an ISO8601 timestamp, severity, and component name.
  - ``subject`` and ``body`` keys are replaced with ``[redacted]`` even inside
    nested dictionaries.
  - Streams are flushed after every write.
"""
from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


REDACTED = "[redacted]"
LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}
_SENSITIVE_KEYS = frozenset({"subject", "body"})


@dataclass
class JsonLogger:
    """Structured JSON logger with automatic redaction.

    What:
      Emit single-line JSON entries carrying a timestamp, severity, component
      tag, and optional supplemental fields.

    How:
      Store the destination stream, component label, and threshold level, then
      expose :meth:`debug`, :meth:`info`, :meth:`warning`, and :meth:`error`
      helpers that merge a canonical payload with redacted extras.
    """

    stream: Any = field(default_factory=lambda: sys.stdout)
    component: str = "mailroute"
    level: str = "INFO"

    def enabled_for(self, level: str) -> bool:
        return LEVELS.get(level.upper(), 0) >= LEVELS.get(self.level.upper(), 0)

    def log(self, level: str, message: str, *, extra: Optional[Dict[str, Any]] = None) -> None:
        """Emit a structured JSON log entry.

        Args:
          level: Severity name (``DEBUG``, ``INFO``, ``WARN``, ``ERROR``).
          message: Event name.
          extra: Optional context dictionary, redacted recursively.
        """

        if not self.enabled_for(level):
            return
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "lvl": level.upper(),
            "msg": message,
            "component": self.component,
        }
        if extra:
            payload.update(self._redact(extra))
        json.dump(payload, self.stream, separators=(",", ":"), default=str)
        self.stream.write("\n")
        self.stream.flush()

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log("DEBUG", message, extra=kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log("INFO", message, extra=kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log("WARN", message, extra=kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log("ERROR", message, extra=kwargs)

    @staticmethod
    def _redact(data: Dict[str, Any]) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for key, value in data.items():
            if key in _SENSITIVE_KEYS:
                result[key] = REDACTED
            elif isinstance(value, dict):
                result[key] = JsonLogger._redact(value)
            else:
                result[key] = value
        return result


def get_logger(component: str, *, level: str = "INFO", stream: Any = None) -> JsonLogger:
    """Construct a :class:`JsonLogger` for ``component``.

    Args:
      component: Logical subsystem name included in every payload.
      level: Minimum severity to emit.
      stream: Destination; ``stderr`` when omitted so command output on
        ``stdout`` stays machine readable.
    """

    return JsonLogger(stream=stream if stream is not None else sys.stderr, component=component, level=level)
