"""Line scanner turning ``key: value`` mail metadata into :class:`Mail`.

Supported keys are ``sender``, ``subject``, ``recipients`` (comma separated),
and ``received`` (``YYYY-MM-DD HH:MM``, read as UTC). Unknown keys are
ignored. Every parsed timestamp is timezone-aware.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from .errors import InvalidArgument
from .models import Account, Mail

SENDER = "sender"
SUBJECT = "subject"
RECIPIENTS = "recipients"
RECEIVED = "received"

RECEIVED_FORMAT = "%Y-%m-%d %H:%M"


def _scan(metadata: str) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    for line in metadata.strip().splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        fields[key.strip().lower()] = value.strip()
    return fields


def parse_mail_metadata(
    metadata: str,
    body: str,
    *,
    resolve_name: Optional[Callable[[str], Optional[str]]] = None,
    now: Optional[datetime] = None,
) -> Mail:
    """Build a :class:`Mail` from metadata text and a body.

    Args:
      metadata: ``key: value`` lines.
      body: Mail content.
      resolve_name: Maps a sender address to a display name; the address is
        used when it returns ``None`` or is omitted.
      now: Timestamp used when ``received`` is absent (defaults to UTC now).

    Raises:
      InvalidArgument: The sender is missing or ``received`` is malformed.
    """

    fields = _scan(metadata)
    sender_email = fields.get(SENDER, "")
    if not sender_email:
        raise InvalidArgument("Mail metadata has no sender")
    name = resolve_name(sender_email) if resolve_name is not None else None
    recipients = frozenset(
        address.strip() for address in fields.get(RECIPIENTS, "").split(",") if address.strip()
    )
    raw_received = fields.get(RECEIVED)
    if raw_received:
        try:
            received = datetime.strptime(raw_received, RECEIVED_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError as exc:
            raise InvalidArgument(f"Invalid received timestamp {raw_received!r}") from exc
    else:
        received = now or datetime.now(timezone.utc)
    return Mail(
        sender=Account(name=name or sender_email, email=sender_email),
        recipients=recipients,
        subject=fields.get(SUBJECT, ""),
        body=body,
        received=received,
    )


def with_sender(metadata: str, email: str) -> str:
    """Return ``metadata`` with its sender line forced to ``email``."""

    lines = metadata.strip().splitlines()
    replaced = False
    for index, line in enumerate(lines):
        key, sep, _ = line.partition(":")
        if sep and key.strip().lower() == SENDER:
            lines[index] = f"{SENDER}: {email}"
            replaced = True
    if not replaced:
        lines.append(f"{SENDER}: {email}")
    return "\n".join(lines)


__all__ = ["parse_mail_metadata", "with_sender", "RECEIVED_FORMAT"]
