"""Immutable value objects describing accounts and mail."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class Account:
    """Registered mailbox owner.

    Attributes:
      name: Unique display name used as the directory key.
      email: Unique email address, also used as the ``sender`` of outgoing mail.
    """

    name: str
    email: str


@dataclass(frozen=True, eq=False)
class Mail:
    """A received or sent message.

    Mail compares by identity: two messages with the same fields are still
    distinct deliveries and are never deduplicated.

    Attributes:
      sender: Account that authored the message.
      recipients: Unordered set of recipient email addresses.
      subject: Subject line.
      body: Plain-text content.
      received: Timestamp taken from the metadata (or the delivery time).
    """

    sender: Account
    recipients: FrozenSet[str] = field(default_factory=frozenset)
    subject: str = ""
    body: str = ""
    received: Optional[datetime] = None

    @property
    def sender_email(self) -> str:
        return self.sender.email


__all__ = ["Account", "Mail"]
