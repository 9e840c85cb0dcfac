"""Fixtures building accounts, mail, and stores for unit tests.

Interfaces:
  :func:`make_mail`, :func:`log_stream`, :func:`store` (pytest fixtures).
"""

import io
from datetime import datetime, timezone

import pytest

from mailroute.config.schema import RuntimeConfig
from mailroute.core.models import Account, Mail
from mailroute.store import MailStore
from mailroute.utils.logging import JsonLogger


@pytest.fixture
def make_mail():
    """Return a factory building :class:`Mail` values with sensible defaults."""

    def _make(
        sender="niki@abv.bg",
        recipients=("ivan@abv.bg", "stoyo@gmail.com"),
        subject="football world cup final",
        body="Everyone is watching the final today",
    ):
        return Mail(
            sender=Account(name=sender.split("@")[0], email=sender),
            recipients=frozenset(recipients),
            subject=subject,
            body=body,
            received=datetime(2022, 12, 8, 14, 14, tzinfo=timezone.utc),
        )

    return _make


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def store(log_stream):
    """Yield a store with the accounts ``Nikolay`` and ``Gosho`` registered."""

    logger = JsonLogger(stream=log_stream, component="mailroute-tests", level="DEBUG")
    with MailStore(RuntimeConfig(), logger=logger) as mail_store:
        mail_store.add_account("Nikolay", "niki@abv.bg")
        mail_store.add_account("Gosho", "gosho@abv.bg")
        yield mail_store
