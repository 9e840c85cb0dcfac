"""mailroute.store

What:
  Own the accounts of one mail service together with each account's folder
  tree, rule set, and sent log, and route every inbound and outbound mail
  through the :class:`~mailroute.core.engine.Router`.

Why:
  Folder trees and rule sets are per-account state that must change together:
  accepting a rule reclassifies the default folder, and delivery must see a
  consistent rule set. An explicit store object (rather than module globals)
  gives that state a lifecycle and lets tests build isolated services.

How:
  - Accounts are kept in registration order, indexed by name and by address.
  - Every per-account operation runs under that account's re-entrant lock so
    a rule insertion and its reclassification pass cannot interleave with a
    delivery to the same account. Different accounts never contend.
  - Boundary validation (blank text, priority range, folder existence) happens
    here; the core components assume well-formed input.

Interfaces:
  :class:`MailStore`.

Invariants & Safety:
  - The default folder always exists; the sent folder is a separate
    append-only log and is never subject to rules.
  - Adding a rule that conflicts with an existing one is a silent no-op for
    state, reported as a ``False`` return and a WARN log entry.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .config.schema import RuntimeConfig
from .core.engine import Router
from .core.errors import (
    AccountAlreadyExists,
    AccountNotFound,
    FolderNotFound,
    InvalidArgument,
    InvalidPriority,
)
from .core.folders import FolderTree
from .core.metadata import parse_mail_metadata, with_sender
from .core.models import Account, Mail
from .core.rules import Rule
from .core.ruleset import RuleSet
from .utils.logging import JsonLogger, get_logger


def _require_text(value: Optional[str], label: str) -> str:
    if value is None or not value.strip():
        raise InvalidArgument(f"{label} can not be null, empty or blank")
    return value


@dataclass
class _Mailbox:
    """Per-account state guarded by ``lock``."""

    account: Account
    tree: FolderTree
    sent: List[Mail] = field(default_factory=list)
    rules: Optional[RuleSet] = None
    lock: threading.RLock = field(default_factory=threading.RLock)


class MailStore:
    """Account directory and mail store.

    Attributes:
      config: Runtime configuration supplying folder names and the priority
        range.
      logger: Structured logger receiving store events.
      router: Router shared by every account.
    """

    def __init__(self, config: Optional[RuntimeConfig] = None, *, logger: Optional[JsonLogger] = None) -> None:
        self.config = config or RuntimeConfig()
        self.logger = logger or get_logger(
            self.config.logging.component,
            level=self.config.logging.level,
        )
        self.router = Router(self.config.folders.default, logger=self.logger)
        self._mailboxes: Dict[str, _Mailbox] = {}
        self._names_by_email: Dict[str, str] = {}
        self._directory_lock = threading.Lock()

    def __enter__(self) -> "MailStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Drop every account and its mail."""

        with self._directory_lock:
            self._mailboxes.clear()
            self._names_by_email.clear()

    @property
    def default_folder(self) -> str:
        return self.config.folders.default

    @property
    def sent_folder(self) -> str:
        return self.config.folders.sent

    # Account directory -------------------------------------------------

    def add_account(self, name: str, email: str) -> Account:
        """Register a new account with an empty default folder.

        Raises:
          InvalidArgument: ``name`` or ``email`` is blank.
          AccountAlreadyExists: The name or the address is already taken.
        """

        _require_text(name, "Account name")
        _require_text(email, "Email")
        with self._directory_lock:
            if name in self._mailboxes:
                raise AccountAlreadyExists(f"Account {name!r} already exists")
            if email in self._names_by_email:
                raise AccountAlreadyExists(f"Email {email!r} is already registered")
            account = Account(name=name, email=email)
            tree = FolderTree(self.default_folder, separator=self.config.folders.separator)
            self._mailboxes[name] = _Mailbox(account=account, tree=tree)
            self._names_by_email[email] = name
        self.logger.info("account_added", account=name)
        return account

    def accounts(self) -> Tuple[Account, ...]:
        with self._directory_lock:
            return tuple(mailbox.account for mailbox in self._mailboxes.values())

    def account(self, name: str) -> Account:
        return self._mailbox(name).account

    def account_for_email(self, email: str) -> Optional[Account]:
        with self._directory_lock:
            name = self._names_by_email.get(email)
            return self._mailboxes[name].account if name is not None else None

    def _mailbox(self, name: str) -> _Mailbox:
        _require_text(name, "Account name")
        with self._directory_lock:
            try:
                return self._mailboxes[name]
            except KeyError:
                raise AccountNotFound(f"Account {name!r} does not exist") from None

    def _resolve_name(self, email: str) -> Optional[str]:
        account = self.account_for_email(email)
        return account.name if account is not None else None

    # Folders -----------------------------------------------------------

    def create_folder(self, account: str, path: str) -> None:
        """Create ``path`` in the account's folder tree.

        Raises:
          InvalidArgument: ``account`` or ``path`` is blank.
          AccountNotFound: No such account.
          FolderAlreadyExists: ``path`` already exists.
          InvalidPath: ``path`` is outside the default root or skips a level.
        """

        _require_text(path, "Path")
        mailbox = self._mailbox(account)
        with mailbox.lock:
            mailbox.tree.create_folder(path)
        self.logger.info("folder_created", account=account, folder=path)

    def folders(self, account: str) -> Tuple[str, ...]:
        mailbox = self._mailbox(account)
        with mailbox.lock:
            return tuple(mailbox.tree)

    def mails_in(self, account: str, path: str) -> Tuple[Mail, ...]:
        """Return a snapshot of the mail stored at ``path``.

        The sent folder name returns the account's sent log.

        Raises:
          FolderNotFound: ``path`` is neither the sent folder nor in the tree.
        """

        _require_text(path, "Path")
        mailbox = self._mailbox(account)
        with mailbox.lock:
            if path == self.sent_folder:
                return tuple(mailbox.sent)
            return tuple(mailbox.tree.mails_in(path))

    # Rules -------------------------------------------------------------

    def add_rule(self, account: str, folder: str, definition: str, priority: int) -> bool:
        """Parse and register a rule, then reclassify the default folder.

        What:
          Validate the request, compile ``definition`` into a
          :class:`~mailroute.core.rules.Rule`, and insert it into the account's
          rule set.

        Why:
          A new rule applies to mail already waiting in the default folder, so
          acceptance and reclassification happen under the same lock.

        How:
          Check blanks and the configured priority range before touching the
          account, then folder existence, then parse. A conflicting rule
          (same priority and criteria, different folder) is not inserted and no
          reclassification runs.

        Returns:
          ``True`` when the rule was accepted, ``False`` for the conflict
          no-op.

        Raises:
          InvalidArgument: Blank arguments or, in strict mode, unknown
            keywords.
          InvalidPriority: ``priority`` is outside the configured range.
          AccountNotFound: No such account.
          FolderNotFound: ``folder`` does not exist for the account.
          RuleAlreadyDefined: A keyword repeats within ``definition``.
        """

        _require_text(folder, "Path")
        _require_text(definition, "Rule definition")
        settings = self.config.rules
        if not settings.min_priority <= priority <= settings.max_priority:
            raise InvalidPriority(
                f"Priority {priority} is out of range [{settings.min_priority}, {settings.max_priority}]"
            )
        mailbox = self._mailbox(account)
        with mailbox.lock:
            if not mailbox.tree.exists(folder):
                raise FolderNotFound(f"Folder {folder!r} does not exist")
            rule = Rule.parse(
                definition,
                folder=folder,
                priority=priority,
                strict=settings.reject_unknown_keywords,
            )
            if mailbox.rules is None:
                mailbox.rules = RuleSet()
            if not mailbox.rules.add(rule):
                self.logger.warning(
                    "rule_conflict_ignored",
                    account=account,
                    folder=folder,
                    priority=priority,
                )
                return False
            self.logger.info("rule_added", account=account, folder=folder, priority=priority)
            self.router.reclassify(mailbox.tree, mailbox.rules)
        return True

    def rules(self, account: str) -> Tuple[Rule, ...]:
        mailbox = self._mailbox(account)
        with mailbox.lock:
            return mailbox.rules.ordered() if mailbox.rules is not None else ()

    # Mail flow ---------------------------------------------------------

    def route_incoming(self, account: str, mail: Mail) -> str:
        """Return the folder ``mail`` would be filed in, without placing it."""

        mailbox = self._mailbox(account)
        with mailbox.lock:
            return self.router.best_folder_for(mail, mailbox.rules)

    def deliver(self, account: str, mail: Mail) -> str:
        """Route ``mail`` for ``account`` and place it; return the folder."""

        mailbox = self._mailbox(account)
        with mailbox.lock:
            folder = self.router.receive(mailbox.tree, mail, mailbox.rules)
        self.logger.info("mail_received", account=account, folder=folder, subject=mail.subject)
        return folder

    def receive_mail(self, account: str, metadata: str, body: str) -> Mail:
        """Parse raw metadata and deliver the resulting mail to ``account``.

        Raises:
          InvalidArgument: Blank arguments or malformed metadata.
          AccountNotFound: No such account.
        """

        _require_text(metadata, "Mail metadata")
        _require_text(body, "Mail content")
        self._mailbox(account)
        mail = parse_mail_metadata(metadata, body, resolve_name=self._resolve_name)
        self.deliver(account, mail)
        return mail

    def send_mail(self, account: str, metadata: str, body: str) -> Mail:
        """Send mail from ``account`` and deliver it to local recipients.

        What:
          Record the mail in the sender's sent log and deliver a copy to every
          recipient registered in this store.

        How:
          Force the ``sender`` metadata line to the account's own address,
          parse once for the sent log, and parse again per local recipient so
          each delivery is an independent :class:`Mail`. Unknown recipients are
          skipped.

        Returns:
          The mail appended to the sent log.
        """

        _require_text(metadata, "Mail metadata")
        _require_text(body, "Mail content")
        mailbox = self._mailbox(account)
        metadata = with_sender(metadata, mailbox.account.email)
        mail = parse_mail_metadata(metadata, body, resolve_name=self._resolve_name)
        with mailbox.lock:
            mailbox.sent.append(mail)
        self.logger.info(
            "mail_sent",
            account=account,
            recipients=len(mail.recipients),
            subject=mail.subject,
        )
        for address in sorted(mail.recipients):
            recipient = self.account_for_email(address)
            if recipient is None:
                continue
            self.receive_mail(recipient.name, metadata, body)
        return mail


__all__ = ["MailStore"]
