"""mailroute.core.folders

What:
  Maintain one account's hierarchical folder namespace: a mapping from
  slash-delimited folder paths to the ordered list of mail stored there.

Why:
  Rule targets and reclassification both address folders by path. Keeping the
  path validation in one place guarantees every folder hangs off the default
  root and that no intermediate level is ever skipped.

How:
  Store a plain ``dict`` keyed by path (insertion ordered, so folder listings
  are stable). Creation validates existence, root segment, empty segments, and
  the immediate parent. Placement appends without validation; callers create
  folders before routing mail into them.

Interfaces:
  :class:`FolderTree`.

Invariants & Safety:
  - The default folder exists from construction and is never removed.
  - Folders are never deleted.
  - Moving mail is remove-then-append and fails before the remove when the
    destination is missing. :meth:`FolderTree.remove` matches by identity so
    equal-looking deliveries are not confused.
"""
from __future__ import annotations

from typing import Dict, Iterator, List

from .errors import FolderAlreadyExists, FolderNotFound, InvalidPath
from .models import Mail

DEFAULT_FOLDER = "/inbox"
FOLDER_SEPARATOR = "/"


class FolderTree:
    """Per-account folder namespace.

    Attributes:
      default_folder: Root folder path receiving mail no rule claims.
      separator: Single-character path delimiter.
    """

    def __init__(self, default_folder: str = DEFAULT_FOLDER, *, separator: str = FOLDER_SEPARATOR) -> None:
        self.default_folder = default_folder
        self.separator = separator
        self._mails: Dict[str, List[Mail]] = {default_folder: []}

    def __contains__(self, path: object) -> bool:
        return path in self._mails

    def __iter__(self) -> Iterator[str]:
        return iter(self._mails)

    def __len__(self) -> int:
        return len(self._mails)

    def exists(self, path: str) -> bool:
        return path in self._mails

    def create_folder(self, path: str) -> None:
        """Create an empty folder at ``path``.

        What:
          Register a new folder below an existing one.

        How:
          Reject existing paths first, then paths whose first segment is not
          the default root, paths with empty segments (``//`` or a trailing
          separator), and paths whose immediate parent is missing.

        Raises:
          FolderAlreadyExists: ``path`` is already present.
          InvalidPath: The path is malformed or skips an intermediate level.
        """

        if path in self._mails:
            raise FolderAlreadyExists(f"Folder {path!r} already exists")
        sep = self.separator
        if not path.startswith(sep):
            raise InvalidPath(f"Folder {path!r} must start with {sep!r}")
        segments = path.split(sep)[1:]
        if sep + segments[0] != self.default_folder:
            raise InvalidPath(f"Folder {path!r} does not start from {self.default_folder!r}")
        if any(not segment for segment in segments):
            raise InvalidPath(f"Folder {path!r} contains an empty segment")
        parent = path.rsplit(sep, 1)[0]
        if parent not in self._mails:
            raise InvalidPath(f"Folder {path!r} is missing intermediate folder {parent!r}")
        self._mails[path] = []

    def mails_in(self, path: str) -> List[Mail]:
        """Return the live mail list stored at ``path``.

        Raises:
          FolderNotFound: ``path`` has not been created.
        """

        try:
            return self._mails[path]
        except KeyError:
            raise FolderNotFound(f"Folder {path!r} does not exist") from None

    def place(self, path: str, mail: Mail) -> None:
        # ``path`` must already exist; a missing folder surfaces as KeyError.
        self._mails[path].append(mail)

    def remove(self, path: str, mail: Mail) -> None:
        """Remove the first occurrence of ``mail`` (by identity) from ``path``."""

        mails = self.mails_in(path)
        for index, candidate in enumerate(mails):
            if candidate is mail:
                del mails[index]
                return
        raise ValueError(f"Mail not present in folder {path!r}")

    def move(self, mail: Mail, source: str, destination: str) -> None:
        if destination not in self._mails:
            raise FolderNotFound(f"Folder {destination!r} does not exist")
        self.remove(source, mail)
        self.place(destination, mail)


__all__ = ["FolderTree", "DEFAULT_FOLDER", "FOLDER_SEPARATOR"]
