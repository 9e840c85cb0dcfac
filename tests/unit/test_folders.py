"""
Module: tests/unit/test_folders.py

What:
    Exercise folder creation rules, lookups, and mail placement on a single
    account's :class:`FolderTree`.

Invariants & Safety Rules:
    - Folders only exist below the default root and never skip a level.
    - Moving mail removes it from the source before appending to the target.
"""

import pytest

from mailroute.core.errors import FolderAlreadyExists, FolderNotFound, InvalidPath
from mailroute.core.folders import FolderTree


def test_new_tree_only_has_default_folder():
    tree = FolderTree()
    assert list(tree) == ["/inbox"]
    assert tree.exists("/inbox")
    assert tree.mails_in("/inbox") == []


@pytest.mark.parametrize("path", ["/inbox/a", "/inbox/documents", "/inbox/x-y_z"])
def test_create_then_exists(path):
    """
    What:
        A freshly created folder is visible immediately and cannot be created
        twice.
    """
    tree = FolderTree()
    tree.create_folder(path)
    assert tree.exists(path)
    with pytest.raises(FolderAlreadyExists):
        tree.create_folder(path)


def test_default_folder_cannot_be_recreated():
    with pytest.raises(FolderAlreadyExists):
        FolderTree().create_folder("/inbox")


@pytest.mark.parametrize(
    "path",
    ["/other/x", "/important/documents", "inbox/a", "/inboxes/a", "/", "/inbox//a", "/inbox/a/"],
)
def test_invalid_paths_rejected(path):
    tree = FolderTree()
    tree.create_folder("/inbox/a")
    with pytest.raises(InvalidPath):
        tree.create_folder(path)


def test_missing_intermediate_folder_rejected():
    """
    What:
        ``/inbox/a/b`` requires ``/inbox/a`` to exist first.
    """
    tree = FolderTree()
    with pytest.raises(InvalidPath):
        tree.create_folder("/inbox/a/b")
    tree.create_folder("/inbox/a")
    tree.create_folder("/inbox/a/b")
    assert tree.exists("/inbox/a/b")


def test_mails_in_unknown_folder_raises():
    with pytest.raises(FolderNotFound):
        FolderTree().mails_in("/inbox/missing")


def test_place_appends_in_order(make_mail):
    tree = FolderTree()
    first, second = make_mail(subject="one"), make_mail(subject="two")
    tree.place("/inbox", first)
    tree.place("/inbox", second)
    assert tree.mails_in("/inbox") == [first, second]


def test_move_is_remove_then_append(make_mail):
    tree = FolderTree()
    tree.create_folder("/inbox/a")
    mail = make_mail()
    tree.place("/inbox", mail)
    tree.move(mail, "/inbox", "/inbox/a")
    assert tree.mails_in("/inbox") == []
    assert tree.mails_in("/inbox/a") == [mail]


def test_move_to_missing_folder_keeps_mail_in_source(make_mail):
    tree = FolderTree()
    mail = make_mail()
    tree.place("/inbox", mail)
    with pytest.raises(FolderNotFound):
        tree.move(mail, "/inbox", "/inbox/missing")
    assert tree.mails_in("/inbox") == [mail]


def test_remove_matches_identity_not_equal_fields(make_mail):
    tree = FolderTree()
    first, twin = make_mail(), make_mail()
    tree.place("/inbox", first)
    tree.place("/inbox", twin)
    tree.remove("/inbox", twin)
    assert tree.mails_in("/inbox") == [first]
    assert tree.mails_in("/inbox")[0] is first


def test_custom_default_folder():
    tree = FolderTree("/mail")
    tree.create_folder("/mail/work")
    with pytest.raises(InvalidPath):
        tree.create_folder("/inbox/work")
