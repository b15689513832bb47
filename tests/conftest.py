import os

import pytest


@pytest.fixture
def etc_tree(tmp_path):
    """A small configuration tree with one nested sshd_config."""

    root = tmp_path / "etc"
    (root / "ssh").mkdir(parents=True)
    (root / "ssh" / "sshd_config").write_text(
        "# comment\n"
        "PermitRootLogin no\n"
        "Port 22\n"
        "PermitRootLogin yes\n",
        encoding="utf-8",
    )
    (root / "hosts").write_text("127.0.0.1 localhost\n", encoding="utf-8")
    return root


@pytest.fixture
def deny_directory(monkeypatch):
    """Make ``os.scandir`` raise PermissionError for the given directories."""

    real_scandir = os.scandir
    denied = set()

    def fake_scandir(path="."):
        if isinstance(path, (str, os.PathLike)) and os.path.abspath(path) in denied:
            raise PermissionError(13, "Permission denied", path)
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", fake_scandir)

    def deny(path):
        denied.add(os.path.abspath(str(path)))

    return deny
