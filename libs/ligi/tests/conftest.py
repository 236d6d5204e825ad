"""Shared fixtures for all test modules."""
from pathlib import Path

import pytest

from ligi_ops.utils import canonicalize_path


@pytest.fixture(autouse=True)
def _isolated_ligi_env(tmp_path, monkeypatch):
    """Point the global home at a temp dir so no test touches ~/.ligi."""
    monkeypatch.setenv("LIGI_HOME", str(tmp_path / "home" / ".ligi"))
    monkeypatch.delenv("LIGI_IGNORE_PATTERNS", raising=False)
    monkeypatch.delenv("LIGI_FOLLOW_SYMLINKS", raising=False)


def write_doc(root: Path, rel: str, text: str) -> Path:
    """Write `text` to root/rel, creating parent directories."""
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(text.encode("utf-8"))
    return path


def make_repo(base: Path, name: str) -> Path:
    root = Path(canonicalize_path(base / name))
    (root / "art").mkdir(parents=True)
    return root


@pytest.fixture
def repo(tmp_path):
    """A repository root with an empty art/ directory (canonical path)."""
    return make_repo(tmp_path, "repo")


@pytest.fixture
def art(repo):
    return repo / "art"


@pytest.fixture
def global_art(tmp_path):
    return Path(canonicalize_path(tmp_path)) / "home" / ".ligi" / "art"
