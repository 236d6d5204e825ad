from __future__ import annotations

import fnmatch
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional

from .const import ART_PREFIX


def ensure_dir(p: Path) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)


def read_bytes_or_none(path: Path) -> Optional[bytes]:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None


def atomic_write_text(path: Path, text: str) -> None:
    ensure_dir(path)
    # temp file in the target directory so os.replace never crosses devices
    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def write_text_if_changed(path: Path, text: str) -> str:
    """Write `text` only when the on-disk bytes differ.

    Returns "created", "updated" or "unchanged".
    """
    new_bytes = text.encode("utf-8")
    old_bytes = read_bytes_or_none(path)
    if old_bytes == new_bytes:
        return "unchanged"
    atomic_write_text(path, text)
    return "created" if old_bytes is None else "updated"


def strip_art_prefix(ref: str) -> str:
    if ref.startswith(ART_PREFIX) or ref.startswith("art\\"):
        return ref[len(ART_PREFIX):]
    return ref


def to_posix(rel: str) -> str:
    return rel.replace(os.sep, "/") if os.sep != "/" else rel


def match_glob(name: str, pattern: str) -> bool:
    # *.ext, prefix* and exact names are the documented forms
    if pattern.startswith("*."):
        return name.endswith(pattern[1:])
    if pattern.endswith("*") and not any(c in pattern[:-1] for c in "*?["):
        return name.startswith(pattern[:-1])
    if name == pattern:
        return True
    return fnmatch.fnmatchcase(name, pattern)


def is_ignored(name: str, patterns: Iterable[str]) -> bool:
    return any(match_glob(name, p) for p in patterns)


def canonicalize_path(path: str | Path) -> str:
    """Absolute path with `.`/`..` resolved and symlinks followed where possible."""
    return os.path.realpath(os.path.abspath(os.fspath(path)))


def is_under(path: str, root: str) -> bool:
    root = root.rstrip("/") or "/"
    if root == "/":
        return path.startswith("/")
    return path == root or path.startswith(root + "/")
