"""Reader for the index markdown written by render.py.

Deliberately narrow: only bullet lines are read. Both bullet styles ever
written are accepted, `- [label](link)` (label is the canonical value) and the
older bare `- value`.
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

from .const import FILES_HEADING, REPOS_HEADING, TAGS_HEADING
from .errors import IndexFormatError
from .parser import is_valid_tag_name

LINKED_BULLET_PATTERN = re.compile(r"^\[(?P<label>[^\]]*)\]\((?P<link>.*)\)$")


def bullet_value(item: str) -> Optional[str]:
    """Text after "- " -> canonical value, or None for an empty bullet."""
    item = item.strip(" \t")
    m = LINKED_BULLET_PATTERN.match(item)
    if m:
        item = m.group("label").strip(" \t")
    return item or None


def _section_bullets(text: str, heading: str, require_heading: bool) -> List[str]:
    has_heading = any(ln.strip(" \t\r").startswith(heading) for ln in text.splitlines())
    in_section = not has_heading and not require_heading
    values: List[str] = []
    for raw in text.splitlines():
        line = raw.strip(" \t\r")
        if line.startswith(heading):
            in_section = True
            continue
        if line.startswith("## ") or line.startswith("# "):
            in_section = False
            continue
        if in_section and line.startswith("- "):
            value = bullet_value(line[2:])
            if value is not None:
                values.append(value)
    return values


def _unique(values: List[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


def parse_master_index(text: str) -> List[str]:
    # a hand-edited label must never become a path outside tags/
    values = _section_bullets(text, TAGS_HEADING, require_heading=False)
    return _unique([v for v in values if is_valid_tag_name(v)])


def parse_tag_page(text: str) -> List[str]:
    return _unique(_section_bullets(text, FILES_HEADING, require_heading=True))


def read_index_text(path: Path) -> Optional[str]:
    """File content, or None when it does not exist."""
    try:
        raw = Path(path).read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise IndexFormatError(f"cannot read index file {path}", e) from e
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise IndexFormatError(f"index file is not UTF-8 text: {path}", e) from e


def read_master_index(path: Path) -> List[str]:
    text = read_index_text(path)
    return parse_master_index(text) if text is not None else []


def read_tag_page(path: Path) -> List[str]:
    text = read_index_text(path)
    return parse_tag_page(text) if text is not None else []


def parse_repo_list(text: str) -> List[str]:
    """Repository roots from the `## Repositories` section of the global repo index."""
    return _unique(_section_bullets(text, REPOS_HEADING, require_heading=True))
