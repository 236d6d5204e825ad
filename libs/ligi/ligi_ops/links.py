from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Tuple

from .const import DEFAULT_IGNORE_PATTERNS, INDEX_DIR, TAG_CLOSE, TAG_OPEN, UTF8_BOM
from .indexer import iter_documents
from .parser import is_valid_tag_name, iter_tag_tokens, require_valid_tag_name
from .render import tag_page_relpath
from .types import FillResult
from .utils import atomic_write_text, strip_art_prefix

logger = logging.getLogger(__name__)


def tag_link_target(tag: str, file_in_art: str) -> str:
    """Relative link from a document at `file_in_art` to the tag's page."""
    depth = strip_art_prefix(file_in_art.replace("\\", "/")).count("/")
    return "../" * depth + f"{INDEX_DIR}/{tag_page_relpath(tag)}"


def fill_tag_links(content: str, file_in_art: str) -> FillResult:
    """Append `(link)` to every bare valid tag token in normal text.

    Tokens already followed by `(` are left alone, so a second pass is a no-op.
    When nothing changes the input string is returned as is.
    """
    pieces: List[str] = []
    last = 0
    filled = 0
    for token in iter_tag_tokens(content):
        if not is_valid_tag_name(token.name):
            continue
        if content.startswith("(", token.end):
            continue
        pieces.append(content[last:token.end])
        pieces.append(f"({tag_link_target(token.name, file_in_art)})")
        last = token.end
        filled += 1
    if not filled:
        return FillResult(content=content, filled=0)
    pieces.append(content[last:])
    return FillResult(content="".join(pieces), filled=filled)


def _read_document(path: Path) -> str | None:
    try:
        return path.read_bytes().decode("utf-8")
    except OSError as e:
        logger.warning("cannot read file: %s (%s)", path, e)
    except UnicodeDecodeError:
        logger.warning("skipping non UTF-8 file: %s", path)
    return None


def fill_tag_links_in_file(art_path: str | Path, file_in_art: str) -> int:
    """Fill tag links in one document; the file is rewritten only if something changed."""
    file_in_art = strip_art_prefix(file_in_art)
    path = Path(art_path) / file_in_art
    content = _read_document(path)
    if content is None:
        return 0
    result = fill_tag_links(content, file_in_art)
    if result.filled:
        atomic_write_text(path, result.content)
        logger.debug("filled %d tag link(s) in %s", result.filled, path)
    return result.filled


def fill_all_tag_links(
    art_path: str | Path,
    follow_symlinks: bool = False,
    ignore_patterns: Iterable[str] = DEFAULT_IGNORE_PATTERNS,
) -> int:
    total = 0
    for rel in iter_documents(art_path, follow_symlinks, ignore_patterns):
        total += fill_tag_links_in_file(art_path, rel)
    return total


def insert_tags(content: str, tags: Iterable[str]) -> Tuple[str, int]:
    """Add missing `[[t/x]]` tokens on one line after the first heading (or at the top).

    Raises InvalidTagNameError before touching anything if a name is invalid.
    """
    names = [require_valid_tag_name(t.strip(" \t")) for t in tags if t.strip(" \t")]
    new_tags: List[str] = []
    for name in names:
        if f"{TAG_OPEN}{name}{TAG_CLOSE}" not in content and name not in new_tags:
            new_tags.append(name)
    if not new_tags:
        return content, 0

    tags_line = " ".join(f"{TAG_OPEN}{name}{TAG_CLOSE}" for name in new_tags) + "\n"

    insert_pos = 1 if content.startswith(UTF8_BOM) else 0
    found_heading = False
    offset = 0
    for line in content.splitlines(keepends=True):
        if line.lstrip(" \t" + UTF8_BOM).startswith("#"):
            insert_pos = offset + len(line)
            found_heading = True
            break
        offset += len(line)

    head, tail = content[:insert_pos], content[insert_pos:]
    if found_heading and head and not head.endswith("\n"):
        head += "\n"
    if tail and not tail.startswith("\n"):
        tags_line += "\n"
    return head + tags_line + tail, len(new_tags)


def parse_tag_list(tags_arg: str) -> List[str]:
    """Comma separated tag names, blanks dropped."""
    return [t.strip(" \t") for t in tags_arg.split(",") if t.strip(" \t")]


def insert_tags_into_file(path: str | Path, tags: Iterable[str]) -> int:
    path = Path(path)
    content = path.read_bytes().decode("utf-8")
    new_content, added = insert_tags(content, tags)
    if added:
        atomic_write_text(path, new_content)
    return added
