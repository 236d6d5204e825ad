from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .const import ART_PREFIX, DEFAULT_IGNORE_PATTERNS, INDEX_DIR, MD_SUFFIX, TAG_INDEX_FILE
from .parser import parse_tags
from .reader import read_master_index, read_tag_page
from .render import tag_page_relpath
from .tagmap import TagMap
from .utils import is_ignored, strip_art_prefix, to_posix

logger = logging.getLogger(__name__)


def iter_documents(
    art_path: str | Path,
    follow_symlinks: bool = False,
    ignore_patterns: Iterable[str] = DEFAULT_IGNORE_PATTERNS,
) -> Iterator[str]:
    """Yield markdown documents under `art_path` as art-relative posix paths.

    The index/ subtree is never a document source. Order is deterministic.
    """
    art_path = Path(art_path)
    if not art_path.is_dir():
        return
    patterns = list(ignore_patterns)
    for dirpath, dirnames, filenames in os.walk(art_path, followlinks=follow_symlinks):
        rel_dir = os.path.relpath(dirpath, art_path)
        if rel_dir == ".":
            rel_dir = ""
            dirnames[:] = [d for d in dirnames if d != INDEX_DIR]
        dirnames.sort()
        for name in sorted(filenames):
            if not name.endswith(MD_SUFFIX):
                continue
            if is_ignored(name, patterns):
                continue
            full = os.path.join(dirpath, name)
            if not follow_symlinks and os.path.islink(full):
                continue
            yield to_posix(os.path.join(rel_dir, name)) if rel_dir else name


def process_file(tag_map: TagMap, art_path: str | Path, repo_relative_path: str) -> int:
    """Parse one document and add its tags under `repo_relative_path`.

    Read failures are reported and skipped. Returns the number of tags added.
    """
    full_path = Path(art_path) / strip_art_prefix(repo_relative_path)
    try:
        raw = full_path.read_bytes()
    except OSError as e:
        logger.warning("cannot read file: %s (%s)", full_path, e)
        return 0
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("failed to parse tags in: %s (not UTF-8)", full_path)
        return 0
    tags = parse_tags(content)
    for tag in tags:
        tag_map.add_file(tag.name, repo_relative_path)
    return len(tags)


def collect_tags(
    art_path: str | Path,
    single_file: Optional[str] = None,
    follow_symlinks: bool = False,
    ignore_patterns: Iterable[str] = DEFAULT_IGNORE_PATTERNS,
) -> TagMap:
    """Tag map of an art tree, keyed by repository-relative paths (art/...)."""
    tag_map = TagMap()
    if single_file is not None:
        process_file(tag_map, art_path, single_file)
        return tag_map
    count = 0
    for rel in iter_documents(art_path, follow_symlinks, ignore_patterns):
        process_file(tag_map, art_path, ART_PREFIX + rel)
        count += 1
    logger.debug("scanned %d documents under %s: %d tags", count, art_path, len(tag_map))
    return tag_map


def update_tag_map_for_file(tag_map: TagMap, art_path: str | Path, repo_relative_path: str) -> TagMap:
    """Replace everything the map knows about one document with its current tags."""
    tag_map.remove_file(repo_relative_path)
    full_path = Path(art_path) / strip_art_prefix(repo_relative_path)
    if full_path.is_file():
        process_file(tag_map, art_path, repo_relative_path)
    else:
        logger.debug("file no longer exists, dropped from tag map: %s", repo_relative_path)
    return tag_map


def load_tag_map_from_indexes(art_path: str | Path) -> TagMap:
    """Rebuild a TagMap from the local master index and its per-tag pages."""
    index_dir = Path(art_path) / INDEX_DIR
    tag_map = TagMap()
    for tag in read_master_index(index_dir / TAG_INDEX_FILE):
        tag_map.add_files(tag, read_tag_page(index_dir / tag_page_relpath(tag)))
    return tag_map


def is_index_stale(
    art_path: str | Path,
    follow_symlinks: bool = False,
    ignore_patterns: Iterable[str] = DEFAULT_IGNORE_PATTERNS,
) -> bool:
    """True when the master index is missing or any document is newer than it."""
    art_path = Path(art_path)
    try:
        index_mtime = (art_path / INDEX_DIR / TAG_INDEX_FILE).stat().st_mtime
    except OSError:
        return True
    for rel in iter_documents(art_path, follow_symlinks, ignore_patterns):
        try:
            if (art_path / rel).stat().st_mtime > index_mtime:
                return True
        except OSError:
            continue
    return False

