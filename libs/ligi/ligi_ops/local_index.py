from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List

from .const import INDEX_DIR, TAG_INDEX_FILE, TAGS_DIR
from .errors import IndexFormatError, IndexStorageError
from .reader import read_master_index
from .render import render_local_tag_page, render_master_index, tag_page_relpath
from .tagmap import TagMap
from .types import IndexWriteResult
from .utils import write_text_if_changed

logger = logging.getLogger(__name__)

PageRenderer = Callable[[str, Iterable[str]], str]


def ensure_index_dirs(art_path: str | Path) -> Path:
    """Create <art>/index/tags; failure here aborts the operation."""
    index_dir = Path(art_path) / INDEX_DIR
    tags_dir = index_dir / TAGS_DIR
    try:
        tags_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IndexStorageError(f"cannot create index directory: {tags_dir}", e) from e
    return index_dir


def read_prior_tags(index_dir: Path) -> List[str]:
    try:
        return read_master_index(index_dir / TAG_INDEX_FILE)
    except IndexFormatError as e:
        logger.warning("ignoring unreadable master index: %s", e)
        return []


def write_index_file(path: Path, text: str, result: IndexWriteResult) -> str:
    try:
        status = write_text_if_changed(path, text)
    except OSError as e:
        raise IndexStorageError(f"cannot write index file: {path}", e) from e
    result.record(status, str(path))
    if status != "unchanged":
        logger.debug("%s: %s", status, path)
    return status


def write_tag_pages(
    index_dir: Path,
    pages: Iterable[tuple],
    render_page: PageRenderer,
    result: IndexWriteResult,
) -> None:
    for tag, refs in pages:
        write_index_file(index_dir / tag_page_relpath(tag), render_page(tag, refs), result)


def tombstone_tags(
    index_dir: Path,
    tags: Iterable[str],
    render_page: PageRenderer,
    result: IndexWriteResult,
) -> None:
    """Empty (never delete) the pages of tags that lost all their files."""
    for tag in sorted(set(tags)):
        write_index_file(index_dir / tag_page_relpath(tag), render_page(tag, []), result)
        result.tombstoned.append(tag)


def write_indexes(art_path: str | Path, tag_map: TagMap, render_page: PageRenderer) -> IndexWriteResult:
    """Write a full index pair for `tag_map` under <art>/index.

    Every write is conditional on the rendered bytes differing from disk, so
    re-running on unchanged sources touches nothing. Tags listed in the prior
    master index but absent from `tag_map` get an emptied page.
    """
    index_dir = ensure_index_dirs(art_path)
    result = IndexWriteResult()

    prior_tags = read_prior_tags(index_dir)
    write_index_file(index_dir / TAG_INDEX_FILE, render_master_index(tag_map.sorted_tags()), result)
    write_tag_pages(index_dir, tag_map.items(), render_page, result)
    tombstone_tags(index_dir, [t for t in prior_tags if t not in tag_map], render_page, result)
    return result


def write_local_indexes(art_path: str | Path, tag_map: TagMap) -> IndexWriteResult:
    """Persist a repository's tag map (art/... references) under <art>/index."""
    return write_indexes(art_path, tag_map, render_local_tag_page)
