"""Home-level union index over every synchronized repository.

The global index lives under `<home>/.ligi/art/index/` and uses the same
master/per-tag layout as a local index, except that file references are
absolute paths. Two ways to update it:

- `write_global_indexes` merges one repository incrementally: only entries
  under that repository's canonical path are replaced, everything contributed
  by other repositories is kept.
- `rebuild_global_tag_indexes_from_repos` re-scans an explicit repository
  list and rewrites the whole index from that alone.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List

from .const import ART_DIR, DEFAULT_IGNORE_PATTERNS, GLOBAL_REPO_INDEX_FILE, INDEX_DIR, TAG_INDEX_FILE
from .errors import GlobalHomeError, IndexFormatError, IndexStorageError, RepositoryNotFoundError
from .indexer import collect_tags
from .local_index import (
    ensure_index_dirs,
    read_prior_tags,
    tombstone_tags,
    write_index_file,
    write_indexes,
    write_local_indexes,
)
from .reader import parse_repo_list, read_index_text, read_tag_page
from .render import render_global_tag_page, render_master_index, tag_page_relpath
from .tagmap import TagMap
from .types import GlobalWriteResult, IndexWriteResult, RebuildStats
from .utils import canonicalize_path, is_under

logger = logging.getLogger(__name__)


def ensure_global_index_dirs(global_art: str | Path) -> Path:
    try:
        return ensure_index_dirs(global_art)
    except IndexStorageError as e:
        raise GlobalHomeError(f"global home directory not accessible: {global_art}", e.cause) from e


def absolute_refs(repo_path: str, refs: Iterable[str]) -> List[str]:
    return [os.path.join(repo_path, ref) for ref in refs]


def _read_global_page(path: Path) -> List[str]:
    try:
        return read_tag_page(path)
    except IndexFormatError as e:
        logger.warning("ignoring unreadable global tag page: %s", e)
        return []


def write_global_indexes(tag_map: TagMap, repo_root: str | Path, global_art: str | Path) -> GlobalWriteResult:
    """Fold one repository's local tag map into the global index.

    For every tag named by the global master or by `tag_map`, entries under
    the repository's canonical path are replaced by its current entries.
    Entries of other repositories are never dropped here.
    """
    index_dir = ensure_global_index_dirs(global_art)
    repo_path = canonicalize_path(repo_root)
    if not os.path.isdir(repo_path):
        raise RepositoryNotFoundError(f"cannot resolve repo path: {repo_root}")

    result = GlobalWriteResult(repo_path=repo_path)
    repo_entries: Dict[str, List[str]] = {
        tag: absolute_refs(repo_path, refs) for tag, refs in tag_map.items()
    }
    prior_tags = read_prior_tags(index_dir)

    kept_tags: List[str] = []
    emptied: List[str] = []
    for tag in sorted(set(prior_tags) | set(repo_entries)):
        page_path = index_dir / tag_page_relpath(tag)
        others = [f for f in _read_global_page(page_path) if not is_under(f, repo_path)]
        merged = others + repo_entries.get(tag, [])
        if merged:
            write_index_file(page_path, render_global_tag_page(tag, merged), result)
            kept_tags.append(tag)
        else:
            emptied.append(tag)

    tombstone_tags(index_dir, emptied, render_global_tag_page, result)
    write_index_file(index_dir / TAG_INDEX_FILE, render_master_index(kept_tags), result)
    result.tags_kept = len(kept_tags)
    return result


def write_global_indexes_authoritative(global_map: TagMap, global_art: str | Path) -> IndexWriteResult:
    """Replace the global index with `global_map` (absolute references)."""
    ensure_global_index_dirs(global_art)
    return write_indexes(global_art, global_map, render_global_tag_page)


def rebuild_global_tag_indexes_from_repos(
    repo_roots: Iterable[str | Path],
    global_art: str | Path,
    write_local: bool = True,
    follow_symlinks: bool = False,
    ignore_patterns: Iterable[str] = DEFAULT_IGNORE_PATTERNS,
) -> RebuildStats:
    """Regenerate the global index from scratch out of `repo_roots`.

    A missing repository or art directory is skipped with a warning. With
    `write_local`, each repository's own index is regenerated on the way.
    """
    ensure_global_index_dirs(global_art)
    patterns = list(ignore_patterns)
    stats = RebuildStats()
    global_map = TagMap()
    documents = set()
    seen_repos = set()

    for root in repo_roots:
        repo_path = canonicalize_path(root)
        if repo_path in seen_repos:
            continue
        seen_repos.add(repo_path)
        if not os.path.isdir(repo_path):
            logger.warning("repo not found, skipping: %s", root)
            stats.skipped.append(str(root))
            continue
        art_path = Path(repo_path) / ART_DIR
        if not art_path.is_dir():
            logger.warning("art directory not found, skipping: %s", art_path)
            stats.skipped.append(str(root))
            continue

        local_map = collect_tags(art_path, None, follow_symlinks, patterns)
        if write_local:
            try:
                write_local_indexes(art_path, local_map)
            except IndexStorageError as e:
                logger.warning("cannot write local index for %s: %s", repo_path, e)

        for tag, refs in local_map.items():
            abs_refs = absolute_refs(repo_path, refs)
            global_map.add_files(tag, abs_refs)
            documents.update(abs_refs)
        stats.repos_processed += 1

    write_global_indexes_authoritative(global_map, global_art)
    stats.tags_written = len(global_map)
    stats.files_indexed = len(documents)
    return stats


def load_repo_list(global_art: str | Path) -> List[str]:
    """Registered repository roots, read from <global_art>/index/ligi_global_index.md."""
    text = read_index_text(Path(global_art) / INDEX_DIR / GLOBAL_REPO_INDEX_FILE)
    return parse_repo_list(text) if text is not None else []
