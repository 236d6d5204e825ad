from __future__ import annotations

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Callable, Iterable, List

from .const import ART_PREFIX, INDEX_DIR, TAG_INDEX_FILE
from .errors import IndexFormatError
from .local_index import (
    PageRenderer,
    ensure_index_dirs,
    read_prior_tags,
    tombstone_tags,
    write_index_file,
)
from .reader import read_tag_page
from .render import render_global_tag_page, render_local_tag_page, render_master_index, tag_page_relpath
from .types import IndexWriteResult, PruneResult
from .utils import canonicalize_path, is_under

logger = logging.getLogger(__name__)


def local_ref_resolves(art_path: Path, ref: str) -> bool:
    """`art/<rel>` that stays inside the art root and names an existing file."""
    if not ref.startswith(ART_PREFIX):
        return False
    rel = ref[len(ART_PREFIX):]
    if not rel or rel.startswith("/") or os.path.isabs(rel):
        return False
    if ".." in PurePosixPath(rel).parts:
        return False
    return (art_path / rel).is_file()


def global_ref_resolves(ref: str, repo_roots: List[str]) -> bool:
    if not os.path.isabs(ref):
        return False
    if ".." in PurePosixPath(ref).parts:
        return False
    if not any(is_under(ref, root) for root in repo_roots):
        return False
    return os.path.isfile(ref)


def _prune_index(
    art_path: Path,
    keep: Callable[[str], bool],
    render_page: PageRenderer,
) -> PruneResult:
    index_dir = art_path / INDEX_DIR
    result = PruneResult()
    if not (index_dir / TAG_INDEX_FILE).is_file():
        return result

    ensure_index_dirs(art_path)
    writes = IndexWriteResult()
    kept_tags: List[str] = []
    emptied: List[str] = []
    for tag in read_prior_tags(index_dir):
        page_path = index_dir / tag_page_relpath(tag)
        try:
            refs = read_tag_page(page_path)
        except IndexFormatError as e:
            logger.warning("unreadable tag page treated as empty: %s", e)
            refs = []
        survivors = [ref for ref in refs if keep(ref)]
        result.pruned_entries += len(refs) - len(survivors)
        if survivors:
            write_index_file(page_path, render_page(tag, survivors), writes)
            kept_tags.append(tag)
        else:
            emptied.append(tag)

    result.pruned_tags = len(emptied)
    tombstone_tags(index_dir, emptied, render_page, writes)
    write_index_file(index_dir / TAG_INDEX_FILE, render_master_index(kept_tags), writes)
    logger.debug("pruned %d entries, %d tags under %s", result.pruned_entries, result.pruned_tags, index_dir)
    return result


def prune_local_indexes(art_path: str | Path) -> PruneResult:
    """Drop references to documents that no longer exist under the art root."""
    art_path = Path(art_path)
    return _prune_index(art_path, lambda ref: local_ref_resolves(art_path, ref), render_local_tag_page)


def prune_global_indexes(global_art: str | Path, repo_roots: Iterable[str | Path]) -> PruneResult:
    """Drop global references that are missing on disk or outside every known repository."""
    roots = [canonicalize_path(r) for r in repo_roots]
    return _prune_index(Path(global_art), lambda ref: global_ref_resolves(ref, roots), render_global_tag_page)
