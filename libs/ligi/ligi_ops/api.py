from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .config import IndexConfig, local_art_path
from .errors import LigiError, UsageError
from .global_index import load_repo_list, rebuild_global_tag_indexes_from_repos, write_global_indexes
from .indexer import collect_tags, is_index_stale, load_tag_map_from_indexes, update_tag_map_for_file
from .links import fill_all_tag_links, fill_tag_links, fill_tag_links_in_file, insert_tags_into_file, parse_tag_list
from .local_index import write_local_indexes
from .parser import parse_tags
from .prune import prune_global_indexes, prune_local_indexes
from .query import query_index
from .types import to_json_safe
from .utils import canonicalize_path, strip_art_prefix

logger = logging.getLogger(__name__)


# ---------------------------
# Helper to standardize result
# ---------------------------
def _ok(data: Any, meta: Dict | None = None) -> Dict:
    return {"ok": True, "data": to_json_safe(data), "error": None, "meta": meta or {}}


def _err(msg: str, meta: Dict | None = None) -> Dict:
    return {"ok": False, "data": None, "error": msg, "meta": meta or {}}


def _fail(e: Exception) -> Dict:
    if isinstance(e, LigiError):
        return _err(str(e), meta={"category": e.category, "exit_code": e.exit_code})
    return _err(str(e), meta={"category": "filesystem", "exit_code": 2})


def _config(config: Optional[IndexConfig]) -> IndexConfig:
    return config if config is not None else IndexConfig.from_env()


def _global_art(cfg: IndexConfig, global_art: Optional[str]) -> Path:
    return Path(global_art) if global_art else cfg.global_art_path()


def _require_art(root: str) -> Path:
    art = local_art_path(root)
    if not art.is_dir():
        raise UsageError(f"art directory not found: {art}")
    return art


def _normalize_file_arg(root: str, file: str) -> str:
    rel = file.replace("\\", "/")
    if not rel.startswith("art/"):
        raise UsageError(f"file outside art directory: {file} (must be under {local_art_path(root)})")
    if not (Path(root) / rel).is_file():
        raise UsageError(f"file not found: {Path(root) / rel}")
    return rel


# ---------------------------
# Workflows (raise LigiError)
# ---------------------------

def run_index(
    root: str,
    file: Optional[str] = None,
    tags: Optional[str | Sequence[str]] = None,
    config: Optional[IndexConfig] = None,
    global_art: Optional[str] = None,
    fill_links: bool = True,
    sync_global: bool = True,
) -> Dict:
    """Index one repository: local index, tag links, then a global merge."""
    cfg = _config(config)
    if tags and not file:
        raise UsageError("--tags requires --file")
    art = _require_art(root)

    added = 0
    rel = None
    if file:
        rel = _normalize_file_arg(root, file)
        if tags:
            names = parse_tag_list(tags) if isinstance(tags, str) else list(tags)
            added = insert_tags_into_file(Path(root) / rel, names)

    # links first so the index ends up newer than every document it lists
    filled = 0
    if fill_links:
        if rel:
            filled = fill_tag_links_in_file(art, strip_art_prefix(rel))
        else:
            filled = fill_all_tag_links(art, cfg.follow_symlinks, cfg.ignore_patterns)

    if rel:
        tag_map = load_tag_map_from_indexes(art)
        update_tag_map_for_file(tag_map, art, rel)
    else:
        tag_map = collect_tags(art, None, cfg.follow_symlinks, cfg.ignore_patterns)

    local = write_local_indexes(art, tag_map)

    global_summary = None
    if sync_global:
        try:
            merged = write_global_indexes(tag_map, root, _global_art(cfg, global_art))
            global_summary = {
                "repo_path": merged.repo_path,
                "created": merged.created,
                "updated": merged.updated,
                "tags_kept": merged.tags_kept,
            }
        except LigiError as e:
            logger.warning("failed to update global index: %s", e)

    return {
        "art_path": str(art),
        "files_indexed": len(tag_map.documents()),
        "tags_found": len(tag_map),
        "tags_added": added,
        "links_filled": filled,
        "created": local.created,
        "updated": local.updated,
        "tombstoned": local.tombstoned,
        "global": global_summary,
    }


def run_index_global(
    config: Optional[IndexConfig] = None,
    global_art: Optional[str] = None,
    repo_roots: Optional[List[str]] = None,
    write_local: bool = True,
) -> Dict:
    cfg = _config(config)
    g_art = _global_art(cfg, global_art)
    roots = repo_roots if repo_roots is not None else load_repo_list(g_art)
    stats = rebuild_global_tag_indexes_from_repos(
        roots,
        g_art,
        write_local=write_local,
        follow_symlinks=cfg.follow_symlinks,
        ignore_patterns=cfg.ignore_patterns,
    )
    return to_json_safe(stats)


def run_prune(
    root: Optional[str] = None,
    global_scope: bool = False,
    config: Optional[IndexConfig] = None,
    global_art: Optional[str] = None,
    repo_roots: Optional[List[str]] = None,
) -> Dict:
    if global_scope:
        cfg = _config(config)
        g_art = _global_art(cfg, global_art)
        roots = repo_roots if repo_roots is not None else load_repo_list(g_art)
        return to_json_safe(prune_global_indexes(g_art, roots))
    return to_json_safe(prune_local_indexes(_require_art(root or ".")))


def run_query(
    root: Optional[str],
    tokens: Sequence[str],
    global_scope: bool = False,
    absolute: bool = False,
    auto_index: bool = True,
    config: Optional[IndexConfig] = None,
    global_art: Optional[str] = None,
) -> List[str]:
    cfg = _config(config)
    if global_scope:
        return query_index(_global_art(cfg, global_art), tokens)

    root = root or "."
    art = _require_art(root)
    if auto_index and is_index_stale(art, cfg.follow_symlinks, cfg.ignore_patterns):
        run_index(root, config=cfg, global_art=global_art, fill_links=False)
    results = query_index(art, tokens)
    if absolute:
        abs_root = canonicalize_path(root)
        results = [os.path.join(abs_root, r) for r in results]
    return results


# ---------------------------
# Public API (never raises)
# ---------------------------

def ligi_parse_tags(content: str) -> Dict:
    tags = parse_tags(content)
    return _ok(tags, meta={"count": len(tags)})


def ligi_fill_links(content: str, file_in_art: str) -> Dict:
    result = fill_tag_links(content, file_in_art)
    return _ok(result, meta={"filled": result.filled})


def ligi_index(root: str = ".", file: Optional[str] = None, tags: Optional[str] = None, **kwargs: Any) -> Dict:
    try:
        return _ok(run_index(root, file=file, tags=tags, **kwargs))
    except (LigiError, OSError) as e:
        return _fail(e)


def ligi_index_global(**kwargs: Any) -> Dict:
    try:
        return _ok(run_index_global(**kwargs))
    except (LigiError, OSError) as e:
        return _fail(e)


def ligi_prune(root: Optional[str] = None, global_scope: bool = False, **kwargs: Any) -> Dict:
    try:
        return _ok(run_prune(root, global_scope=global_scope, **kwargs))
    except (LigiError, OSError) as e:
        return _fail(e)


def ligi_query(root: Optional[str], tokens: Sequence[str], **kwargs: Any) -> Dict:
    try:
        results = run_query(root, tokens, **kwargs)
        return _ok(results, meta={"count": len(results)})
    except (LigiError, OSError) as e:
        return _fail(e)
