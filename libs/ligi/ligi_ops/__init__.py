from .types import (
    Tag, TagToken, TagValidation, FillResult,
    IndexWriteResult, GlobalWriteResult, RebuildStats, PruneResult
)

from .errors import (
    LigiError, UsageError, InvalidTagNameError,
    IndexFormatError, IndexStorageError, GlobalHomeError, RepositoryNotFoundError
)

from .config import IndexConfig, local_art_path

from .parser import validate_tag_name, is_valid_tag_name, parse_tags, parse_tag_names
from .tagmap import TagMap
from .render import render_master_index, render_tag_index, render_local_tag_page, render_global_tag_page
from .reader import parse_master_index, parse_tag_page, read_master_index, read_tag_page

from .indexer import collect_tags, process_file, update_tag_map_for_file, load_tag_map_from_indexes, is_index_stale
from .local_index import write_local_indexes
from .global_index import (
    write_global_indexes, write_global_indexes_authoritative,
    rebuild_global_tag_indexes_from_repos, load_repo_list
)
from .prune import prune_local_indexes, prune_global_indexes
from .links import fill_tag_links, fill_tag_links_in_file, fill_all_tag_links, insert_tags, insert_tags_into_file
from .query import evaluate_tag_query, query_index

from .api import ligi_index, ligi_index_global, ligi_prune, ligi_query, ligi_parse_tags, ligi_fill_links

__all__ = [
    # Types
    "Tag", "TagToken", "TagValidation", "FillResult",
    "IndexWriteResult", "GlobalWriteResult", "RebuildStats", "PruneResult",

    # Errors
    "LigiError", "UsageError", "InvalidTagNameError",
    "IndexFormatError", "IndexStorageError", "GlobalHomeError", "RepositoryNotFoundError",

    # Config
    "IndexConfig", "local_art_path",

    # Parsing and rendering
    "validate_tag_name", "is_valid_tag_name", "parse_tags", "parse_tag_names",
    "TagMap",
    "render_master_index", "render_tag_index", "render_local_tag_page", "render_global_tag_page",
    "parse_master_index", "parse_tag_page", "read_master_index", "read_tag_page",

    # Indexing
    "collect_tags", "process_file", "update_tag_map_for_file", "load_tag_map_from_indexes", "is_index_stale",
    "write_local_indexes",
    "write_global_indexes", "write_global_indexes_authoritative",
    "rebuild_global_tag_indexes_from_repos", "load_repo_list",
    "prune_local_indexes", "prune_global_indexes",
    "fill_tag_links", "fill_tag_links_in_file", "fill_all_tag_links", "insert_tags", "insert_tags_into_file",
    "evaluate_tag_query", "query_index",

    # Envelope API
    "ligi_index", "ligi_index_global", "ligi_prune", "ligi_query", "ligi_parse_tags", "ligi_fill_links",
]
