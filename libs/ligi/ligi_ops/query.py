from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Sequence, Set

from .const import INDEX_DIR
from .errors import UsageError
from .parser import require_valid_tag_name
from .reader import read_tag_page
from .render import tag_page_relpath

AND_OP = "&"
OR_OP = "|"


def evaluate_tag_query(tokens: Sequence[str], lookup: Callable[[str], List[str]]) -> List[str]:
    """Evaluate `tag [& tag | tag ...]` left to right.

    Adjacent tags without an operator intersect, like `&`.
    """
    result: Set[str] = set()
    first = True
    op = None
    for token in tokens:
        if token in (AND_OP, OR_OP):
            op = token
            continue
        files = set(lookup(require_valid_tag_name(token)))
        if first:
            result = files
            first = False
        elif op == OR_OP:
            result |= files
        else:
            result &= files
        op = None
    if first:
        raise UsageError("no tag specified")
    return sorted(result)


def index_lookup(art_path: str | Path) -> Callable[[str], List[str]]:
    index_dir = Path(art_path) / INDEX_DIR

    def lookup(tag: str) -> List[str]:
        return read_tag_page(index_dir / tag_page_relpath(tag))

    return lookup


def query_index(art_path: str | Path, tokens: Sequence[str]) -> List[str]:
    """Files matching the expression according to the index under `art_path`.

    Local indexes answer with art/... references, the global index with
    absolute paths.
    """
    return evaluate_tag_query(tokens, index_lookup(art_path))
