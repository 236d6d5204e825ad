from __future__ import annotations

from typing import Iterable, List

from .const import FILES_HEADING, MD_SUFFIX, TAG_INDEX_HEADER, TAG_PAGE_NOTE, TAGS_DIR
from .tagmap import TagMap
from .utils import strip_art_prefix

# page dir -> index dir -> art root
_PAGE_DEPTH = 2


def tag_page_relpath(tag: str) -> str:
    """foo/bar -> tags/foo/bar.md"""
    return f"{TAGS_DIR}/{tag}{MD_SUFFIX}"


def render_master_index(tags: Iterable[str]) -> str:
    lines: List[str] = [TAG_INDEX_HEADER]
    for tag in sorted(set(tags)):
        lines.append(f"- [{tag}]({tag_page_relpath(tag)})\n")
    return "".join(lines)


def render_tag_index(tag_map: TagMap) -> str:
    return render_master_index(tag_map.sorted_tags())


def _tag_page_header(tag: str) -> str:
    return f"# Tag: {tag}\n\n{TAG_PAGE_NOTE}\n{FILES_HEADING}\n\n"


def local_file_link(tag: str, ref: str) -> str:
    """Link from art/index/tags/<tag>.md back to the document."""
    up = "../" * (tag.count("/") + _PAGE_DEPTH)
    return up + strip_art_prefix(ref)


def render_local_tag_page(tag: str, refs: Iterable[str]) -> str:
    body = "".join(f"- [{ref}]({local_file_link(tag, ref)})\n" for ref in sorted(set(refs)))
    return _tag_page_header(tag) + body


def render_global_tag_page(tag: str, refs: Iterable[str]) -> str:
    # cross-repository relative links are not attempted
    body = "".join(f"- {ref}\n" for ref in sorted(set(refs)))
    return _tag_page_header(tag) + body
