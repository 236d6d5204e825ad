"""Tag parsing for `[[t/tag_name]]` tokens in markdown.

A single left-to-right scan with four states. Tags are only recognised in
normal text: fenced code blocks, inline code spans and HTML comments are
skipped. The same scanner drives tag-link filling (see links.py).
"""
from __future__ import annotations

import string
from typing import Iterator, List

from .const import (
    COMMENT_CLOSE,
    COMMENT_OPEN,
    FENCE,
    MAX_TAG_NAME_LEN,
    TAG_CLOSE,
    TAG_OPEN,
    UTF8_BOM,
)
from .errors import InvalidTagNameError
from .types import Tag, TagToken, TagValidation

TAG_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_-./")

NORMAL = "normal"
IN_FENCED_CODE = "in_fenced_code"
IN_INLINE_CODE = "in_inline_code"
IN_HTML_COMMENT = "in_html_comment"


def validate_tag_name(name: str) -> TagValidation:
    """Allowed: A-Z, a-z, 0-9, _, -, ., /"""
    if not name:
        return TagValidation("empty")
    if len(name.encode("utf-8")) > MAX_TAG_NAME_LEN:
        return TagValidation("too_long")
    if ".." in name:
        return TagValidation("path_traversal")
    # "x", "./x" and "x/" would share one page file
    if any(seg in ("", ".") for seg in name.split("/")):
        return TagValidation("path_traversal")
    for ch in name:
        if ch not in TAG_NAME_CHARS:
            return TagValidation("invalid_char", ch)
    return TagValidation("valid")


def is_valid_tag_name(name: str) -> bool:
    return validate_tag_name(name).ok


def require_valid_tag_name(name: str) -> str:
    result = validate_tag_name(name)
    if not result.ok:
        raise InvalidTagNameError(name, result)
    return name


def iter_tag_tokens(content: str) -> Iterator[TagToken]:
    """Yield every closed `[[t/...]]` token seen in normal state, valid or not.

    Offsets index into `content` as given (a leading BOM is skipped but not
    removed). An opener with no closing `]]` ends the scan.
    """
    n = len(content)
    pos = 1 if content.startswith(UTF8_BOM) else 0
    line = 1
    state = NORMAL

    while pos < n:
        if state == NORMAL:
            if content.startswith(FENCE, pos):
                state = IN_FENCED_CODE
                pos += len(FENCE)
                continue
            if content.startswith(COMMENT_OPEN, pos):
                state = IN_HTML_COMMENT
                pos += len(COMMENT_OPEN)
                continue
            ch = content[pos]
            if ch == "`":
                state = IN_INLINE_CODE
                pos += 1
                continue
            if content.startswith(TAG_OPEN, pos):
                name_start = pos + len(TAG_OPEN)
                close = content.find(TAG_CLOSE, name_start)
                if close == -1:
                    return
                name = content[name_start:close]
                end = close + len(TAG_CLOSE)
                yield TagToken(name=name, start=pos, end=end, line=line)
                line += name.count("\n")
                pos = end
                continue
            if ch == "\n":
                line += 1
            pos += 1

        elif state == IN_FENCED_CODE:
            # whole lines; a line starting with the fence closes the block
            eol = content.find("\n", pos)
            if eol == -1:
                eol = n
            if content[pos:eol].lstrip(" \t").startswith(FENCE):
                state = NORMAL
            pos = eol
            if pos < n:
                pos += 1
                line += 1

        elif state == IN_INLINE_CODE:
            ch = content[pos]
            if ch == "`":
                state = NORMAL
            elif ch == "\n":
                line += 1
            pos += 1

        else:  # IN_HTML_COMMENT
            close = content.find(COMMENT_CLOSE, pos)
            if close == -1:
                return
            line += content.count("\n", pos, close)
            pos = close + len(COMMENT_CLOSE)
            state = NORMAL


def parse_tags(content: str) -> List[Tag]:
    """Unique valid tags in first-occurrence order, each with its first line."""
    tags: List[Tag] = []
    seen = set()
    for token in iter_tag_tokens(content):
        if token.name in seen or not is_valid_tag_name(token.name):
            continue
        seen.add(token.name)
        tags.append(Tag(name=token.name, line=token.line))
    return tags


def parse_tag_names(content: str) -> List[str]:
    return [t.name for t in parse_tags(content)]
