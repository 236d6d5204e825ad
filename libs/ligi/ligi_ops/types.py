from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, List, Optional


@dataclass
class TagValidation:
    status: str  # "valid" | "empty" | "too_long" | "path_traversal" | "invalid_char"
    char: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "valid"

    def describe(self, name: str) -> str:
        if self.status == "empty":
            return "empty tag name"
        if self.status == "too_long":
            return f"tag name too long: '{name}'"
        if self.status == "path_traversal":
            return f"path traversal in tag name: '{name}'"
        if self.status == "invalid_char":
            return f"invalid character '{self.char}' in tag name '{name}' (allowed: A-Za-z0-9_-./)"
        return f"valid tag name: '{name}'"


@dataclass
class Tag:
    name: str
    line: int = 0


@dataclass
class TagToken:
    """A closed `[[t/...]]` token found in normal parser state."""
    name: str
    start: int  # offset of "[[t/"
    end: int  # offset just past "]]"
    line: int


@dataclass
class FillResult:
    content: str
    filled: int


@dataclass
class IndexWriteResult:
    created: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    tombstoned: List[str] = field(default_factory=list)

    def record(self, status: str, path: str) -> None:
        if status == "created":
            self.created.append(path)
        elif status == "updated":
            self.updated.append(path)
        else:
            self.unchanged.append(path)


@dataclass
class GlobalWriteResult(IndexWriteResult):
    repo_path: str = ""
    tags_kept: int = 0


@dataclass
class RebuildStats:
    repos_processed: int = 0
    tags_written: int = 0
    files_indexed: int = 0
    skipped: List[str] = field(default_factory=list)


@dataclass
class PruneResult:
    pruned_entries: int = 0
    pruned_tags: int = 0


def to_json_safe(obj: Any) -> Any:
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, list):
        return [to_json_safe(x) for x in obj]
    if isinstance(obj, dict):
        return {k: to_json_safe(v) for k, v in obj.items()}
    return obj
