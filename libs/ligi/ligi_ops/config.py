from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .const import ART_DIR, DEFAULT_FOLLOW_SYMLINKS, DEFAULT_GLOBAL_HOME, DEFAULT_IGNORE_PATTERNS

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class IndexConfig:
    """Configuration for tag indexing"""
    ignore_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))
    follow_symlinks: bool = DEFAULT_FOLLOW_SYMLINKS
    global_home: str = DEFAULT_GLOBAL_HOME

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "IndexConfig":
        """Create config from environment variables (and a .env file if present)"""
        load_dotenv(dotenv_path)
        patterns = os.getenv("LIGI_IGNORE_PATTERNS")
        return cls(
            ignore_patterns=(
                [p.strip() for p in patterns.split(",") if p.strip()]
                if patterns is not None
                else list(DEFAULT_IGNORE_PATTERNS)
            ),
            follow_symlinks=os.getenv("LIGI_FOLLOW_SYMLINKS", str(DEFAULT_FOLLOW_SYMLINKS)).strip().lower() in _TRUTHY,
            global_home=os.getenv("LIGI_HOME", DEFAULT_GLOBAL_HOME),
        )

    def global_art_path(self) -> Path:
        return Path(os.path.expanduser(self.global_home)) / ART_DIR


def local_art_path(root: str | Path) -> Path:
    return Path(root) / ART_DIR
