from __future__ import annotations

MAX_TAG_NAME_LEN = 255  # filesystem path component limit
TAG_OPEN = "[[t/"
TAG_CLOSE = "]]"
FENCE = "```"
COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"
UTF8_BOM = "\ufeff"

MD_SUFFIX = ".md"
ART_DIR = "art"
ART_PREFIX = "art/"
INDEX_DIR = "index"
TAGS_DIR = "tags"
TAG_INDEX_FILE = "ligi_tags.md"
GLOBAL_REPO_INDEX_FILE = "ligi_global_index.md"

TAG_INDEX_HEADER = (
    "# Ligi Tag Index\n"
    "\n"
    "This file is auto-maintained by ligi. Each tag links to its index file.\n"
    "\n"
    "## Tags\n"
    "\n"
)
TAG_PAGE_NOTE = "This file is auto-maintained by ligi.\n"
FILES_HEADING = "## Files"
TAGS_HEADING = "## Tags"
REPOS_HEADING = "## Repositories"

# Reasonable defaults
DEFAULT_IGNORE_PATTERNS = ("*.tmp", "*.bak")
DEFAULT_FOLLOW_SYMLINKS = False
DEFAULT_GLOBAL_HOME = "~/.ligi"
