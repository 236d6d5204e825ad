from __future__ import annotations

from typing import Optional

from .types import TagValidation

EXIT_CODES = {
    "usage": 1,
    "filesystem": 2,
    "config": 3,
    "internal": 127,
}


class LigiError(Exception):
    """Base exception for ligi index operations"""

    category = "internal"

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message

    @property
    def exit_code(self) -> int:
        return EXIT_CODES.get(self.category, 127)


class UsageError(LigiError):
    category = "usage"


class InvalidTagNameError(UsageError):
    def __init__(self, name: str, validation: TagValidation) -> None:
        self.name = name
        self.validation = validation
        super().__init__(validation.describe(name))


class IndexFormatError(LigiError):
    """An index file exists but cannot be read as text."""
    category = "filesystem"


class IndexStorageError(LigiError):
    """The index directory itself cannot be created."""
    category = "filesystem"


class GlobalHomeError(IndexStorageError):
    pass


class RepositoryNotFoundError(LigiError):
    category = "filesystem"
