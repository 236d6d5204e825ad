from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Tuple


class TagMap:
    """Tag -> file references, insertion ordered, duplicates ignored.

    Rendering never relies on insertion order; use `sorted_tags` and
    `sorted_files` for anything written to disk.
    """

    def __init__(self) -> None:
        self._files: Dict[str, List[str]] = {}

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str]]) -> "TagMap":
        tag_map = cls()
        for tag, ref in pairs:
            tag_map.add_file(tag, ref)
        return tag_map

    def add_file(self, tag: str, ref: str) -> None:
        files = self._files.setdefault(tag, [])
        if ref not in files:
            files.append(ref)

    def add_files(self, tag: str, refs: Iterable[str]) -> None:
        for ref in refs:
            self.add_file(tag, ref)

    def remove_file(self, ref: str) -> int:
        """Drop `ref` from every tag; tags left empty leave the map.

        Returns the number of tags that referenced `ref`.
        """
        touched = 0
        for tag in list(self._files):
            files = self._files[tag]
            if ref in files:
                files.remove(ref)
                touched += 1
                if not files:
                    del self._files[tag]
        return touched

    def tags(self) -> List[str]:
        return list(self._files)

    def sorted_tags(self) -> List[str]:
        return sorted(self._files)

    def sorted_files(self, tag: str) -> List[str]:
        return sorted(set(self._files.get(tag, ())))

    def files(self, tag: str) -> List[str]:
        return list(self._files.get(tag, ()))

    def items(self) -> List[Tuple[str, List[str]]]:
        return [(tag, self.sorted_files(tag)) for tag in self.sorted_tags()]

    def file_count(self) -> int:
        return sum(len(files) for files in self._files.values())

    def documents(self) -> List[str]:
        """Distinct file references across all tags."""
        return sorted({ref for files in self._files.values() for ref in files})

    def copy(self) -> "TagMap":
        clone = TagMap()
        for tag, files in self._files.items():
            clone._files[tag] = list(files)
        return clone

    def __contains__(self, tag: object) -> bool:
        return tag in self._files

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"TagMap(tags={len(self)}, files={self.file_count()})"
