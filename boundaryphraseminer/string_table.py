"""
string_table.py

Word interning for BoundaryPhraseMiner.

Every distinct token string is mapped to a dense integer id (0, 1, 2, ...)
in insertion order, so documents can be stored as plain lists of ints and
the extractor can work on ids only.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional


class StringTable:
    """Bidirectional str <-> int mapping with dense ids."""

    def __init__(self, words: Optional[Iterable[str]] = None) -> None:
        self._ids: Dict[str, int] = {}
        self._strings: List[str] = []
        if words is not None:
            for word in words:
                self.get_or_insert(word)

    def get_or_insert(self, word: str) -> int:
        """Return the id of `word`, assigning the next free id if unseen."""
        word_id = self._ids.get(word)
        if word_id is None:
            word_id = len(self._strings)
            self._ids[word] = word_id
            self._strings.append(word)
        return word_id

    def get_id(self, word: str) -> Optional[int]:
        return self._ids.get(word)

    def get_str(self, word_id: int) -> str:
        if word_id < 0:
            raise IndexError(f"word id must be non-negative, got {word_id}")
        return self._strings[word_id]

    def __len__(self) -> int:
        return len(self._strings)

    def __contains__(self, word: object) -> bool:
        return word in self._ids
