"""
pool.py

Index-based arena used for the records the phrase extractor produces.

A Pool keeps a growable backing list plus a cursor. `alloc()` hands out the
record at the cursor (creating it on first use, clearing it on reuse) and
`release_all()` moves the cursor back to zero. Records handed out before a
`release_all()` are therefore recycled by later allocations and must not be
kept by callers past the reset.
"""

from __future__ import annotations

from typing import Callable, Generic, List, Protocol, TypeVar


class Clearable(Protocol):
    def clear(self) -> None:
        ...


T = TypeVar("T", bound=Clearable)


class Pool(Generic[T]):
    """
    Arena allocator with bulk reset.

    Parameters
    ----------
    factory:
        Zero-argument callable creating a fresh, default-initialized record.
        Records must provide a ``clear()`` method restoring that state.
    """

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._records: List[T] = []
        self._cursor = 0

    def alloc(self) -> T:
        if self._cursor < len(self._records):
            record = self._records[self._cursor]
            record.clear()
        else:
            record = self._factory()
            self._records.append(record)
        self._cursor += 1
        return record

    def release_all(self) -> None:
        self._cursor = 0

    def __len__(self) -> int:
        """Number of records allocated since the last reset."""
        return self._cursor

    @property
    def capacity(self) -> int:
        """Number of records the backing store currently holds."""
        return len(self._records)

    def __getitem__(self, index: int) -> T:
        if not 0 <= index < self._cursor:
            raise IndexError(f"pool index {index} out of range (size={self._cursor})")
        return self._records[index]
