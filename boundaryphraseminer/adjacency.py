"""
adjacency.py

Neighbour statistics for the entropy-based phrase boundary test.

For a set of occurrence positions we collect the words immediately to the
left (or right) of each occurrence, then summarise that multiset by its
Shannon entropy and its most frequent ("major") word:

- high entropy on a side  → diverse neighbours → likely a phrase boundary
- low entropy on a side   → one neighbour dominates → the candidate should
                            grow towards it
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

import numpy as np

from .document import Document


EPSILON = 1e-38

BOUNDARY_THRESHOLD = 0.5
SHIFT_THRESHOLD = 2.0


@dataclass(frozen=True)
class Adjacent:
    """
    Summary of the neighbours on one side of a candidate.

    Attributes
    ----------
    entropy:
        Shannon entropy (natural log) of the neighbour distribution.
    major_word:
        Word id with the highest count, lowest id on ties.
        ``None`` when no neighbour was observed.
    major_word_freq:
        Raw count of `major_word`.
    total:
        Number of neighbour observations.
    """

    entropy: float
    major_word: Optional[int]
    major_word_freq: int
    total: int = 0


def calc_adjacent(term_freq: Mapping[int, int]) -> Adjacent:
    """
    Compute entropy and major neighbour of a word-id → count mapping.

    An empty mapping gives ``Adjacent(0.0, None, 0, 0)``.
    """
    if not term_freq:
        return Adjacent(entropy=0.0, major_word=None, major_word_freq=0, total=0)

    word_ids = np.fromiter(term_freq.keys(), dtype=np.int64, count=len(term_freq))
    counts = np.fromiter(term_freq.values(), dtype=np.float64, count=len(term_freq))

    total = counts.sum()
    p = counts / (EPSILON + total)
    p = p[p > 0]
    entropy = float(-(p * np.log(p)).sum())

    # lexsort keys: last is primary → count descending, then id ascending
    best = np.lexsort((word_ids, -counts))[0]

    return Adjacent(
        entropy=max(0.0, entropy),
        major_word=int(word_ids[best]),
        major_word_freq=int(counts[best]),
        total=int(total),
    )


def left_adjacent(document: Document, positions: Sequence[int], index_offset: int = 0) -> Adjacent:
    """
    Neighbour statistics on the left of each occurrence.

    Parameters
    ----------
    document:
        Source document.
    positions:
        Occurrence positions of the candidate's LAST word.
    index_offset:
        Candidate length minus one, so that ``p - index_offset - 1`` is the
        word preceding the whole candidate. Occurrences starting at the
        beginning of the document have no left neighbour and are skipped.
    """
    term_freq: Counter = Counter()
    for pos in positions:
        left = pos - index_offset - 1
        if left >= 0:
            term_freq[document.word(left)] += 1
    return calc_adjacent(term_freq)


def right_adjacent(document: Document, positions: Sequence[int]) -> Adjacent:
    """Neighbour statistics on the right of each occurrence (last word positions)."""
    last = document.size() - 1
    term_freq: Counter = Counter()
    for pos in positions:
        if pos < last:
            term_freq[document.word(pos + 1)] += 1
    return calc_adjacent(term_freq)


def is_boundary(adjacent: Adjacent, threshold: float = BOUNDARY_THRESHOLD) -> bool:
    """Neighbours are diverse enough for this side to end a phrase."""
    return adjacent.entropy > threshold


def is_phrase(adjacent: Adjacent, threshold: float = SHIFT_THRESHOLD) -> bool:
    """Neighbours are predictable enough to extend the candidate this way."""
    return adjacent.entropy < threshold
