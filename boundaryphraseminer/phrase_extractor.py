"""
phrase_extractor.py

PhraseExtractor: lexicon-free keyphrase extraction from a single document
using neighbour entropy as the phrase boundary signal.

Algorithm
---------
1. Seeds: every non-stopword with tf > 1 whose LEFT neighbours are diverse
   (left entropy > boundary threshold) starts a one-word candidate.
2. Breadth-first growth over phrase length. For every candidate of the
   current level:
     - if its major RIGHT neighbour is a frequent non-stopword and the right
       side is predictable (right entropy < shift threshold), the candidate
       is extended by that word into the next level;
     - independently, if the right side is diverse (a boundary) and the
       left side of the whole candidate is diverse too, the candidate is
       emitted as a Phrase, provided it occurs at least twice.
3. Stop when a level produces no extension.

Every extension keeps only the occurrences followed by the chosen word, so
occurrence lists never grow and each level shifts them one position right;
the loop therefore ends after at most ``document.size()`` levels.

Quick usage
-----------
    from boundaryphraseminer import Document, PhraseExtractor

    doc = Document.from_tokens(tokens, stopwords={"the", "of", "and"})
    extractor = PhraseExtractor()
    for phrase in extractor.extract(doc):
        print(phrase.phrase_string(), phrase.tf)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .adjacency import (
    BOUNDARY_THRESHOLD,
    EPSILON,
    SHIFT_THRESHOLD,
    Adjacent,
    is_boundary,
    is_phrase,
    left_adjacent,
    right_adjacent,
)
from .document import Document
from .pool import Pool


# ---------------------------------------------------------------------
# Pooled records
# ---------------------------------------------------------------------


@dataclass
class PhraseCandidate:
    """
    A partially grown phrase and the occurrences it still covers.

    Attributes
    ----------
    words:
        Word ids of the candidate, in order.
    index:
        For every occurrence, the document position of the candidate's
        LAST word. Use :meth:`starts` for the position of the first word.
    """

    words: List[int] = field(default_factory=list)
    index: List[int] = field(default_factory=list)

    def clear(self) -> None:
        self.words = []
        self.index = []

    def starts(self) -> List[int]:
        offset = len(self.words) - 1
        return [pos - offset for pos in self.index]


@dataclass
class Phrase:
    """
    A finalized keyphrase.

    Attributes
    ----------
    words:
        Word ids of the phrase.
    document:
        Document the phrase was extracted from. Not owned; it must outlive
        the phrase list.
    tf:
        Occurrence count divided by document length.
    occurrences:
        Raw occurrence count behind `tf`.
    """

    words: List[int] = field(default_factory=list)
    document: Optional[Document] = None
    tf: float = 0.0
    occurrences: int = 0

    def clear(self) -> None:
        self.words = []
        self.document = None
        self.tf = 0.0
        self.occurrences = 0

    def phrase_string(self) -> str:
        if self.document is None:
            return ""
        return self.document.phrase_string(self.words)

    def __len__(self) -> int:
        return len(self.words)


@dataclass
class ExtractionStats:
    """Counters describing the last :meth:`PhraseExtractor.extract` run."""

    seeds: int = 0
    iterations: int = 0
    candidates: int = 0
    phrases: int = 0
    truncated: bool = False


# ---------------------------------------------------------------------
# PhraseExtractor – BFS driver
# ---------------------------------------------------------------------


class PhraseExtractor:
    """
    Entropy-boundary phrase extractor.

    One instance owns a candidate pool and a default phrase pool; both are
    reset at the start of every :meth:`extract` call, which invalidates the
    phrases returned by the previous call. Do not share an instance between
    threads.
    """

    def __init__(
        self,
        *,
        boundary_threshold: float = BOUNDARY_THRESHOLD,
        shift_threshold: float = SHIFT_THRESHOLD,
        min_extension_tf: int = 2,
        min_occurrences: int = 2,
        require_right_boundary: bool = True,
        max_iterations: Optional[int] = None,
        check_document: bool = False,
        logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        """
        Parameters
        ----------
        boundary_threshold:
            A side is a phrase boundary when its neighbour entropy is
            strictly above this value.
        shift_threshold:
            A candidate may grow to the right when the right neighbour
            entropy is strictly below this value.
        min_extension_tf:
            The major right neighbour must occur strictly more often than
            this in the document to be appended.
        min_occurrences:
            Minimum number of occurrences for a candidate to be emitted.
        require_right_boundary:
            If True, a candidate is emitted only when its right side is a
            boundary as well as its left side. If False, only the left side
            of the whole candidate is tested.
        max_iterations:
            Optional cap on the number of growth levels. ``None`` runs until
            the frontier is empty.
        check_document:
            Run :meth:`Document.check_invariants` before extracting.
        logger:
            Optional logging callback receiving one string per message.
            Falls back to ``print`` when ``verbose=True`` and no callback is
            given.
        """
        if boundary_threshold < 0 or shift_threshold < 0:
            raise ValueError("entropy thresholds must be non-negative.")
        if min_extension_tf < 0:
            raise ValueError("min_extension_tf must be non-negative.")
        if min_occurrences < 1:
            raise ValueError("min_occurrences must be at least 1.")
        if max_iterations is not None and max_iterations < 1:
            raise ValueError("max_iterations must be None or a positive integer.")

        self.boundary_threshold = float(boundary_threshold)
        self.shift_threshold = float(shift_threshold)
        self.min_extension_tf = int(min_extension_tf)
        self.min_occurrences = int(min_occurrences)
        self.require_right_boundary = require_right_boundary
        self.max_iterations = max_iterations
        self.check_document = check_document
        self.logger = logger

        self._candidate_pool: Pool[PhraseCandidate] = Pool(PhraseCandidate)
        self._phrase_pool: Pool[Phrase] = Pool(Phrase)
        self._from_set: List[PhraseCandidate] = []
        self._to_set: List[PhraseCandidate] = []

        self._document: Optional[Document] = None
        self._phrases: List[Phrase] = []
        self._verbose = False
        self.last_stats = ExtractionStats()

    @property
    def config(self) -> dict:
        return {
            "boundary_threshold": self.boundary_threshold,
            "shift_threshold": self.shift_threshold,
            "min_extension_tf": self.min_extension_tf,
            "min_occurrences": self.min_occurrences,
            "require_right_boundary": self.require_right_boundary,
            "max_iterations": self.max_iterations,
        }

    # ------------------------------------------------------------------
    # Internal helper – unified logging
    # ------------------------------------------------------------------
    def _log(self, message: str, verbose: bool = True) -> None:
        if not verbose:
            return
        if self.logger is not None:
            self.logger(message)
        else:
            print(message)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def extract(
        self,
        document: Document,
        phrase_pool: Optional[Pool[Phrase]] = None,
        phrases: Optional[List[Phrase]] = None,
        *,
        verbose: bool = False,
    ) -> List[Phrase]:
        """
        Extract keyphrases from `document`.

        Parameters
        ----------
        document:
            Document to mine. Must not change during the call.
        phrase_pool:
            Pool the returned Phrase records are allocated from. Defaults to
            the extractor's own pool. It is reset on entry.
        phrases:
            Optional output list; cleared on entry and filled in place.
        verbose:
            Log the begin set, every level and every emitted phrase.

        Returns
        -------
        List[Phrase]
            Phrases in discovery order (level by level). Not ranked; see
            :func:`boundaryphraseminer.keyphrase_miner.rank_phrases`.
        """
        if self.check_document:
            document.check_invariants()

        pool = phrase_pool if phrase_pool is not None else self._phrase_pool
        out = phrases if phrases is not None else []

        self._document = document
        self._phrases = out
        self._verbose = verbose
        self.last_stats = ExtractionStats()

        # Clean the previous data
        self._candidate_pool.release_all()
        pool.release_all()
        self._from_set.clear()
        self._to_set.clear()
        out.clear()

        self._phrase_begin_set()
        self.last_stats.seeds = len(self._from_set)
        self._log(f"[PhraseExtractor] Begin set size: {len(self._from_set)}", verbose)

        while self._from_set:
            if self.max_iterations is not None and self.last_stats.iterations >= self.max_iterations:
                self.last_stats.truncated = True
                self._log(
                    f"[PhraseExtractor] Stopping after {self.max_iterations} iteration(s) "
                    f"with {len(self._from_set)} candidate(s) left.",
                    verbose,
                )
                break

            self.last_stats.iterations += 1
            self._log(
                f"[PhraseExtractor] Level {self.last_stats.iterations}: "
                f"{len(self._from_set)} candidate(s).",
                verbose,
            )
            self._do_iteration(pool)
            self._from_set, self._to_set = self._to_set, self._from_set
            self._to_set.clear()

        self._from_set.clear()
        self.last_stats.candidates = len(self._candidate_pool)
        self.last_stats.phrases = len(out)
        self._document = None
        return out

    # ------------------------------------------------------------------
    # Seeds
    # ------------------------------------------------------------------
    def _phrase_begin_set(self) -> None:
        """Fill the frontier with single-word candidates that can start a phrase."""
        document = self._document
        assert document is not None

        for word in document.vocabulary():
            if document.tf(word) <= 1 or document.is_stopword(word):
                continue

            index = document.word_index(word)
            adjacent = left_adjacent(document, index, 0)

            self._log(
                f"[PhraseExtractor]   left of '{document.word_str(word)}': "
                f"major={self._word_repr(adjacent)}, entropy={adjacent.entropy:.4f}",
                self._verbose,
            )

            if is_boundary(adjacent, self.boundary_threshold):
                candidate = self._candidate_pool.alloc()
                candidate.words.append(word)
                candidate.index.extend(index)
                self._from_set.append(candidate)

    # ------------------------------------------------------------------
    # One BFS level
    # ------------------------------------------------------------------
    def _do_iteration(self, phrase_pool: Pool[Phrase]) -> None:
        document = self._document
        assert document is not None

        while self._from_set:
            candidate = self._from_set.pop()
            right = right_adjacent(document, candidate.index)

            if self._verbose:
                self._log(
                    f"[PhraseExtractor]   right of '{self._candidate_string(candidate)}': "
                    f"major={self._word_repr(right)}, entropy={right.entropy:.4f}"
                )

            if self._should_extend(right):
                self._to_set.append(self._extend(candidate, right.major_word))

            if self.require_right_boundary and not is_boundary(right, self.boundary_threshold):
                continue

            # Left side of the whole candidate, not of its last word
            left = left_adjacent(document, candidate.index, len(candidate.words) - 1)
            if len(candidate.index) >= self.min_occurrences and is_boundary(left, self.boundary_threshold):
                self._emit(candidate, phrase_pool)

    def _should_extend(self, right: Adjacent) -> bool:
        document = self._document
        major = right.major_word
        if major is None:
            return False
        return (
            not document.is_stopword(major)
            and document.tf(major) > self.min_extension_tf
            and is_phrase(right, self.shift_threshold)
        )

    def _extend(self, candidate: PhraseCandidate, next_word: int) -> PhraseCandidate:
        document = self._document
        last = document.size() - 1

        extended = self._candidate_pool.alloc()
        extended.words.extend(candidate.words)
        extended.words.append(next_word)
        for pos in candidate.index:
            if pos < last and document.word(pos + 1) == next_word:
                extended.index.append(pos + 1)
        return extended

    def _emit(self, candidate: PhraseCandidate, phrase_pool: Pool[Phrase]) -> None:
        document = self._document

        phrase = phrase_pool.alloc()
        phrase.document = document
        phrase.words = list(candidate.words)
        phrase.occurrences = len(candidate.index)
        phrase.tf = phrase.occurrences / (EPSILON + document.size())
        self._phrases.append(phrase)

        self._log(
            f"[PhraseExtractor]   phrase added: '{phrase.phrase_string()}' "
            f"(occurrences={phrase.occurrences}, tf={phrase.tf:.4f})",
            self._verbose,
        )

    def _word_repr(self, adjacent: Adjacent) -> str:
        if adjacent.major_word is None:
            return "<none>"
        return self._document.word_str(adjacent.major_word)

    def _candidate_string(self, candidate: PhraseCandidate) -> str:
        return self._document.phrase_string(candidate.words)
