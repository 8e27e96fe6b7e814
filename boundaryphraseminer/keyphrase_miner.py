"""
keyphrase_miner.py

High-level keyphrase mining for BoundaryPhraseMiner:
- Takes raw texts (one document each).
- Builds a Document per text with DocumentBuilder (regex / NLTK / spaCy).
- Runs PhraseExtractor on every document independently.
- Optionally collapses subsumed phrases (shorter phrases fully contained in a
  longer emitted phrase) by subtracting the longer phrase's occurrences.
- Produces a KeyphraseResult with:
    * phrases_df: one row per (document, phrase), ranked
    * phrase_counts: Counter phrase → occurrences summed over documents
    * documents: the Document views (phrases refer back to them)
    * config: parameters used, for reproducibility

No statistic is shared across documents: each document is mined on its own
adjacency structure.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional, Sequence, Tuple

import pandas as pd

from .document import Document, DocumentBuilder
from .phrase_extractor import Phrase, PhraseExtractor


PHRASE_COLUMNS = [
    "doc_index",
    "phrase",
    "words",
    "n_words",
    "occurrences",
    "tf",
    "discovery_rank",
]


# ---------------------------------------------------------------------
# Dataclass for mining results
# ---------------------------------------------------------------------


@dataclass
class KeyphraseResult:
    """
    Output of :meth:`KeyphraseMiner.mine`.

    Attributes
    ----------
    phrases_df:
        One row per extracted phrase per document. Columns:
            - 'doc_index'      : index of the source text
            - 'phrase'         : rendered phrase string
            - 'words'          : tuple of word strings
            - 'n_words'        : phrase length in words
            - 'occurrences'    : occurrence count in the document
            - 'tf'             : occurrences / document length
            - 'discovery_rank' : position in the extractor's discovery order
    phrase_counts:
        Phrase string → occurrences summed over all documents.
    documents:
        The Document built for each input text, aligned with doc_index.
    config:
        Parameters used for this run (tokenizer, thresholds, ranking).
    """

    phrases_df: pd.DataFrame
    phrase_counts: Counter
    documents: List[Document]
    config: Dict[str, Any]

    def top_phrases(self, n: int = 10, doc_index: Optional[int] = None) -> List[str]:
        df = self.phrases_df
        if doc_index is not None:
            df = df[df["doc_index"] == doc_index]
        return df["phrase"].head(n).tolist()


# ---------------------------------------------------------------------
# Ranking helpers
# ---------------------------------------------------------------------


def rank_phrases(phrases: Iterable[Phrase], top_n: Optional[int] = None) -> List[Phrase]:
    """
    Sort phrases by tf descending; longer phrases first on ties, then by
    phrase string. Returns a new list (at most `top_n` items if given).
    """
    ranked = sorted(phrases, key=lambda p: (-p.tf, -len(p.words), p.phrase_string()))
    if top_n is not None:
        ranked = ranked[:top_n]
    return ranked


def _is_sublist(shorter: Sequence[int], longer: Sequence[int]) -> bool:
    len_shorter, len_longer = len(shorter), len(longer)
    if len_shorter == 0 or len_shorter >= len_longer:
        return False
    for start in range(len_longer - len_shorter + 1):
        if list(longer[start : start + len_shorter]) == list(shorter):
            return True
    return False


def remove_subsumed(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Collapse phrases of ONE document that are contained in longer ones.

    If a shorter phrase is a contiguous sub-sequence of a longer phrase,
    the longer phrase's occurrences are subtracted from the shorter one's.
    Rows whose count drops to zero or below are removed.

    Example
    -------
        'topic model'        : 5
        'neural topic model' : 3
    becomes
        'topic model'        : 2
        'neural topic model' : 3
    """
    # Same word sequence can be emitted twice (from different seeds); merge first.
    merged: Dict[Tuple[int, ...], Dict[str, Any]] = {}
    for row in rows:
        key = tuple(row["word_ids"])
        if key in merged:
            merged[key]["occurrences"] = max(merged[key]["occurrences"], row["occurrences"])
        else:
            merged[key] = dict(row)

    ordered = sorted(merged.values(), key=lambda r: len(r["word_ids"]), reverse=True)
    counts = {tuple(r["word_ids"]): r["occurrences"] for r in ordered}

    for i, longer in enumerate(ordered):
        longer_key = tuple(longer["word_ids"])
        longer_count = counts.get(longer_key, 0)
        if longer_count <= 0:
            continue
        for shorter in ordered[i + 1 :]:
            shorter_key = tuple(shorter["word_ids"])
            if counts.get(shorter_key, 0) <= 0:
                continue
            if _is_sublist(shorter_key, longer_key):
                counts[shorter_key] -= longer_count

    kept = []
    for row in rows:
        key = tuple(row["word_ids"])
        if key not in merged:
            continue
        count = counts.get(key, 0)
        if count > 0:
            new_row = dict(merged.pop(key))
            new_row["occurrences"] = count
            kept.append(new_row)
    return kept


# ---------------------------------------------------------------------
# KeyphraseMiner – texts → ranked phrases
# ---------------------------------------------------------------------


class KeyphraseMiner:
    """
    End-to-end keyphrase mining over a list of texts.

    Each text becomes one Document; the entropy-boundary PhraseExtractor is
    run on each document separately and the results are collected in a
    pandas DataFrame.
    """

    def __init__(
        self,
        method: str = "regex",
        spacy_model: str = "en_core_web_sm",
        stopwords: Optional[Iterable[str]] = None,
        lowercase: bool = True,
        clean_markdown: bool = False,
        separator: str = " ",
        *,
        boundary_threshold: float = 0.5,
        shift_threshold: float = 2.0,
        min_extension_tf: int = 2,
        min_occurrences: int = 2,
        require_right_boundary: bool = True,
        max_iterations: Optional[int] = None,
        builder: Optional[DocumentBuilder] = None,
        logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        """
        Parameters
        ----------
        method, spacy_model, stopwords, lowercase, clean_markdown, separator:
            Tokenization options forwarded to :class:`DocumentBuilder`.
            Ignored when `builder` is given.
        boundary_threshold, shift_threshold, min_extension_tf,
        min_occurrences, require_right_boundary, max_iterations:
            Extraction options forwarded to :class:`PhraseExtractor`.
        builder:
            Pre-configured DocumentBuilder to use instead of creating one.
        logger:
            Optional logging callback used when ``verbose=True`` in
            :meth:`mine`. Falls back to ``print``.
        """
        self.builder = builder or DocumentBuilder(
            method=method,
            spacy_model=spacy_model,
            stopwords=stopwords,
            lowercase=lowercase,
            clean_markdown=clean_markdown,
            separator=separator,
        )
        self.extractor = PhraseExtractor(
            boundary_threshold=boundary_threshold,
            shift_threshold=shift_threshold,
            min_extension_tf=min_extension_tf,
            min_occurrences=min_occurrences,
            require_right_boundary=require_right_boundary,
            max_iterations=max_iterations,
            logger=logger,
        )
        self.logger = logger

    def _log(self, message: str, verbose: bool = True) -> None:
        if not verbose:
            return
        if self.logger is not None:
            self.logger(message)
        else:
            print(message)

    def mine(
        self,
        texts: Sequence[str],
        *,
        top_n: Optional[int] = None,
        sort_by: Literal["tf", "occurrences"] = "tf",
        remove_subsumed_phrases: bool = False,
        verbose: bool = False,
    ) -> KeyphraseResult:
        """
        Mine keyphrases from each text.

        Pipeline:
        1. Build one Document per text.
        2. Extract phrases from each Document.
        3. (Optionally) collapse subsumed phrases per document.
        4. Rank per document and assemble the result DataFrame.

        Parameters
        ----------
        texts:
            Raw documents (sentences, paragraphs, transcripts, ...).
        top_n:
            Keep at most this many phrases per document after ranking.
        sort_by:
            ``"tf"`` or ``"occurrences"``; both sort descending, then longer
            phrases first, then alphabetically.
        remove_subsumed_phrases:
            Apply :func:`remove_subsumed` per document.
        verbose:
            Log progress through the logger callback.
        """
        if sort_by not in {"tf", "occurrences"}:
            raise ValueError("sort_by must be 'tf' or 'occurrences'.")
        if top_n is not None and top_n < 1:
            raise ValueError("top_n must be None or a positive integer.")

        self._log(f"[KeyphraseMiner] Step 1/4 – building {len(texts)} document(s)...", verbose)
        documents = self.builder.build_many(texts)

        self._log("[KeyphraseMiner] Step 2/4 – extracting phrases per document...", verbose)
        rows: List[Dict[str, Any]] = []
        for doc_index, document in enumerate(documents):
            phrases = self.extractor.extract(document, verbose=False)
            doc_rows = [
                {
                    "doc_index": doc_index,
                    "word_ids": tuple(p.words),
                    "occurrences": p.occurrences,
                    "discovery_rank": rank,
                }
                for rank, p in enumerate(phrases)
            ]
            stats = self.extractor.last_stats
            self._log(
                f"[KeyphraseMiner]   doc {doc_index}: {document.size()} tokens, "
                f"{stats.seeds} seeds, {stats.iterations} levels, {len(doc_rows)} phrases.",
                verbose,
            )

            if remove_subsumed_phrases:
                before = len(doc_rows)
                doc_rows = remove_subsumed(doc_rows)
                self._log(
                    f"[KeyphraseMiner] Step 3/4 – doc {doc_index}: "
                    f"{before - len(doc_rows)} subsumed phrase(s) removed.",
                    verbose,
                )

            for row in doc_rows:
                row["phrase"] = document.phrase_string(row["word_ids"])
                row["words"] = tuple(document.word_str(w) for w in row["word_ids"])
                row["n_words"] = len(row["word_ids"])
                row["tf"] = row["occurrences"] / (1e-38 + document.size())

            rows.extend(doc_rows)

        self._log("[KeyphraseMiner] Step 4/4 – ranking phrases.", verbose)
        phrases_df = self._build_phrases_df(rows, sort_by=sort_by, top_n=top_n)

        phrase_counts: Counter = Counter()
        for phrase, count in zip(phrases_df["phrase"], phrases_df["occurrences"]):
            phrase_counts[phrase] += int(count)

        config = {
            "method": self.builder.method,
            "lowercase": self.builder.lowercase,
            "clean_markdown": self.builder.clean_markdown,
            "separator": self.builder.separator,
            **self.extractor.config,
            "top_n": top_n,
            "sort_by": sort_by,
            "remove_subsumed_phrases": remove_subsumed_phrases,
            "n_documents": len(documents),
        }

        self._log(f"[KeyphraseMiner] Done – {len(phrases_df)} phrase row(s).", verbose)
        return KeyphraseResult(
            phrases_df=phrases_df,
            phrase_counts=phrase_counts,
            documents=documents,
            config=config,
        )

    @staticmethod
    def _build_phrases_df(
        rows: List[Dict[str, Any]],
        *,
        sort_by: str,
        top_n: Optional[int],
    ) -> pd.DataFrame:
        if not rows:
            return pd.DataFrame(columns=PHRASE_COLUMNS)

        df = pd.DataFrame(rows)[PHRASE_COLUMNS]
        df = df.sort_values(
            ["doc_index", sort_by, "n_words", "phrase"],
            ascending=[True, False, False, True],
            kind="mergesort",
        )
        if top_n is not None:
            df = df.groupby("doc_index", sort=False).head(top_n)
        return df.reset_index(drop=True)
