"""
BoundaryPhraseMiner

Lexicon-free keyphrase extraction with neighbour-entropy phrase boundaries.

High-level API
--------------
- Document / DocumentBuilder → tokenized, interned single-document views
- PhraseExtractor            → entropy-boundary BFS phrase extraction
- KeyphraseMiner             → texts → ranked phrases DataFrame
- Visualization helpers:
    * plot_keyphrase_bar, plot_keyphrase_treemap
"""

from importlib.metadata import PackageNotFoundError, version


# Core APIs
from .string_table import StringTable
from .document import DEFAULT_STOPWORDS, Document, DocumentBuilder
from .pool import Pool
from .adjacency import (
    Adjacent,
    calc_adjacent,
    left_adjacent,
    right_adjacent,
    is_boundary,
    is_phrase,
)
from .phrase_extractor import ExtractionStats, Phrase, PhraseCandidate, PhraseExtractor
from .keyphrase_miner import KeyphraseMiner, KeyphraseResult, rank_phrases, remove_subsumed

# Visualization APIs
from .phrase_viz import plot_keyphrase_bar, plot_keyphrase_treemap


# ---------------------------------------------------------------------
# Runtime version (single source of truth = pyproject.toml)
# ---------------------------------------------------------------------
try:
    __version__ = version("boundaryphraseminer")
except PackageNotFoundError:
    # Fallback when running directly from a clone without installation
    __version__ = "0.0.0"

__all__ = [
    "StringTable",
    "DEFAULT_STOPWORDS",
    "Document",
    "DocumentBuilder",
    "Pool",
    "Adjacent",
    "calc_adjacent",
    "left_adjacent",
    "right_adjacent",
    "is_boundary",
    "is_phrase",
    "ExtractionStats",
    "Phrase",
    "PhraseCandidate",
    "PhraseExtractor",
    "KeyphraseMiner",
    "KeyphraseResult",
    "rank_phrases",
    "remove_subsumed",
    "plot_keyphrase_bar",
    "plot_keyphrase_treemap",
    "__version__",
]
