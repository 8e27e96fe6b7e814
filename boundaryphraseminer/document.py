"""
document.py

Read-only tokenized document view consumed by the phrase extractor, plus the
builders that turn raw text into such documents.

Main pieces
-----------
- Document         → word-id sequence, inverted index, term frequencies,
                     stopword flags and id → string lookup for ONE document.
- DocumentBuilder  → tokenization + stopword flagging with a regex, NLTK or
                     spaCy backend, optional Markdown cleanup, shared
                     StringTable across the documents it builds.

Quick usage
-----------
    from boundaryphraseminer import Document, DocumentBuilder

    doc = Document.from_tokens(["neural", "topic", "model", "is", "a", ...])

    builder = DocumentBuilder(method="regex", clean_markdown=True)
    doc = builder.build("# Notes\\n\\nCustomer feedback drives the roadmap...")
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple
import re

from .string_table import StringTable


DEFAULT_STOPWORDS: FrozenSet[str] = frozenset(
    """
    a about above after again against all am an and any are as at be because
    been before being below between both but by can could did do does doing
    down during each few for from further had has have having he her here hers
    herself him himself his how i if in into is it its itself just me more most
    my myself no nor not now of off on once only or other our ours ourselves
    out over own same she should so some such than that the their theirs them
    themselves then there these they this those through to too under until up
    very was we were what when where which while who whom why will with would
    you your yours yourself yourselves
    """.split()
)


class Document:
    """
    Immutable view over one tokenized document.

    Word ids are dense integers handed out by a :class:`StringTable`.
    Positions are 0-based token ordinals in ``[0, size())``.

    The extractor only relies on:
    ``size``, ``word``, ``word_index``, ``tf``, ``is_stopword``, ``word_str``
    and ``words_size``.
    """

    def __init__(
        self,
        word_ids: Sequence[int],
        string_table: StringTable,
        stopword_ids: Iterable[int] = (),
        separator: str = " ",
    ) -> None:
        """
        Parameters
        ----------
        word_ids:
            Token sequence as word ids (already interned in `string_table`).
        string_table:
            Interning table used to resolve ids back to strings. It may hold
            more words than this document uses (e.g. when shared by a
            DocumentBuilder).
        stopword_ids:
            Word ids to be treated as stopwords.
        separator:
            String used to join words when rendering a phrase. Use ``""``
            for text written without spaces between words (e.g. Chinese).
        """
        self._words: List[int] = list(word_ids)
        self._string_table = string_table
        self._stopwords: Set[int] = set(stopword_ids)
        self.separator = separator

        self._index: Dict[int, List[int]] = {}
        for pos, word_id in enumerate(self._words):
            self._index.setdefault(word_id, []).append(pos)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def from_tokens(
        cls,
        tokens: Iterable[str],
        stopwords: Optional[Iterable[str]] = None,
        *,
        separator: str = " ",
        string_table: Optional[StringTable] = None,
    ) -> "Document":
        """
        Build a document from already-tokenized text.

        Parameters
        ----------
        tokens:
            Token strings in document order.
        stopwords:
            Token strings to flag as stopwords. ``None`` means no stopwords.
        separator:
            Phrase rendering separator (see :class:`Document`).
        string_table:
            Optional table to intern into. A fresh one is created otherwise.
        """
        table = string_table if string_table is not None else StringTable()
        word_ids = [table.get_or_insert(tok) for tok in tokens]

        stopword_ids: Set[int] = set()
        if stopwords:
            for word in stopwords:
                word_id = table.get_id(word)
                if word_id is not None:
                    stopword_ids.add(word_id)

        return cls(word_ids, table, stopword_ids, separator=separator)

    # ------------------------------------------------------------------
    # Document contract
    # ------------------------------------------------------------------
    def size(self) -> int:
        return len(self._words)

    def words_size(self) -> int:
        """Size of the vocabulary this document's ids are drawn from."""
        return len(self._string_table)

    def word(self, pos: int) -> int:
        if pos < 0:
            raise IndexError(f"position must be non-negative, got {pos}")
        return self._words[pos]

    def word_index(self, word_id: int) -> List[int]:
        return self._index.get(word_id, [])

    def tf(self, word_id: int) -> int:
        return len(self._index.get(word_id, ()))

    def is_stopword(self, word_id: int) -> bool:
        return word_id in self._stopwords

    def word_str(self, word_id: int) -> str:
        return self._string_table.get_str(word_id)

    # ------------------------------------------------------------------
    # Conveniences
    # ------------------------------------------------------------------
    @property
    def string_table(self) -> StringTable:
        return self._string_table

    @property
    def words(self) -> Tuple[int, ...]:
        return tuple(self._words)

    def vocabulary(self) -> List[int]:
        """Distinct word ids occurring in this document, ascending."""
        return sorted(self._index)

    def phrase_string(self, word_ids: Iterable[int]) -> str:
        return self.separator.join(self.word_str(w) for w in word_ids)

    def check_invariants(self) -> None:
        """
        Assert that the inverted index agrees with the word sequence.

        Raises
        ------
        AssertionError
            If a position listed in ``word_index(w)`` does not hold ``w``,
            if positions are not strictly increasing, or if the index does
            not cover every token exactly once.
        """
        covered = 0
        for word_id, positions in self._index.items():
            assert all(a < b for a, b in zip(positions, positions[1:])), (
                f"word_index({word_id}) is not strictly increasing"
            )
            for pos in positions:
                assert self._words[pos] == word_id, (
                    f"word_index({word_id}) lists position {pos} holding {self._words[pos]}"
                )
            covered += len(positions)
        assert covered == len(self._words), "word_index does not cover every position"

    def __len__(self) -> int:
        return len(self._words)

    def __repr__(self) -> str:
        return f"Document(size={self.size()}, vocabulary={len(self._index)})"


# ---------------------------------------------------------------------------
# ---------- DocumentBuilder – raw text → Document ----------
# ---------------------------------------------------------------------------


class DocumentBuilder:
    """
    Tokenize raw text and flag stopwords to produce :class:`Document` views.

    Backends
    --------
    - ``"regex"`` (default): dependency-free word regex, stopwords from
      `stopwords` or :data:`DEFAULT_STOPWORDS`.
    - ``"nltk"``: Treebank tokenizer, stopwords from the NLTK corpus.
    - ``"spacy"``: spaCy tokenizer, stopwords from ``token.is_stop``.

    All documents produced by one builder share the same StringTable, so
    word ids can be compared across them.
    """

    _token_re = re.compile(r"\w+(?:[-'’]\w+)*", re.UNICODE)
    _punct_re = re.compile(r"^\W+$", re.UNICODE)

    def __init__(
        self,
        method: str = "regex",
        spacy_model: str = "en_core_web_sm",
        stopwords: Optional[Iterable[str]] = None,
        lowercase: bool = True,
        clean_markdown: bool = False,
        separator: str = " ",
    ) -> None:
        """
        Parameters
        ----------
        method:
            ``"regex"``, ``"nltk"`` or ``"spacy"``.
        spacy_model:
            Name of the spaCy model used when ``method="spacy"``.
        stopwords:
            Explicit stopword strings. Overrides the backend's own list.
        lowercase:
            Lowercase tokens before interning.
        clean_markdown:
            Convert Markdown-ish input to plain text before tokenizing.
        separator:
            Phrase rendering separator passed to every Document.
        """
        self.method = method.lower()
        self.spacy_model = spacy_model
        self.lowercase = lowercase
        self.clean_markdown = clean_markdown
        self.separator = separator
        self.string_table = StringTable()

        self._nlp = None
        self._tokenizer = None
        if self.method == "regex":
            pass
        elif self.method == "nltk":
            self._tokenizer = self._load_nltk_tokenizer()
        elif self.method == "spacy":
            self._nlp = self._load_spacy_model(spacy_model)
        else:
            raise ValueError("method must be 'regex', 'nltk' or 'spacy'")

        if stopwords is not None:
            self.stopwords: Optional[FrozenSet[str]] = frozenset(
                self._normalize(w) for w in stopwords
            )
        elif self.method == "regex":
            self.stopwords = DEFAULT_STOPWORDS
        elif self.method == "nltk":
            self.stopwords = self._load_nltk_stopwords()
        else:
            # spaCy flags stopwords per token
            self.stopwords = None

        # Markdown footnotes / references
        self._md_footnote_ref_re = re.compile(r"\[\^?[0-9a-zA-Z_-]+\](?!\()")
        self._md_footnote_def_re = re.compile(r"^\[\^?[0-9a-zA-Z_-]+\]:\s+.*$", re.MULTILINE)
        self._md_reference_def_re = re.compile(r"^\[[^\]]+\]:\s+.*$", re.MULTILINE)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def build(self, text: str) -> Document:
        """Tokenize one text and return its Document."""
        if self.clean_markdown:
            text = self._clean_markdown_text(text)

        tokens, stop_tokens = self.tokenize(text)
        return Document.from_tokens(
            tokens,
            stopwords=stop_tokens,
            separator=self.separator,
            string_table=self.string_table,
        )

    def build_many(self, texts: Iterable[str]) -> List[Document]:
        return [self.build(text) for text in texts]

    def tokenize(self, text: str) -> Tuple[List[str], Set[str]]:
        """
        Split `text` into normalized tokens.

        Returns
        -------
        tokens:
            Normalized token strings in document order.
        stop_tokens:
            Subset of `tokens` (as a set) flagged as stopwords.
        """
        if self.method == "spacy":
            doc = self._nlp(text)  # type: ignore[misc]
            tokens: List[str] = []
            stop_tokens: Set[str] = set()
            for token in doc:
                if token.is_space or token.is_punct:
                    continue
                norm = self._normalize(token.text)
                tokens.append(norm)
                if self.stopwords is None:
                    if token.is_stop:
                        stop_tokens.add(norm)
                elif norm in self.stopwords:
                    stop_tokens.add(norm)
            return tokens, stop_tokens

        if self.method == "nltk":
            raw = []
            for line in text.splitlines():
                raw.extend(self._tokenizer.tokenize(line))  # type: ignore[union-attr]
            tokens = [self._normalize(t) for t in raw if not self._punct_re.match(t)]
        else:
            tokens = [self._normalize(t) for t in self._token_re.findall(text)]

        stopwords = self.stopwords or frozenset()
        return tokens, {t for t in tokens if t in stopwords}

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _normalize(self, token: str) -> str:
        token = token.strip()
        return token.lower() if self.lowercase else token

    def _clean_markdown_text(self, text: str) -> str:
        """
        Convert Markdown-ish text to plain text.

        - Drops reference-style link and footnote definition lines.
        - Drops inline footnote markers such as [^1], [1], [note-id].
        - Uses 'markdown' + 'beautifulsoup4' when installed to strip
          formatting and code blocks, otherwise a regex-only cleanup.

        Newlines are kept so that headings do not glue onto the following
        sentence.
        """
        without_defs = self._md_reference_def_re.sub("", text)
        without_defs = self._md_footnote_def_re.sub("", without_defs)
        without_defs = self._md_footnote_ref_re.sub("", without_defs)
        without_defs = re.sub(r"\n{3,}", "\n\n", without_defs)

        try:
            import markdown as _markdown
        except ImportError:
            crude = re.sub(r"\[([^\]]+)\]\([^)]+\)", r"\1", without_defs)
            crude = re.sub(r"[#*_`~>]+", " ", crude)
            crude = re.sub(r"[ \t]+", " ", crude)
            return crude.strip()

        html = _markdown.markdown(without_defs, output_format="html")

        try:
            from bs4 import BeautifulSoup
        except ImportError:
            plain = re.sub(r"<[^>]+>", "\n", html)
        else:
            soup = BeautifulSoup(html, "html.parser")
            for tag in soup.find_all(["code", "pre"]):
                tag.decompose()
            plain = soup.get_text(separator="\n")

        plain = re.sub(r"[ \t]+", " ", plain)
        plain = re.sub(r"\n{3,}", "\n\n", plain)
        return plain.strip()

    # ---------------------------------------------------------------------
    # Lazy back-end loaders (keep heavy imports optional)
    # ---------------------------------------------------------------------
    @staticmethod
    def _load_spacy_model(model_name: str):
        """Load a spaCy model, downloading it on first use."""
        import subprocess
        import sys

        try:
            import spacy
        except ImportError as e:
            raise ImportError(
                "spaCy is required for method='spacy'. Install with 'pip install spacy'."
            ) from e

        try:
            return spacy.load(model_name)
        except OSError:
            print(f"[DocumentBuilder] spaCy model '{model_name}' not found. Downloading…")
            subprocess.run([sys.executable, "-m", "spacy", "download", model_name], check=True)
            return spacy.load(model_name)

    @staticmethod
    def _load_nltk_tokenizer():
        try:
            from nltk.tokenize import TreebankWordTokenizer
        except ImportError as e:
            raise ImportError(
                "NLTK is required for method='nltk'. Install with 'pip install nltk'."
            ) from e
        return TreebankWordTokenizer()

    @staticmethod
    def _load_nltk_stopwords() -> FrozenSet[str]:
        import nltk

        nltk.download("stopwords", quiet=True)
        from nltk.corpus import stopwords

        return frozenset(stopwords.words("english"))
