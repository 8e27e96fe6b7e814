from __future__ import annotations

import random
from typing import Dict, List, Tuple

import pytest

from boundaryphraseminer.document import Document
from boundaryphraseminer.phrase_extractor import Phrase, PhraseCandidate, PhraseExtractor
from boundaryphraseminer.pool import Pool


def _example_document() -> Document:
    # ids: A=0, B=1, C=2
    return Document.from_tokens(["A", "B", "A", "B", "C", "A", "B"])


def _random_document(seed: int, size: int = 300) -> Document:
    rng = random.Random(seed)
    vocab = ["alpha", "beta", "gamma", "delta", "eps", "the", "of"]
    weights = [5, 4, 3, 3, 2, 4, 2]
    tokens = rng.choices(vocab, weights=weights, k=size)
    # Plant a recurring phrase in varied contexts
    for start in range(0, size - 3, 23):
        tokens[start : start + 3] = ["neural", "topic", "model"]
    return Document.from_tokens(tokens, stopwords={"the", "of"})


def _phrase_keys(phrases: List[Phrase]) -> List[Tuple[Tuple[int, ...], int]]:
    return sorted((tuple(p.words), p.occurrences) for p in phrases)


def _live_candidates(extractor: PhraseExtractor) -> List[PhraseCandidate]:
    pool = extractor._candidate_pool
    return [pool[i] for i in range(len(pool))]


def test_example_sequence_emits_two_word_phrase():
    doc = _example_document()
    extractor = PhraseExtractor()

    phrases = extractor.extract(doc)

    assert [p.phrase_string() for p in phrases] == ["A B"]
    phrase = phrases[0]
    assert phrase.words == [0, 1]
    assert phrase.occurrences == 3
    assert phrase.tf == pytest.approx(3 / 7)
    assert phrase.document is doc


def test_example_sequence_statistics():
    extractor = PhraseExtractor()
    extractor.extract(_example_document())

    stats = extractor.last_stats
    assert stats.seeds == 1  # only "A" has diverse left neighbours
    assert stats.iterations == 4  # A → A B → A B A → A B A B
    assert stats.candidates == 4
    assert stats.phrases == 1
    assert stats.truncated is False


def test_major_neighbour_tie_prefers_lowest_word_id():
    extractor = PhraseExtractor()
    extractor.extract(_example_document())

    words = [c.words for c in _live_candidates(extractor)]
    # "A B" is followed once by A (id 0) and once by C (id 2)
    assert [0, 1, 0] in words
    assert [0, 1, 2] not in words


def test_candidate_index_tracks_last_word_positions():
    extractor = PhraseExtractor()
    extractor.extract(_example_document())

    by_words: Dict[Tuple[int, ...], PhraseCandidate] = {
        tuple(c.words): c for c in _live_candidates(extractor)
    }
    assert by_words[(0,)].index == [0, 2, 5]
    assert by_words[(0, 1)].index == [1, 3, 6]
    assert by_words[(0, 1)].starts() == [0, 2, 5]
    assert by_words[(0, 1, 0)].index == [2]
    assert by_words[(0, 1, 0, 1)].starts() == [0]


def test_without_right_boundary_left_test_alone_decides():
    extractor = PhraseExtractor(require_right_boundary=False)

    phrases = extractor.extract(_example_document())

    assert [(p.phrase_string(), p.occurrences) for p in phrases] == [("A", 3), ("A B", 3)]


def test_min_occurrences_filters_rare_candidates():
    extractor = PhraseExtractor(require_right_boundary=False, min_occurrences=1)

    phrases = extractor.extract(_example_document())

    assert "A B A" not in [p.phrase_string() for p in phrases]  # left side is empty
    extractor = PhraseExtractor(require_right_boundary=False, min_occurrences=4)
    assert extractor.extract(_example_document()) == []


def test_stopword_seed_is_ignored():
    doc = Document.from_tokens(["A", "B", "A", "B", "C", "A", "B"], stopwords={"A"})

    assert PhraseExtractor().extract(doc) == []


def test_stopword_right_neighbour_blocks_extension():
    doc = Document.from_tokens(["A", "B", "A", "B", "C", "A", "B"], stopwords={"B"})
    extractor = PhraseExtractor()

    assert extractor.extract(doc) == []
    assert extractor.last_stats.seeds == 1
    assert extractor.last_stats.iterations == 1


def test_empty_document_yields_no_phrases():
    extractor = PhraseExtractor()

    assert extractor.extract(Document.from_tokens([])) == []
    assert extractor.last_stats.seeds == 0
    assert extractor.last_stats.iterations == 0


def test_max_iterations_truncates_growth():
    extractor = PhraseExtractor(max_iterations=1)

    phrases = extractor.extract(_example_document())

    assert phrases == []
    assert extractor.last_stats.iterations == 1
    assert extractor.last_stats.truncated is True


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_properties_on_random_documents(seed):
    doc = _random_document(seed)
    extractor = PhraseExtractor()

    phrases = extractor.extract(doc)

    assert extractor.last_stats.iterations <= doc.size()
    for phrase in phrases:
        assert 0.0 < phrase.tf <= 1.0
        assert phrase.occurrences >= 2
        assert phrase.tf == pytest.approx(phrase.occurrences / doc.size())
        assert phrase.document is doc


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_extended_candidates_never_gain_occurrences(seed):
    doc = _random_document(seed)
    extractor = PhraseExtractor()
    extractor.extract(doc)

    candidates = {tuple(c.words): c for c in _live_candidates(extractor)}
    for words, child in candidates.items():
        if len(words) == 1:
            continue
        parent = candidates[words[:-1]]
        assert len(child.index) <= len(parent.index)
        assert set(child.index) <= {p + 1 for p in parent.index}
        for pos in child.index:
            assert doc.word(pos) == words[-1]


def test_planted_phrase_is_found():
    doc = _random_document(0)
    phrases = PhraseExtractor().extract(doc)

    rendered = [p.phrase_string() for p in phrases]
    assert any(r.startswith("neural topic model") for r in rendered)


def test_extraction_is_deterministic():
    doc = _random_document(5)
    extractor = PhraseExtractor()

    first = _phrase_keys(extractor.extract(doc))
    second = _phrase_keys(extractor.extract(doc))

    assert first == second
    assert first == _phrase_keys(PhraseExtractor().extract(doc))


def test_second_extract_only_references_second_document():
    first_doc = _example_document()
    second_doc = Document.from_tokens(["x", "y", "x", "y", "z", "x", "y"])
    extractor = PhraseExtractor()

    extractor.extract(first_doc)
    phrases = extractor.extract(second_doc)

    assert phrases
    assert all(p.document is second_doc for p in phrases)
    assert [p.phrase_string() for p in phrases] == ["x y"]


def test_caller_supplied_pool_and_output_list():
    pool: Pool[Phrase] = Pool(Phrase)
    out: List[Phrase] = [Phrase(words=[42])]
    extractor = PhraseExtractor()

    result = extractor.extract(_example_document(), pool, out)

    assert result is out
    assert len(out) == 1
    assert len(pool) == 1
    assert pool[0] is out[0]


def test_check_document_rejects_inconsistent_index():
    doc = _example_document()
    doc._index[1] = [0, 3, 6]
    extractor = PhraseExtractor(check_document=True)

    with pytest.raises(AssertionError):
        extractor.extract(doc)


def test_verbose_logging_goes_to_callback():
    messages: List[str] = []
    extractor = PhraseExtractor(logger=messages.append)

    extractor.extract(_example_document(), verbose=True)

    assert "[PhraseExtractor] Begin set size: 1" in messages
    assert any("phrase added: 'A B'" in m for m in messages)


def test_quiet_by_default(capsys):
    messages: List[str] = []
    PhraseExtractor(logger=messages.append).extract(_example_document())

    assert messages == []
    assert capsys.readouterr().out == ""


@pytest.mark.parametrize(
    "kwargs",
    [
        {"boundary_threshold": -0.1},
        {"shift_threshold": -1.0},
        {"min_extension_tf": -1},
        {"min_occurrences": 0},
        {"max_iterations": 0},
    ],
)
def test_invalid_configuration(kwargs):
    with pytest.raises(ValueError):
        PhraseExtractor(**kwargs)
