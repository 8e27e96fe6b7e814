"""
boundaryphraseminer.smoke_test

Minimal end-to-end smoke test for BoundaryPhraseMiner.

Usage (from any directory where the env is active):

    python -m boundaryphraseminer.smoke_test

What it does:
- Creates a tiny in-memory corpus (3 short English documents).
- Runs KeyphraseMiner with the dependency-free regex tokenizer.
- Runs PhraseExtractor directly on a hand-made token sequence.
- Prints a short summary to stdout.
"""

from __future__ import annotations

from typing import Any, Dict

from .document import Document
from .keyphrase_miner import KeyphraseMiner, rank_phrases
from .phrase_extractor import PhraseExtractor


def run_smoke_test(verbose: bool = True) -> Dict[str, Any]:
    """
    Run a small end-to-end test of the main pipeline.

    Returns
    -------
    result : dict
        A dictionary containing:
        - "docs"
        - "result"   (KeyphraseResult)
        - "phrases"  (phrases from the hand-made token document)
    """
    docs = [
        # Doc 1 – customer feedback notes
        """
        Customer feedback shows that the onboarding flow is slow. In the last
        survey, customer feedback about pricing was mixed, while customer
        feedback on support stayed positive. Every quarter we read customer
        feedback again and rank the onboarding flow issues. Teams asked why
        the onboarding flow needs six steps; product said the onboarding flow
        will shrink. Good customer feedback helps.
        """,
        # Doc 2 – research notes
        """
        A neural topic model learns topics from text. Unlike a classic model,
        the neural topic model uses embeddings. We trained one neural topic
        model per corpus, then compared each neural topic model against LDA.
        Results: every neural topic model beat LDA on coherence, yet LDA was
        faster. Future work will tune the neural topic model further.
        """,
        # Doc 3 – a document with nothing repeated
        """
        Short notes without any repeated content words at all.
        """,
    ]

    if verbose:
        print("[smoke_test] Starting BoundaryPhraseMiner smoke test...")
        print(f"[smoke_test] Using {len(docs)} small demo documents.")

    # -------------------------------------------------------
    # 1) Texts → keyphrases
    # -------------------------------------------------------
    miner = KeyphraseMiner(method="regex", logger=print if verbose else None)
    result = miner.mine(docs, top_n=5, verbose=verbose)

    if verbose:
        for doc_index in range(len(docs)):
            print(f"[smoke_test] Doc {doc_index} top phrases: {result.top_phrases(5, doc_index)}")
        print(f" # --- config ---\n{result.config}")

    # -------------------------------------------------------
    # 2) Tokens → phrases with the core extractor
    # -------------------------------------------------------
    tokens = ["A", "B", "A", "B", "C", "A", "B"]
    document = Document.from_tokens(tokens)
    extractor = PhraseExtractor()
    phrases = rank_phrases(extractor.extract(document))

    if verbose:
        for phrase in phrases:
            print(f"[smoke_test] {phrase.phrase_string()!r}: tf={phrase.tf:.4f}")
        print("[smoke_test] Smoke test completed successfully ✅")

    return {
        "docs": docs,
        "result": result,
        "phrases": phrases,
    }


def main() -> None:
    """
    CLI entrypoint for: python -m boundaryphraseminer.smoke_test
    """
    run_smoke_test(verbose=True)


if __name__ == "__main__":
    main()
