from __future__ import annotations

import plotly.graph_objects as go
import pytest

from boundaryphraseminer.keyphrase_miner import KeyphraseMiner
from boundaryphraseminer.phrase_viz import plot_keyphrase_bar, plot_keyphrase_treemap


def _make_result():
    miner = KeyphraseMiner(method="regex", stopwords=[], require_right_boundary=False)
    return miner.mine(["alpha beta alpha beta gamma alpha beta"])


def test_bar_chart_for_one_document():
    fig = plot_keyphrase_bar(_make_result(), doc_index=0)

    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 1
    assert fig.data[0].orientation == "h"
    assert set(fig.data[0].y) == {"alpha", "alpha beta"}


def test_bar_chart_rejects_empty_selection():
    with pytest.raises(ValueError):
        plot_keyphrase_bar(_make_result(), doc_index=5)


def test_treemap():
    fig = plot_keyphrase_treemap(_make_result())

    assert isinstance(fig, go.Figure)
    assert fig.data[0].type == "treemap"


def test_treemap_rejects_empty_result():
    empty = KeyphraseMiner(method="regex").mine([])

    with pytest.raises(ValueError):
        plot_keyphrase_treemap(empty)
