"""
phrase_viz.py

Visualization helpers for BoundaryPhraseMiner.

Thin, UI-agnostic Plotly renderers over KeyphraseResult.phrases_df:

- plot_keyphrase_bar      → horizontal bar chart of tf per phrase
- plot_keyphrase_treemap  → document → phrase treemap sized by occurrences

Both return Plotly Figure objects for notebooks, Streamlit, Dash, etc.
"""

from __future__ import annotations

from typing import Optional

import plotly.express as px
import plotly.graph_objects as go

from .keyphrase_miner import KeyphraseResult


# ---------------------------------------------------------------------
# Keyphrase bar chart
# ---------------------------------------------------------------------


def plot_keyphrase_bar(
    result: KeyphraseResult,
    *,
    doc_index: Optional[int] = None,
    max_phrases: int = 20,
    width: int = 800,
    height: Optional[int] = None,
    title: Optional[str] = None,
) -> go.Figure:
    """
    Plot the top phrases by tf as horizontal bars.

    Parameters
    ----------
    result:
        Output of KeyphraseMiner.mine().
    doc_index:
        Restrict to one document. ``None`` plots all documents, colored by
        document.
    max_phrases:
        Number of bars to draw (top by tf).
    width, height:
        Figure size in pixels. Height defaults to 28px per bar.
    title:
        Optional title. If None, a default one is constructed.

    Returns
    -------
    plotly.graph_objects.Figure
    """
    df = result.phrases_df
    if doc_index is not None:
        df = df[df["doc_index"] == doc_index]

    if df.empty:
        raise ValueError("No phrases to plot for the requested selection.")

    df = df.sort_values(["tf", "n_words"], ascending=[False, False]).head(max_phrases).copy()
    df["doc_label"] = "Doc " + df["doc_index"].astype(str)
    # Plotly draws the first category at the bottom
    df = df.iloc[::-1]

    fig = px.bar(
        df,
        x="tf",
        y="phrase",
        orientation="h",
        color="doc_label" if doc_index is None else None,
        hover_data={"occurrences": True, "n_words": True, "doc_label": False},
        labels={"tf": "Term frequency", "phrase": "", "doc_label": "Document"},
        width=width,
        height=height or max(200, 28 * len(df) + 80),
    )

    fig.update_layout(
        title=title or f"Top {len(df)} Keyphrases by Term Frequency",
        plot_bgcolor="white",
        xaxis=dict(showgrid=True, gridcolor="rgb(204, 204, 204)"),
        yaxis=dict(categoryorder="array", categoryarray=df["phrase"].tolist()),
        margin=dict(l=10, r=10, b=30, t=50),
        hoverlabel=dict(font_size=13),
    )
    return fig


# ---------------------------------------------------------------------
# Keyphrase treemap (document → phrases sized by occurrences)
# ---------------------------------------------------------------------


def plot_keyphrase_treemap(
    result: KeyphraseResult,
    *,
    color_continuous_scale: str = "Viridis",
    width: int = 900,
    height: int = 500,
) -> go.Figure:
    """
    Treemap of phrases grouped by document; area = occurrences, color = tf.
    """
    df = result.phrases_df[["doc_index", "phrase", "occurrences", "tf"]].copy()
    if df.empty:
        raise ValueError("No phrases to plot.")

    df["doc_label"] = "Doc " + df["doc_index"].astype(str)

    fig = px.treemap(
        df,
        path=[px.Constant("All Documents"), "doc_label", "phrase"],
        values="occurrences",
        color="tf",
        color_continuous_scale=color_continuous_scale,
        hover_data={"phrase": True, "occurrences": True},
        labels={"occurrences": "Occurrences", "tf": "Term frequency"},
        width=width,
        height=height,
    )

    fig.update_traces(root_color="lightgrey")
    fig.update_layout(margin=dict(t=50, l=25, r=25, b=25))
    return fig
