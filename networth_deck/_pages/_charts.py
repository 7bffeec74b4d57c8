"""_charts.py

Isolation for chart rendering.

A single bad data point (``NaN``, ``inf``, a missing column) makes plotly
raise deep inside figure construction. Every chart on the asset pages is
drawn through `chart_guard`, so such a failure replaces *that* chart with an
error box and the rest of the page keeps rendering.
"""

from __future__ import annotations

import math
from contextlib import contextmanager
from typing import Callable, Iterator

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from networth_deck.utils.logger import get_logger

logger = get_logger(__name__)

Fallback = Callable[[Exception], None]


def _default_fallback(target) -> Fallback:
    def _show(exc: Exception) -> None:
        target.error(f"⚠️ Chart rendering error\n\n{exc or 'Unknown error occurred'}")

    return _show


@contextmanager
def chart_guard(name: str, fallback: Fallback | None = None) -> Iterator[object]:
    """Run a chart-drawing block in its own container.

    Parameters
    ----------
    name : str
        Used in the log line only.
    fallback : callable, optional
        Called with the exception instead of the default error box.

    Yields
    ------
    The Streamlit container the block should draw into.
    """
    container = st.container()
    try:
        yield container
    except Exception as exc:
        logger.error("Chart %r failed to render: %s", name, exc, exc_info=True)
        (fallback or _default_fallback(container))(exc)


def finite_frame(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Copy of *df* with NaN / ±inf in *columns* replaced by 0."""
    out = df.copy()
    for col in columns:
        if col not in out.columns:
            out[col] = 0.0
        out[col] = (
            pd.to_numeric(out[col], errors="coerce")
            .replace([math.inf, -math.inf], float("nan"))
            .fillna(0.0)
        )
    return out


def plot(name: str, build: Callable[[], go.Figure], height: int = 400) -> None:
    """Build a figure and show it; any failure stays inside the guard."""
    with chart_guard(name) as box:
        fig = build()
        fig.update_layout(height=height, margin=dict(t=40, b=40, l=40, r=40))
        box.plotly_chart(fig, use_container_width=True)
