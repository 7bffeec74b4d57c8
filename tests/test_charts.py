"""Chart isolation: a failing chart never takes the page down."""
from __future__ import annotations

import math

import pandas as pd

from networth_deck._pages._charts import chart_guard, finite_frame, plot


def test_guard_calls_fallback_with_exception():
    seen: list[Exception] = []
    with chart_guard("broken", fallback=seen.append):
        raise ValueError("bad data point")
    assert len(seen) == 1
    assert str(seen[0]) == "bad data point"


def test_guard_passes_through_when_healthy():
    seen: list[Exception] = []
    with chart_guard("fine", fallback=seen.append) as box:
        assert box is not None
    assert seen == []


def test_default_fallback_swallows_error(caplog):
    with chart_guard("default"):
        raise RuntimeError("plotly exploded")
    assert "plotly exploded" in caplog.text


def test_plot_survives_failing_builder():
    def build():
        raise KeyError("value")

    plot("missing-column", build)  # must not raise


def test_finite_frame_replaces_nan_and_inf():
    df = pd.DataFrame({"name": ["a", "b", "c", "d"],
                       "value": [1.0, float("nan"), float("inf"), "oops"]})
    out = finite_frame(df, ["value", "absent"])
    assert out["value"].tolist() == [1.0, 0.0, 0.0, 0.0]
    assert out["absent"].tolist() == [0.0] * 4
    assert not any(math.isnan(x) for x in out["value"])
    assert math.isnan(df["value"][1])  # input untouched
