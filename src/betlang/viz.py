"""Views of sampled outcomes.

Plotly figures are written as standalone HTML files; `sparkline` renders a
sequence as a one-line unicode chart for terminals and markdown summaries.
"""

from __future__ import annotations

from pathlib import Path
from typing import Hashable, Optional, Sequence

import numpy as np
import pandas as pd
from scipy.ndimage import gaussian_filter1d

try:
    import plotly.graph_objects as go
except Exception as e:  # pragma: no cover
    raise ImportError(
        "Plotly is required for betlang.viz. "
        "Install it with: pip install plotly"
    ) from e

from .statistics import frequency_frame

SPARK_CHARS = "▁▂▃▄▅▆▇█"


def sparkline(data: Sequence[float]) -> str:
    if len(data) == 0:
        return ""
    arr = np.asarray(data, dtype=float)
    lo = float(np.min(arr))
    span = float(np.max(arr)) - lo
    out = []
    for v in arr:
        norm = (v - lo) / span if span > 0 else 0.5
        out.append(SPARK_CHARS[min(int(round(norm * 7)), 7)])
    return "".join(out)


def _safe_smooth(y: np.ndarray, sigma: float) -> np.ndarray:
    y = np.asarray(y, dtype=float)
    if y.size < 5 or sigma <= 0:
        return y
    y2 = y.copy()
    if not np.isfinite(y2).all():
        y2 = pd.Series(y2).ffill().bfill().to_numpy(dtype=float)
    return gaussian_filter1d(y2, sigma=float(sigma))


def plot_histogram(
    samples: Sequence[Hashable],
    *,
    title: str,
    out_html: Path,
    expected: Optional[float] = None,
    color: str = "#1f77b4",
    width: int = 800,
    height: int = 450,
) -> Path:
    """Bar chart of outcome counts, optionally with the expected count per outcome."""
    freq = frequency_frame(samples)
    fig = go.Figure()
    fig.add_trace(
        go.Bar(
            x=[str(v) for v in freq["value"]],
            y=freq["count"].to_numpy(),
            marker_color=color,
            name="observed",
        )
    )
    if expected is not None:
        fig.add_hline(
            y=float(expected),
            line_dash="dash",
            line_color="gray",
            annotation_text=f"expected ≈ {expected:g}",
            annotation_position="top right",
        )
    fig.update_layout(
        title=title,
        xaxis_title="outcome",
        yaxis_title="count",
        template="plotly_white",
        height=height,
        width=width,
    )
    out_html = Path(out_html)
    out_html.parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(out_html, include_plotlyjs="cdn")
    return out_html


def plot_trajectory(
    values: Sequence[float],
    *,
    title: str,
    y_label: str,
    out_html: Path,
    smooth_sigma: float = 3.0,
    color: str = "#d62728",
    width: int = 1000,
    height: int = 450,
) -> Path:
    """Step index against value, raw plus a gaussian-smoothed overlay."""
    y = np.asarray(values, dtype=float)
    x = np.arange(len(y))
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(x=x, y=y, mode="lines", line=dict(color="lightgray", width=1), name="raw", opacity=0.8)
    )
    fig.add_trace(
        go.Scatter(
            x=x,
            y=_safe_smooth(y, smooth_sigma),
            mode="lines",
            line=dict(color=color, width=2.5),
            name=f"smoothed (σ={smooth_sigma:g})",
        )
    )
    fig.update_layout(
        title=title,
        xaxis_title="step",
        yaxis_title=y_label,
        xaxis_rangeslider_visible=True,
        template="plotly_white",
        height=height,
        width=width,
        hovermode="x unified",
        legend=dict(orientation="h", y=1.02, x=0, xanchor="left"),
    )
    out_html = Path(out_html)
    out_html.parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(out_html, include_plotlyjs="cdn")
    return out_html
