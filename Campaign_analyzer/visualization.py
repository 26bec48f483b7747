"""Chart rendering for the model's visualization specs."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd
import plotly.graph_objects as go
import seaborn as sns

from Campaign_analyzer.models import DEFAULT_COLORS, Visualization

sns.set_theme(style="whitegrid")

_SLUG = re.compile(r"[^0-9a-z]+")


def _slug(title: str, index: int) -> str:
    slug = _SLUG.sub("_", title.lower()).strip("_")
    return f"{index:02d}_{slug or 'chart'}.png"


def _palette(chart: Visualization) -> List[str]:
    return chart.colors or list(DEFAULT_COLORS)


def _save_plot(fig: plt.Figure, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)


def chart_frame(chart: Visualization) -> pd.DataFrame:
    return pd.DataFrame({"name": chart.labels, "value": chart.values})


def render_chart(chart: Visualization, path: Path) -> Path | None:
    """Draw one chart to a PNG file; ``None`` when there is nothing to draw."""
    frame = chart_frame(chart)
    if frame.empty:
        return None
    colors = _palette(chart)
    fig, ax = plt.subplots(figsize=(8, 5))
    if chart.type == "bar":
        sns.barplot(data=frame, x="name", y="value", color=colors[0], ax=ax)
    elif chart.type == "line":
        sns.lineplot(data=frame, x="name", y="value", color=colors[0], marker="o", ax=ax)
    elif chart.type == "area":
        ax.fill_between(range(len(frame)), frame["value"], color=colors[1 % len(colors)], alpha=0.6)
        ax.plot(range(len(frame)), frame["value"], color=colors[0])
        ax.set_xticks(range(len(frame)))
        ax.set_xticklabels(frame["name"])
    elif chart.type == "pie":
        wedge_colors = [colors[idx % len(colors)] for idx in range(len(frame))]
        ax.pie(frame["value"], labels=frame["name"], colors=wedge_colors, autopct="%1.1f%%")
        ax.axis("equal")
    else:
        plt.close(fig)
        return None
    if chart.type != "pie":
        ax.set_xlabel("")
        ax.set_ylabel("Value")
        for label in ax.get_xticklabels():
            label.set_rotation(45)
            label.set_horizontalalignment("right")
    ax.set_title(chart.title)
    _save_plot(fig, path)
    return path


def generate_visuals(charts: List[Visualization], output_dir: Path) -> Dict[str, str]:
    """Render every chart under ``output_dir/figures``; returns title -> filename."""
    figures: Dict[str, str] = {}
    for index, chart in enumerate(charts, start=1):
        path = render_chart(chart, output_dir / "figures" / _slug(chart.title, index))
        if path:
            figures[chart.title or path.stem] = path.name
    return figures


def plotly_figure(chart: Visualization) -> go.Figure:
    """Interactive counterpart of :func:`render_chart` for the dashboard."""
    colors = _palette(chart)
    if chart.type == "pie":
        trace = go.Pie(
            labels=chart.labels,
            values=chart.values,
            marker={"colors": [colors[idx % len(colors)] for idx in range(len(chart.labels))]},
        )
    elif chart.type == "line":
        trace = go.Scatter(x=chart.labels, y=chart.values, mode="lines+markers", line={"color": colors[0], "width": 2})
    elif chart.type == "area":
        trace = go.Scatter(
            x=chart.labels,
            y=chart.values,
            mode="lines",
            fill="tozeroy",
            line={"color": colors[0]},
            fillcolor=colors[1 % len(colors)],
        )
    else:
        trace = go.Bar(x=chart.labels, y=chart.values, marker_color=colors[0])
    fig = go.Figure(trace)
    fig.update_layout(title=chart.title, height=320, margin={"l": 40, "r": 20, "t": 50, "b": 40})
    return fig
