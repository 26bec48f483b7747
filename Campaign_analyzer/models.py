"""Result types returned by the analysis step."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

CHART_TYPES = ("bar", "line", "pie", "area")
DEFAULT_COLORS = ["#cf0e0f", "#ff4444", "#ff6666", "#ff8888", "#ffaaaa"]

NARRATIVE_FIELDS = ("executiveSummary", "performanceAnalysis", "trendAnalysis", "recommendations")


def normalize_chart_type(value: object) -> Optional[str]:
    """Map ``bar_chart``/``Bar``/``bar`` style labels onto :data:`CHART_TYPES`."""
    if not isinstance(value, str):
        return None
    label = value.strip().lower()
    if label.endswith("_chart"):
        label = label[: -len("_chart")]
    return label if label in CHART_TYPES else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


@dataclass(slots=True)
class Visualization:
    type: str
    title: str
    labels: List[str]
    values: List[float]
    colors: List[str] = field(default_factory=lambda: list(DEFAULT_COLORS))

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Optional["Visualization"]:
        """Build a chart spec, or ``None`` when the spec is unusable."""
        chart_type = normalize_chart_type(payload.get("type"))
        data = payload.get("data")
        if chart_type is None or not isinstance(data, Mapping):
            return None
        labels = data.get("labels")
        values = data.get("values")
        if not isinstance(labels, list) or not isinstance(values, list) or len(labels) != len(values):
            return None
        numbers = [_as_float(value) for value in values]
        if any(number is None for number in numbers):
            return None
        colors = data.get("colors")
        if not isinstance(colors, list) or not colors:
            colors = list(DEFAULT_COLORS)
        return cls(
            type=chart_type,
            title=str(payload.get("title") or ""),
            labels=[str(label) for label in labels],
            values=[float(number) for number in numbers if number is not None],
            colors=[str(color) for color in colors],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "data": {"labels": list(self.labels), "values": list(self.values), "colors": list(self.colors)},
        }


@dataclass(slots=True)
class AnalysisResult:
    executive_summary: str = ""
    performance_analysis: str = ""
    trend_analysis: str = ""
    recommendations: str = ""
    visualizations: List[Visualization] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AnalysisResult":
        charts: List[Visualization] = []
        raw_charts = payload.get("visualizations")
        if isinstance(raw_charts, list):
            for item in raw_charts:
                if isinstance(item, Mapping):
                    chart = Visualization.from_dict(item)
                    if chart is not None:
                        charts.append(chart)
        return cls(
            executive_summary=_text(payload.get("executiveSummary")),
            performance_analysis=_text(payload.get("performanceAnalysis")),
            trend_analysis=_text(payload.get("trendAnalysis")),
            recommendations=_text(payload.get("recommendations")),
            visualizations=charts,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "executiveSummary": self.executive_summary,
            "performanceAnalysis": self.performance_analysis,
            "trendAnalysis": self.trend_analysis,
            "recommendations": self.recommendations,
            "visualizations": [chart.to_dict() for chart in self.visualizations],
        }

    def to_text(self) -> str:
        """Plain-text export used for clipboard copies."""
        return "\n".join(
            [
                "CAMPAIGN PERFORMANCE ANALYSIS",
                "=============================",
                "",
                "EXECUTIVE SUMMARY",
                "-----------------",
                self.executive_summary,
                "",
                "PERFORMANCE ANALYSIS",
                "-------------------",
                self.performance_analysis,
                "",
                "TREND ANALYSIS",
                "--------------",
                self.trend_analysis,
                "",
                "OPTIMIZATION RECOMMENDATIONS",
                "---------------------------",
                self.recommendations,
            ]
        ).strip()


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "\n".join(f"- {item}" for item in value)
    return str(value)
