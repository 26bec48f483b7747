"""Benchmark and AI-response modifiers persisted between sessions.

The benchmark tree has one record type per level so edits cannot change its
shape::

    BenchmarkModifiers
      tactic -> TacticModifiers
        performance_patterns.seasonal[quarter] -> MetricSet
        performance_patterns.monthly[month]    -> MetricSet
        geographic_baselines.regions[region]   -> MetricSet

JSON keys follow the camelCase layout stored by earlier releases
(``performancePatterns``, ``geographicBaselines``, ``viewRate``).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional

TONE_CHOICES = ("constructive", "formal", "conversational", "direct")

METRIC_KEYS: Dict[str, str] = {
    "ctr": "ctr",
    "cpm": "cpm",
    "cpc": "cpc",
    "cpv": "cpv",
    "cvr": "cvr",
    "view_rate": "viewRate",
}
_JSON_TO_METRIC = {json_key: attr for attr, json_key in METRIC_KEYS.items()}


def _coerce_metric(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


@dataclass(frozen=True, slots=True)
class MetricSet:
    ctr: Optional[float] = None
    cpm: Optional[float] = None
    cpc: Optional[float] = None
    cpv: Optional[float] = None
    cvr: Optional[float] = None
    view_rate: Optional[float] = None

    def with_metric(self, metric: str, value: Any) -> "MetricSet":
        attr = _JSON_TO_METRIC.get(metric, metric)
        if attr not in METRIC_KEYS:
            raise KeyError(f"Unknown benchmark metric '{metric}'")
        return replace(self, **{attr: _coerce_metric(value)})

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MetricSet":
        kwargs = {}
        for json_key, value in payload.items():
            attr = _JSON_TO_METRIC.get(json_key)
            if attr is not None and value is not None:
                kwargs[attr] = _coerce_metric(value)
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, float]:
        return {
            METRIC_KEYS[item.name]: getattr(self, item.name)
            for item in fields(self)
            if getattr(self, item.name) is not None
        }


def _metric_table(payload: Any) -> Dict[str, MetricSet]:
    if not isinstance(payload, Mapping):
        return {}
    return {str(key): MetricSet.from_dict(value) for key, value in payload.items() if isinstance(value, Mapping)}


@dataclass(frozen=True, slots=True)
class PerformancePatterns:
    seasonal: Mapping[str, MetricSet] = field(default_factory=dict)
    monthly: Mapping[str, MetricSet] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.seasonal:
            payload["seasonal"] = {key: value.to_dict() for key, value in self.seasonal.items()}
        if self.monthly:
            payload["monthly"] = {key: value.to_dict() for key, value in self.monthly.items()}
        return payload


@dataclass(frozen=True, slots=True)
class GeographicBaselines:
    regions: Mapping[str, MetricSet] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        if not self.regions:
            return {}
        return {"regions": {key: value.to_dict() for key, value in self.regions.items()}}


@dataclass(frozen=True, slots=True)
class TacticModifiers:
    performance_patterns: PerformancePatterns = field(default_factory=PerformancePatterns)
    geographic_baselines: GeographicBaselines = field(default_factory=GeographicBaselines)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TacticModifiers":
        patterns = payload.get("performancePatterns") or {}
        geo = payload.get("geographicBaselines") or {}
        return cls(
            performance_patterns=PerformancePatterns(
                seasonal=_metric_table(patterns.get("seasonal") if isinstance(patterns, Mapping) else None),
                monthly=_metric_table(patterns.get("monthly") if isinstance(patterns, Mapping) else None),
            ),
            geographic_baselines=GeographicBaselines(
                regions=_metric_table(geo.get("regions") if isinstance(geo, Mapping) else None),
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        patterns = self.performance_patterns.to_dict()
        if patterns:
            payload["performancePatterns"] = patterns
        geo = self.geographic_baselines.to_dict()
        if geo:
            payload["geographicBaselines"] = geo
        return payload


BenchmarkModifiers = Dict[str, TacticModifiers]


def benchmark_modifiers_from_dict(payload: Any) -> BenchmarkModifiers:
    if not isinstance(payload, Mapping):
        return {}
    return {
        str(tactic): TacticModifiers.from_dict(value)
        for tactic, value in payload.items()
        if isinstance(value, Mapping)
    }


def benchmark_modifiers_to_dict(modifiers: Mapping[str, TacticModifiers]) -> Dict[str, Any]:
    return {tactic: value.to_dict() for tactic, value in modifiers.items()}


def _updated_table(table: Mapping[str, MetricSet], key: str, metric: str, value: Any) -> Dict[str, MetricSet]:
    updated = dict(table)
    updated[key] = updated.get(key, MetricSet()).with_metric(metric, value)
    return updated


def update_seasonal_metric(
    modifiers: Mapping[str, TacticModifiers], tactic: str, quarter: str, metric: str, value: Any
) -> BenchmarkModifiers:
    """Return a copy of ``modifiers`` with one seasonal metric changed."""
    current = modifiers.get(tactic, TacticModifiers())
    patterns = replace(
        current.performance_patterns,
        seasonal=_updated_table(current.performance_patterns.seasonal, quarter, metric, value),
    )
    result = dict(modifiers)
    result[tactic] = replace(current, performance_patterns=patterns)
    return result


def update_monthly_metric(
    modifiers: Mapping[str, TacticModifiers], tactic: str, month: str, metric: str, value: Any
) -> BenchmarkModifiers:
    current = modifiers.get(tactic, TacticModifiers())
    patterns = replace(
        current.performance_patterns,
        monthly=_updated_table(current.performance_patterns.monthly, month, metric, value),
    )
    result = dict(modifiers)
    result[tactic] = replace(current, performance_patterns=patterns)
    return result


def update_region_metric(
    modifiers: Mapping[str, TacticModifiers], tactic: str, region: str, metric: str, value: Any
) -> BenchmarkModifiers:
    current = modifiers.get(tactic, TacticModifiers())
    geo = replace(
        current.geographic_baselines,
        regions=_updated_table(current.geographic_baselines.regions, region, metric, value),
    )
    result = dict(modifiers)
    result[tactic] = replace(current, geographic_baselines=geo)
    return result


def seasonal_columns(tactic: str) -> tuple[str, str, str]:
    """Metrics shown in the seasonal editor for ``tactic``."""
    return ("ctr", "cpv", "viewRate") if tactic == "TrueView" else ("ctr", "cpm", "cpc")


def region_columns(tactic: str) -> tuple[str, str, str]:
    return ("ctr", "cpv", "viewRate") if tactic == "TrueView" else ("ctr", "cpc", "cvr")


DEFAULT_BENCHMARK_PAYLOAD: Dict[str, Any] = {
    "Targeted Display": {
        "performancePatterns": {
            "seasonal": {
                "Q1 (Winter)": {"ctr": 0.42, "cpm": 7.50, "cpc": 1.63},
                "Q2 (Spring)": {"ctr": 0.55, "cpm": 6.23, "cpc": 1.27},
                "Q3 (Summer)": {"ctr": 0.50, "cpm": 6.73, "cpc": 1.43},
                "Q4 (Fall/Holiday)": {"ctr": 0.72, "cpm": 5.37, "cpc": 0.90},
            }
        },
        "geographicBaselines": {
            "regions": {
                "Northeast": {"ctr": 0.58, "cpc": 1.35, "cvr": 2.8},
                "Southeast": {"ctr": 0.52, "cpc": 1.15, "cvr": 3.2},
                "Midwest": {"ctr": 0.48, "cpc": 1.05, "cvr": 3.5},
                "Southwest": {"ctr": 0.55, "cpc": 1.25, "cvr": 3.0},
                "West": {"ctr": 0.62, "cpc": 1.45, "cvr": 2.6},
            }
        },
    },
    "TrueView": {
        "performancePatterns": {
            "seasonal": {
                "Q1 (Winter)": {"ctr": 0.68, "cpv": 0.16, "viewRate": 32.5},
                "Q2 (Spring)": {"ctr": 0.75, "cpv": 0.13, "viewRate": 36.4},
                "Q3 (Summer)": {"ctr": 0.68, "cpv": 0.15, "viewRate": 32.5},
                "Q4 (Fall/Holiday)": {"ctr": 0.92, "cpv": 0.10, "viewRate": 43.8},
            }
        },
        "geographicBaselines": {
            "regions": {
                "Northeast": {"ctr": 0.78, "cpv": 0.14, "viewRate": 37.2},
                "Southeast": {"ctr": 0.72, "cpv": 0.12, "viewRate": 35.8},
                "Midwest": {"ctr": 0.68, "cpv": 0.11, "viewRate": 34.5},
                "Southwest": {"ctr": 0.75, "cpv": 0.13, "viewRate": 36.1},
                "West": {"ctr": 0.82, "cpv": 0.15, "viewRate": 38.9},
            }
        },
    },
    "Meta": {
        "performancePatterns": {
            "seasonal": {
                "Q1 (Winter)": {"ctr": 0.92, "cpm": 11.50, "cpc": 2.08},
                "Q2 (Spring)": {"ctr": 1.08, "cpm": 10.23, "cpc": 1.60},
                "Q3 (Summer)": {"ctr": 0.95, "cpm": 11.20, "cpc": 1.90},
                "Q4 (Fall/Holiday)": {"ctr": 1.32, "cpm": 9.40, "cpc": 1.20},
            }
        },
        "geographicBaselines": {
            "regions": {
                "Northeast": {"ctr": 1.18, "cpc": 1.75, "cvr": 4.2},
                "Southeast": {"ctr": 1.05, "cpc": 1.55, "cvr": 4.8},
                "Midwest": {"ctr": 0.98, "cpc": 1.45, "cvr": 5.1},
                "Southwest": {"ctr": 1.12, "cpc": 1.65, "cvr": 4.5},
                "West": {"ctr": 1.25, "cpc": 1.85, "cvr": 3.9},
            }
        },
    },
}


def default_benchmark_modifiers() -> BenchmarkModifiers:
    return benchmark_modifiers_from_dict(DEFAULT_BENCHMARK_PAYLOAD)


@dataclass(slots=True)
class AIModifiers:
    """Sampling and tone settings applied to every analysis request."""

    temperature: float = 0.7
    tone: str = "constructive"
    additional_instructions: str = ""
    show_visualizations: bool = True

    def __post_init__(self) -> None:
        self.temperature = min(max(_coerce_metric(self.temperature), 0.0), 1.0)
        if self.tone not in TONE_CHOICES:
            raise ValueError(f"tone must be one of {list(TONE_CHOICES)}, got {self.tone!r}")

    @classmethod
    def from_dict(cls, payload: Any) -> "AIModifiers":
        if not isinstance(payload, Mapping):
            return cls()
        tone = str(payload.get("tone") or "constructive").lower()
        return cls(
            temperature=payload.get("temperature", 0.7),
            tone=tone if tone in TONE_CHOICES else "constructive",
            additional_instructions=str(payload.get("additionalInstructions") or ""),
            show_visualizations=bool(payload.get("showVisualizations", True)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "tone": self.tone,
            "additionalInstructions": self.additional_instructions,
            "showVisualizations": self.show_visualizations,
        }
