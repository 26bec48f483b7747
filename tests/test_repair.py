from __future__ import annotations

import json

import pytest

from Campaign_analyzer.models import DEFAULT_COLORS, AnalysisResult, Visualization
from Campaign_analyzer.repair import (
    FALLBACK_MESSAGE,
    STAGE_BRACES,
    STAGE_DIRECT,
    STAGE_FALLBACK,
    STAGE_SANITIZED,
    repair_analysis_response,
    repair_json_payload,
    strip_code_fences,
)

PAYLOAD = {
    "executiveSummary": "Strong quarter.",
    "performanceAnalysis": "Meta CTR: 1.2%",
    "trendAnalysis": "Clicks rising.",
    "recommendations": "Expand geo targeting.",
    "visualizations": [
        {
            "type": "bar_chart",
            "title": "CTR by Tactic",
            "data": {"labels": ["Meta", "SEM"], "values": [1.2, 3.4], "colors": ["#cf0e0f", "#ff4444"]},
        }
    ],
}


def test_clean_json_parses_directly() -> None:
    payload, stage = repair_json_payload(json.dumps(PAYLOAD))

    assert stage == STAGE_DIRECT
    assert payload == PAYLOAD


def test_fenced_json_matches_unfenced() -> None:
    text = json.dumps(PAYLOAD, indent=2)
    fenced = repair_analysis_response(f"```json\n{text}\n```")
    plain = repair_analysis_response(text)

    assert fenced == plain
    assert strip_code_fences("```json\n{}\n```") == "{}"


def test_prose_around_object_uses_brace_block(capsys) -> None:
    payload, stage = repair_json_payload(f"Here is the report:\n{json.dumps(PAYLOAD)}\nThanks!")

    assert stage == STAGE_BRACES
    assert payload["executiveSummary"] == "Strong quarter."


def test_control_characters_are_stripped() -> None:
    broken = '{"executiveSummary": "Strong\x07 quarter", "performanceAnalysis": "", "trendAnalysis": "", "recommendations": "", "visualizations": []}'

    payload, stage = repair_json_payload(broken)

    assert stage == STAGE_SANITIZED
    assert payload["executiveSummary"] == "Strong quarter"


@pytest.mark.parametrize("raw", ["", "not json at all", "{broken", "[1, 2, 3]", None, "{'single': 'quotes'}"])
def test_unrecoverable_input_returns_fallback(raw, capsys) -> None:
    result = repair_analysis_response(raw)

    assert isinstance(result, AnalysisResult)
    assert result.executive_summary == FALLBACK_MESSAGE
    assert result.performance_analysis == FALLBACK_MESSAGE
    assert result.trend_analysis == FALLBACK_MESSAGE
    assert result.recommendations == FALLBACK_MESSAGE
    assert result.visualizations == []
    assert "[Repair]" in capsys.readouterr().out


def test_fallback_stage_reported() -> None:
    assert repair_json_payload("nope") == (None, STAGE_FALLBACK)


def test_result_fields_and_chart_normalization() -> None:
    result = repair_analysis_response(json.dumps(PAYLOAD))

    assert result.recommendations == "Expand geo targeting."
    assert result.visualizations == [
        Visualization(type="bar", title="CTR by Tactic", labels=["Meta", "SEM"], values=[1.2, 3.4], colors=["#cf0e0f", "#ff4444"])
    ]


def test_unusable_charts_are_dropped() -> None:
    payload = dict(PAYLOAD)
    payload["visualizations"] = [
        {"type": "radar", "title": "x", "data": {"labels": ["a"], "values": [1]}},
        {"type": "pie", "title": "mismatch", "data": {"labels": ["a", "b"], "values": [1]}},
        {"type": "line", "title": "text values", "data": {"labels": ["a"], "values": ["high"]}},
        {"type": "Pie_Chart", "title": "Share", "data": {"labels": ["a", "b"], "values": ["1", 2]}},
    ]

    result = repair_analysis_response(json.dumps(payload))

    assert len(result.visualizations) == 1
    chart = result.visualizations[0]
    assert chart.type == "pie"
    assert chart.values == [1.0, 2.0]
    assert chart.colors == list(DEFAULT_COLORS)


def test_missing_narrative_fields_default_to_empty() -> None:
    result = repair_analysis_response('{"executiveSummary": ["one", "two"]}')

    assert result.executive_summary == "- one\n- two"
    assert result.trend_analysis == ""
    assert result.visualizations == []


def test_text_export_has_all_sections() -> None:
    text = repair_analysis_response(json.dumps(PAYLOAD)).to_text()

    assert text.startswith("CAMPAIGN PERFORMANCE ANALYSIS")
    for heading in ("EXECUTIVE SUMMARY", "PERFORMANCE ANALYSIS", "TREND ANALYSIS", "OPTIMIZATION RECOMMENDATIONS"):
        assert heading in text


def test_fenced_object_parses_at_first_stage() -> None:
    body = '{"executiveSummary":"x","performanceAnalysis":"y","trendAnalysis":"z","recommendations":"w","visualizations":[]}'

    payload, stage = repair_json_payload(f"```json\n{body}\n```")

    assert stage == STAGE_DIRECT
    assert payload == json.loads(body)


def test_start_of_heading_character_needs_sanitizing() -> None:
    payload, stage = repair_json_payload('{"executiveSummary": "a\x01b"}')

    assert stage == STAGE_SANITIZED
    assert payload == {"executiveSummary": "ab"}
