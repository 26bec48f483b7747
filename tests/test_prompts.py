from __future__ import annotations

import json

from Campaign_analyzer.csv_tables import ParsedTable, TableStore
from Campaign_analyzer.modifiers import AIModifiers, default_benchmark_modifiers
from Campaign_analyzer.prompts import (
    RESPONSE_FORMAT,
    build_analysis_prompt,
    clean_company_info,
    generate_system_prompt,
    time_range_label,
)


def _tables() -> TableStore:
    store = TableStore()
    store.put(ParsedTable.from_text("Month,Clicks\nJan,10", file_name="m.csv", tactic="Meta", table_name="Monthly Performance"))
    return store


def test_clean_company_info_drops_generation_costs() -> None:
    text = "Acme Plumbing\nFamily owned.\n\ngeneration costs: $0.42\nModel: x"

    assert clean_company_info(text) == "Acme Plumbing\nFamily owned."
    assert clean_company_info("No trailer here") == "No trailer here"


def test_system_prompt_structure() -> None:
    prompt = generate_system_prompt(time_range_label("60"))

    assert "1. Executive Summary" in prompt
    assert "5. Analysis Time Range" in prompt
    assert "Analyze month-over-month changes and emerging patterns" in prompt
    assert "Use constructive tone" in prompt
    assert "CAMPAIGN OBJECTIVE" not in prompt


def test_system_prompt_objective_tone_and_instructions() -> None:
    modifiers = AIModifiers(tone="direct", additional_instructions="Mention the spring promo.")

    prompt = generate_system_prompt("Custom", "Lead generation", modifiers)

    assert "CAMPAIGN OBJECTIVE: Lead generation" in prompt
    assert "Use direct tone" in prompt
    assert "ADDITIONAL INSTRUCTIONS: Mention the spring promo." in prompt
    assert "Analyze performance within the specified date range" in prompt


def test_unknown_time_range_uses_custom_instruction() -> None:
    assert "Analyze performance within the specified date range" in generate_system_prompt("Last 7 days")


def test_analysis_prompt_includes_all_material() -> None:
    campaign = {"lineItems": [{"product": "Meta"}]}

    prompt = build_analysis_prompt(
        company_info="Acme\nGeneration Costs: 1",
        campaign=campaign,
        tables=_tables(),
        time_range="120",
        detected_tactics=["Meta"],
    )

    assert "COMPANY INFORMATION:\nAcme\n" in prompt
    assert json.dumps(campaign, indent=2) in prompt
    assert "DETECTED TACTICS:\nMeta" in prompt
    assert '"Meta_Monthly Performance"' in prompt
    assert "TIME RANGE: Last 120 days" in prompt
    assert "Generation Costs" not in prompt
    assert RESPONSE_FORMAT in prompt
    assert "DATA VISUALIZATIONS:" in prompt
    assert "BENCHMARK MODIFIERS" not in prompt


def test_analysis_prompt_with_benchmarks_and_no_charts() -> None:
    prompt = build_analysis_prompt(
        company_info="Acme",
        campaign={},
        tables=TableStore(),
        time_range="30",
        benchmarks=default_benchmark_modifiers(),
        ai_modifiers=AIModifiers(show_visualizations=False),
    )

    assert "BENCHMARK MODIFIERS" in prompt
    assert '"viewRate": 43.8' in prompt
    assert "and custom benchmark modifiers" in prompt
    assert "DATA VISUALIZATIONS:" not in prompt
    assert "Do not create any charts" in prompt
