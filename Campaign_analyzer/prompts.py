"""Prompt assembly for the campaign analysis request."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Mapping, Optional

from Campaign_analyzer.csv_tables import TableStore
from Campaign_analyzer.modifiers import AIModifiers, TacticModifiers, benchmark_modifiers_to_dict

_GENERATION_COSTS = re.compile(r"Generation Costs:[\s\S]*$", re.IGNORECASE)

REPORT_SECTIONS = (
    "Executive Summary",
    "Performance Analysis by Tactic",
    "Trend Analysis",
    "Strategic Optimization Recommendations",
    "Analysis Time Range",
)

EXECUTIVE_SUMMARY_FOCUS = ("Overall performance", "Key achievements", "Critical insights")

PER_TACTIC_REQUIREMENTS = (
    "Performance metrics with single averages (not ranges)",
    "Geographic performance insights",
    "Device/platform performance where relevant",
    "Creative performance highlights",
    "Specific strengths and opportunities",
)

TREND_SUBSECTIONS = (
    "Monthly Performance Trends",
    "Pattern Analysis (Geographic, Creative, or other relevant patterns)",
)

OPTIMIZATION_CATEGORIES = (
    "Geographic Optimization",
    "Creative Strategy",
    "Audience Development",
    "Measurement Improvements",
)

TIME_RANGE_INSTRUCTIONS: Dict[str, str] = {
    "Last 30 days": "Focus on recent performance trends and immediate optimization opportunities",
    "Last 60 days": "Analyze month-over-month changes and emerging patterns",
    "Last 90 days": "Evaluate quarterly performance and seasonal trends",
    "Last 120 days": "Assess campaign evolution and long-term effectiveness",
    "Last 150 days": "Analyze extended performance patterns and strategic shifts",
    "Last 180 days": "Provide comprehensive half-year analysis with strategic insights",
    "Last Month": "Deep dive into previous month's complete performance data",
    "This Month": "Analyze month-to-date performance with projections",
    "Custom": "Analyze performance within the specified date range",
}

RESPONSE_FORMAT = """{
  "executiveSummary": "string",
  "performanceAnalysis": "string",
  "trendAnalysis": "string",
  "recommendations": "string",
  "visualizations": [
    {
      "type": "bar_chart|line_chart|pie_chart|area_chart",
      "title": "string",
      "data": {
        "labels": ["string"],
        "values": [number],
        "colors": ["#cf0e0f", "#ff4444", "#ff6666", "#ff8888", "#ffaaaa"]
      }
    }
  ]
}"""


def clean_company_info(text: str) -> str:
    """Drop the trailing "Generation Costs:" block exported with company profiles."""
    return _GENERATION_COSTS.sub("", text or "").strip()


def time_range_label(days: str) -> str:
    return f"Last {days} days"


def generate_system_prompt(
    time_range: str,
    campaign_objective: Optional[str] = None,
    modifiers: Optional[AIModifiers] = None,
) -> str:
    instruction = TIME_RANGE_INSTRUCTIONS.get(time_range, TIME_RANGE_INSTRUCTIONS["Custom"])
    tone = modifiers.tone if modifiers else "constructive"
    sections = "\n".join(f"{index}. {name}" for index, name in enumerate(REPORT_SECTIONS, start=1))

    lines = [
        "You are an expert digital marketing analyst. Analyze the campaign performance data following these strict guidelines:",
        "",
        "REPORT STRUCTURE (MUST FOLLOW THIS EXACT ORDER):",
        sections,
        "",
        "SECTION REQUIREMENTS:",
        "",
        "1. Executive Summary:",
        f"- Provide 3 bullet points covering: {', '.join(EXECUTIVE_SUMMARY_FOCUS)}",
        "- Keep it high-level and impactful",
        "",
        "2. Performance Analysis by Tactic:",
        "- Create a separate subsection for EACH tactic in the data",
        f"- For each tactic include: {', '.join(PER_TACTIC_REQUIREMENTS)}",
        '- Present metrics as single averages (e.g., "CTR: 2.45%" NOT "CTR: 2-3%")',
        "",
        "3. Trend Analysis:",
        f"- Include subsections for: {', '.join(TREND_SUBSECTIONS)}",
        "- Use actual data to support trend identification",
        "- Highlight significant changes or patterns",
        "",
        "4. Strategic Optimization Recommendations:",
        f"- Organize into these categories: {', '.join(OPTIMIZATION_CATEGORIES)}",
        "- Make recommendations specific and actionable",
        "- Prioritize by potential impact",
        "",
        f"TIME RANGE CONTEXT: {instruction}",
    ]
    if campaign_objective:
        lines += [
            "",
            f"CAMPAIGN OBJECTIVE: {campaign_objective} - Ensure all analysis relates back to this objective.",
        ]
    lines += [
        "",
        "FORMATTING REQUIREMENTS:",
        "- Present all metrics as single values with appropriate precision",
        f"- Use {tone} tone",
        "- Focus on opportunities over problems",
        "- Be specific with recommendations",
    ]
    if modifiers and modifiers.additional_instructions.strip():
        lines += ["", f"ADDITIONAL INSTRUCTIONS: {modifiers.additional_instructions.strip()}"]
    lines += [
        "",
        "Remember: Each tactic gets its own detailed analysis section. Do not group tactics into generic "
        'categories like "Funnel Analysis" or "Device Performance" - analyze each tactic individually.',
    ]
    return "\n".join(lines)


def _benchmark_block(benchmarks: Optional[Mapping[str, TacticModifiers]]) -> str:
    if not benchmarks:
        return ""
    return (
        "\nBENCHMARK MODIFIERS:\n"
        "Use these custom benchmarks when analyzing performance and making recommendations:\n"
        f"{json.dumps(benchmark_modifiers_to_dict(benchmarks), indent=2)}\n\n"
        "When analyzing performance data, compare against these benchmarks rather than generic industry standards.\n"
        "Highlight when performance is above or below these customized benchmarks and provide insights based on "
        "these specific thresholds.\n"
    )


def build_analysis_prompt(
    *,
    company_info: str,
    campaign: Mapping[str, Any],
    tables: TableStore,
    time_range: str,
    detected_tactics: Optional[list[str]] = None,
    campaign_objective: Optional[str] = None,
    benchmarks: Optional[Mapping[str, TacticModifiers]] = None,
    ai_modifiers: Optional[AIModifiers] = None,
) -> str:
    """Combine guidelines, campaign material and the response contract into one prompt."""

    label = time_range_label(time_range)
    with_benchmarks = bool(benchmarks)
    parts = [
        generate_system_prompt(label, campaign_objective, ai_modifiers),
        "",
        "As a digital marketing analyst, analyze this campaign performance data and provide a comprehensive report.",
        "",
        "COMPANY INFORMATION:",
        clean_company_info(company_info),
        "",
        "CAMPAIGN DATA:",
        json.dumps(campaign, indent=2),
    ]
    if detected_tactics:
        parts += ["", "DETECTED TACTICS:", ", ".join(detected_tactics)]
    parts += [
        "",
        "PERFORMANCE TABLE DATA:",
        tables.to_json(indent=2),
        "",
        f"TIME RANGE: {label}",
        _benchmark_block(benchmarks),
        "Based on the uploaded performance tables"
        + (" and custom benchmark modifiers" if with_benchmarks else "")
        + ", provide detailed analysis covering the executive summary, performance by tactic, "
        "trends and optimization recommendations described above.",
        "",
        "Focus recommendations on geographic targeting, demographic refinements, creative messaging, "
        "audience segmentation, tracking and measurement, and content strategy.",
        "DO NOT include technical bidding strategies, budget allocation suggestions, or platform-specific optimizations.",
        "",
    ]
    show_charts = ai_modifiers.show_visualizations if ai_modifiers else True
    if show_charts:
        parts += [
            "DATA VISUALIZATIONS:",
            "Create 4-6 charts showing key insights from the uploaded tables: performance comparisons between "
            "tactics" + (" with benchmark lines" if with_benchmarks else "") + ", geographic performance, device "
            "breakdowns, creative rankings and trends over time.",
            "",
        ]
    else:
        parts += ["Do not create any charts; return an empty visualizations list.", ""]
    parts += [
        "Format your response as JSON with this structure:",
        RESPONSE_FORMAT,
        "",
        "Use the red color palette throughout. Respond with the JSON object only.",
    ]
    return "\n".join(parts)
