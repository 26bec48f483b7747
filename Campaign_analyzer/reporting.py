"""Reporting helpers: Markdown report, JSON payload and table exports."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from Campaign_analyzer.config import AnalyzerSettings
from Campaign_analyzer.csv_tables import TableStore
from Campaign_analyzer.models import AnalysisResult
from Campaign_analyzer.prompts import time_range_label
from Campaign_analyzer.visualization import generate_visuals

REPORT_VERSION = "campaign-analyzer/1.0"

_FILE_SAFE = re.compile(r"[^0-9A-Za-z]+")


def dataframe_to_csv(df: pd.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if df.empty:
        path.write_text("", encoding="utf-8")
    else:
        df.to_csv(path, index=False)


def dataframe_to_markdown(df: pd.DataFrame) -> str:
    if df.empty:
        return "_No data available._"
    try:
        return df.to_markdown(index=False)
    except ImportError:
        return df.to_string(index=False)


def table_inventory(tables: TableStore) -> pd.DataFrame:
    records = [
        {
            "tactic": table.tactic,
            "table": table.table_name,
            "file": table.file_name,
            "columns": len(table.headers),
            "rows": len(table.rows),
        }
        for table in tables
    ]
    return pd.DataFrame(records, columns=["tactic", "table", "file", "columns", "rows"])


def build_summary_payload(
    *,
    settings: AnalyzerSettings,
    result: AnalysisResult,
    detected_tactics: List[str],
    tables: TableStore,
    figures: Optional[Dict[str, str]] = None,
) -> Dict[str, object]:
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "report_version": REPORT_VERSION,
        "time_range": time_range_label(settings.time_range),
        "provider": settings.completion.provider,
        "model": settings.completion.model,
        "detected_tactics": list(detected_tactics),
        "tables": json.loads(table_inventory(tables).to_json(orient="records")),
        "figures": figures or {},
        "analysis": result.to_dict(),
    }


def build_markdown_report(
    *,
    settings: AnalyzerSettings,
    result: AnalysisResult,
    detected_tactics: List[str],
    tables: TableStore,
    figures: Optional[Dict[str, str]] = None,
    title: str = "Campaign Performance Analysis",
) -> str:
    lines = [
        f"# {title}",
        "",
        f"**Time range:** {time_range_label(settings.time_range)}",
        f"**Tactics:** {', '.join(detected_tactics) if detected_tactics else 'none detected'}",
        "",
        "## Executive Summary",
        "",
        result.executive_summary,
        "",
        "## Performance Analysis",
        "",
        result.performance_analysis,
        "",
        "## Trend Analysis",
        "",
        result.trend_analysis,
        "",
        "## Optimization Recommendations",
        "",
        result.recommendations,
    ]
    if figures:
        lines.extend(["", "## Visualizations", ""])
        for chart_title, filename in figures.items():
            lines.append(f"![{chart_title}](figures/{filename})")
    lines.extend(["", "## Uploaded tables", "", dataframe_to_markdown(table_inventory(tables))])
    return "\n".join(lines) + "\n"


def _table_filename(tactic: str, table_name: str) -> str:
    return f"{_FILE_SAFE.sub('_', tactic).strip('_')}__{_FILE_SAFE.sub('_', table_name).strip('_')}.csv"


def write_report_artifacts(
    *,
    settings: AnalyzerSettings,
    result: AnalysisResult,
    detected_tactics: List[str],
    tables: TableStore,
    title: str = "Campaign Performance Analysis",
) -> Dict[str, Path]:
    """Write report Markdown, summary JSON, charts and cleaned tables."""

    settings.ensure_output_tree()
    output_dir = settings.output_dir

    figures = generate_visuals(result.visualizations, output_dir) if settings.include_visuals else {}

    report_path = output_dir / "campaign_analysis_report.md"
    report_path.write_text(
        build_markdown_report(
            settings=settings,
            result=result,
            detected_tactics=detected_tactics,
            tables=tables,
            figures=figures,
            title=title,
        ),
        encoding="utf-8",
    )

    summary_path = output_dir / "analysis.json"
    summary_path.write_text(
        json.dumps(
            build_summary_payload(
                settings=settings,
                result=result,
                detected_tactics=detected_tactics,
                tables=tables,
                figures=figures,
            ),
            indent=2,
        ),
        encoding="utf-8",
    )

    text_path = output_dir / "analysis.txt"
    text_path.write_text(result.to_text() + "\n", encoding="utf-8")

    for table in tables:
        dataframe_to_csv(table.to_frame(), output_dir / "tables" / _table_filename(table.tactic, table.table_name))

    return {"report": report_path, "summary": summary_path, "text": text_path}
