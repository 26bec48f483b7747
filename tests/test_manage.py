from __future__ import annotations

import json
from typing import Any, Dict, List

import pytest

import manage
from Campaign_analyzer.models import AnalysisResult
from Campaign_analyzer.session import AnalyzerSession

CAMPAIGN = {"lineItems": [{"product": "Meta"}, {"product": "SEM"}]}


@pytest.fixture(autouse=True)
def _isolate(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("ANALYZER_STATE_PATH", str(tmp_path / "state.json"))
    monkeypatch.delenv("ANALYZER_PROVIDER", raising=False)


@pytest.fixture()
def inputs(tmp_path) -> Dict[str, Any]:
    campaign = tmp_path / "campaign.json"
    campaign.write_text(json.dumps(CAMPAIGN), encoding="utf-8")
    company = tmp_path / "company.txt"
    company.write_text("Acme Plumbing\nGeneration Costs: $1", encoding="utf-8")
    meta = tmp_path / "report-meta-monthly-performance.csv"
    meta.write_text("Month,Clicks\nJan,10\n", encoding="utf-8")
    sem = tmp_path / "keywords.csv"
    sem.write_text("Keyword,Clicks\nplumber,4\n", encoding="utf-8")
    return {"campaign": campaign, "company": company, "meta": meta, "sem": sem, "out": tmp_path / "out"}


def _stub_analysis(monkeypatch: pytest.MonkeyPatch) -> List[str]:
    prompts: List[str] = []

    def _generate(self: AnalyzerSession) -> AnalysisResult:
        prompts.append(self.build_prompt())
        self.result = AnalysisResult(executive_summary="ok", recommendations="do more")
        return self.result

    monkeypatch.setattr(AnalyzerSession, "generate_analysis", _generate)
    return prompts


def test_analyze_writes_artifacts(monkeypatch: pytest.MonkeyPatch, inputs, capsys) -> None:
    prompts = _stub_analysis(monkeypatch)

    code = manage.main(
        [
            "analyze",
            "--campaign-file",
            str(inputs["campaign"]),
            "--company-file",
            str(inputs["company"]),
            "--csv",
            str(inputs["meta"]),
            "--table",
            f"SEM:Keyword Performance:{inputs['sem']}",
            "--output-dir",
            str(inputs["out"]),
            "--provider",
            "proxy",
            "--no-visuals",
        ]
    )

    assert code == 0
    assert (inputs["out"] / "campaign_analysis_report.md").exists()
    summary = json.loads((inputs["out"] / "analysis.json").read_text(encoding="utf-8"))
    assert summary["provider"] == "proxy"
    assert {row["table"] for row in summary["tables"]} == {"Monthly Performance", "Keyword Performance"}
    assert '"Meta_Monthly Performance"' in prompts[0]
    assert "Generation Costs" not in prompts[0]
    out = capsys.readouterr().out
    assert "[Analyze] Detected tactics: Meta, SEM" in out
    assert "Analysis complete:" in out


def test_analyze_requires_campaign_source(inputs, capsys) -> None:
    assert manage.main(["analyze", "--company-file", str(inputs["company"])]) == 2
    assert "Provide --campaign-url or --campaign-file" in capsys.readouterr().out


def test_analyze_reports_missing_company_file(inputs, tmp_path) -> None:
    code = manage.main(
        ["analyze", "--campaign-file", str(inputs["campaign"]), "--company-file", str(tmp_path / "nope.txt")]
    )

    assert code == 1


def test_analyze_reports_bad_campaign(inputs, tmp_path, capsys) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{oops", encoding="utf-8")

    code = manage.main(["analyze", "--campaign-file", str(broken), "--company-file", str(inputs["company"])])

    assert code == 1
    assert "[Analyze] Failed: Error parsing JSON file" in capsys.readouterr().out


def test_table_argument_validation() -> None:
    with pytest.raises(SystemExit):
        manage.main(["analyze", "--campaign-file", "x.json", "--company-file", "y.txt", "--table", "Meta-only"])


def test_classify_dry_run(capsys) -> None:
    code = manage.main(
        ["classify", "--tactics", "Meta", "AAT", "--", "report-meta-campaign-performance (2).csv", "misc.csv"]
    )

    out = capsys.readouterr().out
    assert code == 1
    assert "report-meta-campaign-performance (2).csv -> Meta / Campaign Performance" in out
    assert "Could not detect product for misc.csv" in out


def test_tables_command(capsys) -> None:
    assert manage.main(["tables", "TrueView"]) == 0

    out = capsys.readouterr().out
    assert "[Tables] TrueView (product: YouTube)" in out
    assert "- Device Performance" in out


def test_analyze_reports_non_utf8_table(monkeypatch: pytest.MonkeyPatch, inputs, tmp_path, capsys) -> None:
    _stub_analysis(monkeypatch)
    latin1 = tmp_path / "sem.csv"
    latin1.write_bytes("Keyword,Clicks\nplombier à Montréal,4\n".encode("latin-1"))

    code = manage.main(
        [
            "analyze",
            "--campaign-file",
            str(inputs["campaign"]),
            "--company-file",
            str(inputs["company"]),
            "--table",
            f"SEM:Keyword Performance:{latin1}",
            "--output-dir",
            str(inputs["out"]),
        ]
    )

    assert code == 1
    assert "[Analyze] Failed: sem.csv is not UTF-8" in capsys.readouterr().out


def test_analyze_continues_past_non_utf8_bulk_file(monkeypatch: pytest.MonkeyPatch, inputs, tmp_path, capsys) -> None:
    _stub_analysis(monkeypatch)
    latin1 = tmp_path / "meta-region-performance.csv"
    latin1.write_bytes("Region,City\nEast,Montréal\n".encode("latin-1"))

    code = manage.main(
        [
            "analyze",
            "--campaign-file",
            str(inputs["campaign"]),
            "--company-file",
            str(inputs["company"]),
            "--csv",
            str(latin1),
            str(inputs["meta"]),
            "--output-dir",
            str(inputs["out"]),
            "--provider",
            "proxy",
            "--no-visuals",
        ]
    )

    assert code == 0
    out = capsys.readouterr().out
    assert "- Error processing meta-region-performance.csv: meta-region-performance.csv is not UTF-8" in out
    assert "Analysis complete:" in out
