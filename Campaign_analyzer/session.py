"""In-memory state for one analyzer session."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from Campaign_analyzer.ai import CompletionClient
from Campaign_analyzer.campaign import extract_tactics, fetch_campaign, load_campaign_file, parse_campaign_json
from Campaign_analyzer.classifier import BulkUploadSummary, UploadedFile, classify_uploads
from Campaign_analyzer.config import AnalyzerSettings
from Campaign_analyzer.csv_tables import ParsedTable, TableStore
from Campaign_analyzer.errors import InputError
from Campaign_analyzer.models import AnalysisResult
from Campaign_analyzer.modifiers import AIModifiers, BenchmarkModifiers
from Campaign_analyzer.prompts import build_analysis_prompt, clean_company_info
from Campaign_analyzer.tactic_tables import tables_for_tactic
from Campaign_analyzer.tactics import group_tactics_by_product

REANALYSIS_CONFIRM = "confirm"
REANALYSIS_STARTED = "started"


class AnalyzerSession:
    """Campaign, company context, uploaded tables and the latest result.

    Uploads replace their slot outright and a failed analysis leaves the
    previous result in place.
    """

    def __init__(
        self,
        settings: Optional[AnalyzerSettings] = None,
        *,
        client: Optional[CompletionClient] = None,
        benchmarks: Optional[BenchmarkModifiers] = None,
        ai_modifiers: Optional[AIModifiers] = None,
    ) -> None:
        self.settings = settings or AnalyzerSettings.from_env()
        self.client = client or CompletionClient(self.settings.completion)
        self.benchmarks = benchmarks
        self.ai_modifiers = ai_modifiers or AIModifiers(temperature=self.settings.completion.temperature)
        self.campaign: Optional[Dict[str, Any]] = None
        self.company_info = ""
        self.detected_tactics: List[str] = []
        self.tables = TableStore()
        self.result: Optional[AnalysisResult] = None
        self.new_files_uploaded: List[str] = []
        self.last_prompt: Optional[str] = None

    # ----------------------------
    # Inputs
    # ----------------------------

    def load_campaign(self, campaign: Dict[str, Any]) -> List[str]:
        self.campaign = campaign
        self.detected_tactics = extract_tactics(campaign)
        return list(self.detected_tactics)

    def load_campaign_text(self, text: str) -> List[str]:
        return self.load_campaign(parse_campaign_json(text))

    def load_campaign_path(self, path: str | Path) -> List[str]:
        return self.load_campaign(load_campaign_file(path))

    def fetch_campaign(self, order_url: str) -> List[str]:
        return self.load_campaign(fetch_campaign(order_url, self.settings.campaign))

    def set_company_info(self, text: str) -> str:
        self.company_info = clean_company_info(text)
        return self.company_info

    def product_groups(self) -> Dict[str, List[str]]:
        return group_tactics_by_product(self.detected_tactics)

    def expected_tables(self, tactic: str) -> List[str]:
        return tables_for_tactic(tactic)

    def _track_new_file(self, tactic: str, table_name: str) -> None:
        if self.result is None:
            return
        entry = f"{tactic} - {table_name}"
        if entry not in self.new_files_uploaded:
            self.new_files_uploaded.append(entry)

    def upload_table(self, tactic: str, table_name: str, file_name: str, text: str) -> ParsedTable:
        table = ParsedTable.from_text(text, file_name=file_name, tactic=tactic, table_name=table_name)
        self.tables.put(table)
        self._track_new_file(tactic, table_name)
        return table

    def bulk_upload(self, files: Iterable[UploadedFile]) -> BulkUploadSummary:
        groups = self.product_groups()
        if not groups:
            raise InputError("Load campaign data before uploading report tables.")
        summary = classify_uploads(files, groups, self.tables)
        for assignment in summary.assignments:
            self._track_new_file(assignment.tactic, assignment.table_name)
        return summary

    def uploaded_table_count(self, tactic: str) -> int:
        return sum(1 for table in tables_for_tactic(tactic) if self.tables.has(tactic, table))

    # ----------------------------
    # Analysis
    # ----------------------------

    def build_prompt(self) -> str:
        if self.campaign is None or not self.company_info.strip():
            raise InputError("Please load campaign data and provide company information.")
        return build_analysis_prompt(
            company_info=self.company_info,
            campaign=self.campaign,
            tables=self.tables,
            time_range=self.settings.time_range,
            detected_tactics=self.detected_tactics,
            campaign_objective=self.settings.campaign_objective,
            benchmarks=self.benchmarks,
            ai_modifiers=self.ai_modifiers,
        )

    def generate_analysis(self) -> AnalysisResult:
        prompt = self.build_prompt()
        self.last_prompt = prompt
        print(
            f"[Analyze] Sending prompt: provider={self.settings.completion.provider} "
            f"model={self.settings.completion.model} tables={len(self.tables)} chars={len(prompt)}"
        )
        result = self.client.analyze(prompt, temperature=self.ai_modifiers.temperature)
        if not self.ai_modifiers.show_visualizations:
            result.visualizations = []
        self.result = result
        return result

    def request_reanalysis(self) -> str:
        """Run immediately when there is no result yet, otherwise ask for confirmation."""
        if self.result is not None:
            return REANALYSIS_CONFIRM
        self.generate_analysis()
        return REANALYSIS_STARTED

    def confirm_reanalysis(self) -> AnalysisResult:
        self.new_files_uploaded = []
        return self.generate_analysis()

    def analysis_text(self) -> str:
        return self.result.to_text() if self.result else ""

    def clear_and_reset(self) -> None:
        self.campaign = None
        self.company_info = ""
        self.detected_tactics = []
        self.tables.clear()
        self.settings.time_range = "30"
        self.result = None
        self.new_files_uploaded = []
        self.last_prompt = None
