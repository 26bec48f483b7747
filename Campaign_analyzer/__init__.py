"""Public API for the Campaign_analyzer package."""

from .ai import CompletionClient, extract_response_text
from .classifier import BulkUploadSummary, UploadedFile, classify_uploads
from .config import AnalyzerSettings, CampaignSourceConfig, CompletionConfig
from .csv_tables import ParsedTable, TableStore, parse_csv_text
from .errors import AnalyzerError, CampaignError, CompletionError, InputError
from .models import AnalysisResult, Visualization
from .repair import repair_analysis_response
from .session import AnalyzerSession
from .tactic_tables import tables_for_tactic
from .tactics import map_tactic_to_product, normalize_tactic_name

__all__ = [
    "AnalysisResult",
    "AnalyzerError",
    "AnalyzerSession",
    "AnalyzerSettings",
    "BulkUploadSummary",
    "CampaignError",
    "CampaignSourceConfig",
    "CompletionClient",
    "CompletionConfig",
    "CompletionError",
    "InputError",
    "ParsedTable",
    "TableStore",
    "UploadedFile",
    "Visualization",
    "classify_uploads",
    "extract_response_text",
    "map_tactic_to_product",
    "normalize_tactic_name",
    "parse_csv_text",
    "repair_analysis_response",
    "tables_for_tactic",
]
