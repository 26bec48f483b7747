from __future__ import annotations

import argparse
import json
import os
import shutil
import subprocess
import sys
from importlib import metadata
from pathlib import Path
from typing import List, Optional

from Campaign_analyzer.classifier import UploadedFile, classify_filename, decode_upload
from Campaign_analyzer.config import TIME_RANGE_CHOICES, AnalyzerSettings, settings_from_dict
from Campaign_analyzer.errors import AnalyzerError
from Campaign_analyzer.reporting import write_report_artifacts
from Campaign_analyzer.session import AnalyzerSession
from Campaign_analyzer.store import JsonKeyValueStore, load_ai_modifiers, load_benchmark_modifiers
from Campaign_analyzer.tactic_tables import tables_for_tactic
from Campaign_analyzer.tactics import map_tactic_to_product

PROJECT_ROOT = Path(__file__).resolve().parent
DASHBOARD = PROJECT_ROOT / "Campaign_analyzer" / "dashboard.py"

PROVIDER_DEFAULTS = {
    "anthropic": ("ANTHROPIC_API_KEY", "claude-3-5-sonnet-20241022"),
    "openai": ("OPENAI_API_KEY", "gpt-4o-mini"),
}


def _fmt_rel(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


def _load_settings(args: argparse.Namespace) -> AnalyzerSettings:
    if getattr(args, "config", None):
        config_path = Path(args.config).resolve()
        payload = json.loads(config_path.read_text(encoding="utf-8"))
        settings = settings_from_dict(payload, base_path=config_path.parent)
    else:
        settings = AnalyzerSettings.from_env()
    if getattr(args, "output_dir", None):
        settings.output_dir = Path(args.output_dir)
    if getattr(args, "time_range", None):
        settings.time_range = args.time_range
    if getattr(args, "objective", None):
        settings.campaign_objective = args.objective
    if getattr(args, "no_visuals", False):
        settings.include_visuals = False
    provider = getattr(args, "provider", None)
    if provider:
        settings.completion.provider = provider
        if provider in PROVIDER_DEFAULTS:
            settings.completion.api_key_env, settings.completion.model = PROVIDER_DEFAULTS[provider]
    if getattr(args, "model", None):
        settings.completion.model = args.model
    settings.resolve_paths()
    return settings


def _parse_table_arg(value: str) -> tuple[str, str, Path]:
    parts = value.split(":", 2)
    if len(parts) != 3 or not all(parts):
        raise argparse.ArgumentTypeError("--table expects TACTIC:TABLE:PATH")
    return parts[0], parts[1], Path(parts[2])


def _run_analyze(args: argparse.Namespace) -> int:
    if not args.campaign_url and not args.campaign_file:
        print("[Analyze] Provide --campaign-url or --campaign-file.")
        return 2
    company_path = Path(args.company_file)
    if not company_path.exists():
        print(f"[Analyze] Company file not found: {company_path}")
        return 1

    try:
        settings = _load_settings(args)
    except (OSError, ValueError) as exc:
        print(f"[Analyze] Invalid configuration: {exc}")
        return 2

    store = JsonKeyValueStore(settings.state_path)
    session = AnalyzerSession(
        settings,
        benchmarks=load_benchmark_modifiers(store),
        ai_modifiers=load_ai_modifiers(store),
    )

    try:
        if args.campaign_file:
            tactics = session.load_campaign_path(args.campaign_file)
        else:
            tactics = session.fetch_campaign(args.campaign_url)
        print(f"[Analyze] Detected tactics: {', '.join(tactics) if tactics else 'none'}")
        session.set_company_info(company_path.read_text(encoding="utf-8"))

        if args.csv:
            summary = session.bulk_upload(UploadedFile.from_path(path) for path in args.csv)
            for message in summary.messages:
                print(f"- {message}")
        for tactic, table_name, path in args.table or []:
            session.upload_table(tactic, table_name, path.name, decode_upload(path.read_bytes(), path.name))

        if args.debug:
            print(session.build_prompt())
        result = session.generate_analysis()
        paths = write_report_artifacts(
            settings=settings,
            result=result,
            detected_tactics=session.detected_tactics,
            tables=session.tables,
        )
    except (AnalyzerError, OSError) as exc:
        print(f"[Analyze] Failed: {exc}")
        return 1

    print("Analysis complete:")
    for label, path in paths.items():
        print(f"- {label}: {_fmt_rel(path)}")
    return 0


def _run_classify(args: argparse.Namespace) -> int:
    """Dry run: show where each file would land without parsing it."""
    groups: dict[str, list[str]] = {}
    for tactic in args.tactics:
        mapping = map_tactic_to_product(tactic)
        product = mapping.product if mapping else tactic
        groups.setdefault(product, []).append(tactic)

    unmatched = 0
    for name in args.files:
        assignment, reason = classify_filename(Path(name).name, groups)
        if assignment is None:
            unmatched += 1
            print(f"[Bulk] {reason}")
        else:
            print(f"[Bulk] {assignment.file_name} -> {assignment.tactic} / {assignment.table_name}")
    return 1 if unmatched else 0


def _run_tables(args: argparse.Namespace) -> int:
    mapping = map_tactic_to_product(args.tactic)
    product = mapping.product if mapping else "unmapped"
    print(f"[Tables] {args.tactic} (product: {product})")
    for table in tables_for_tactic(args.tactic):
        print(f"- {table}")
    return 0


def _run_ui(_: argparse.Namespace) -> int:
    if not DASHBOARD.exists():
        print(f"[UI] dashboard.py not found at {DASHBOARD}")
        return 1
    cmd = [sys.executable, "-m", "streamlit", "run", str(DASHBOARD)]
    print("[UI] Launching Streamlit dashboard...")
    return subprocess.call(cmd)


def _run_doctor(_: argparse.Namespace) -> int:
    settings = AnalyzerSettings.from_env()
    print("[Doctor] Environment check")
    print(f"- Python: {sys.version.split()[0]}")
    for pkg in ("pandas", "requests", "streamlit", "anthropic", "openai"):
        try:
            print(f"- {pkg}: {metadata.version(pkg)}")
        except metadata.PackageNotFoundError:
            print(f"- {pkg}: missing")
    print(f"- Provider: {settings.completion.provider} ({settings.completion.model})")
    if settings.completion.requires_api_key():
        key_state = "set" if settings.completion.api_key() else "missing"
        print(f"- {settings.completion.api_key_env}: {key_state}")
    else:
        print(f"- Proxy: {settings.completion.proxy_url}")
    print(f"- State file: {settings.state_path} ({'ok' if settings.state_path.exists() else 'missing'})")
    return 0


def _run_clean(args: argparse.Namespace) -> int:
    output_dir = Path(args.output_dir).resolve()
    if not output_dir.exists():
        print(f"[Clean] Nothing to remove in {_fmt_rel(output_dir)}")
        return 0
    if not args.yes:
        answer = input(f"Remove {_fmt_rel(output_dir)}? [y/N] ").strip().lower()
        if answer not in {"y", "yes"}:
            print("[Clean] Aborted")
            return 0
    shutil.rmtree(output_dir, ignore_errors=True)
    print(f"[Clean] Removed {_fmt_rel(output_dir)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Campaign performance analyzer utilities.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser("analyze", help="Generate a campaign performance report")
    source = analyze_parser.add_mutually_exclusive_group()
    source.add_argument("--campaign-url", help="Order URL or 24-character order id")
    source.add_argument("--campaign-file", help="Campaign JSON file")
    analyze_parser.add_argument("--company-file", required=True, help="Company description text file")
    analyze_parser.add_argument("--csv", nargs="*", help="CSV exports to auto-assign by filename")
    analyze_parser.add_argument(
        "--table",
        action="append",
        type=_parse_table_arg,
        help="Explicit upload as TACTIC:TABLE:PATH (repeatable)",
    )
    analyze_parser.add_argument("--time-range", choices=TIME_RANGE_CHOICES, help="Analysis window in days")
    analyze_parser.add_argument("--objective", help="Campaign objective to emphasise")
    analyze_parser.add_argument("--config", help="JSON settings file")
    analyze_parser.add_argument("--output-dir", help="Directory for report artifacts")
    analyze_parser.add_argument("--provider", choices=("anthropic", "openai", "proxy"), help="Completion provider")
    analyze_parser.add_argument("--model", help="Model override")
    analyze_parser.add_argument("--no-visuals", action="store_true", help="Skip chart rendering")
    analyze_parser.add_argument("--debug", action="store_true", help="Print the assembled prompt")
    analyze_parser.set_defaults(func=_run_analyze)

    classify_parser = subparsers.add_parser("classify", help="Dry-run bulk filename classification")
    classify_parser.add_argument("--tactics", nargs="+", required=True, help="Campaign tactics")
    classify_parser.add_argument("files", nargs="+", help="CSV file names")
    classify_parser.set_defaults(func=_run_classify)

    tables_parser = subparsers.add_parser("tables", help="List expected tables for a tactic")
    tables_parser.add_argument("tactic")
    tables_parser.set_defaults(func=_run_tables)

    ui_parser = subparsers.add_parser("ui", help="Launch the Streamlit dashboard")
    ui_parser.set_defaults(func=_run_ui)

    doctor_parser = subparsers.add_parser("doctor", help="Inspect environment readiness")
    doctor_parser.set_defaults(func=_run_doctor)

    clean_parser = subparsers.add_parser("clean", help="Remove generated report artifacts")
    clean_parser.add_argument("--output-dir", default=os.getenv("ANALYZER_OUTPUT_DIR", "reports"))
    clean_parser.add_argument("--yes", action="store_true", help="Skip confirmation prompt")
    clean_parser.set_defaults(func=_run_clean)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    func = getattr(args, "func", None)
    if func is None:
        parser.error("No command specified")
    return int(func(args))


if __name__ == "__main__":
    sys.exit(main())
