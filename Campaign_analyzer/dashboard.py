"""Streamlit front end for the campaign performance analyzer."""

from __future__ import annotations

import os
import traceback
from typing import List

import pandas as pd
import streamlit as st

from Campaign_analyzer.classifier import UploadedFile, decode_upload
from Campaign_analyzer.config import TIME_RANGE_CHOICES, AnalyzerSettings
from Campaign_analyzer.errors import AnalyzerError
from Campaign_analyzer.modifiers import (
    TONE_CHOICES,
    AIModifiers,
    default_benchmark_modifiers,
    region_columns,
    seasonal_columns,
    update_region_metric,
    update_seasonal_metric,
)
from Campaign_analyzer.session import REANALYSIS_CONFIRM, AnalyzerSession
from Campaign_analyzer.store import (
    JsonKeyValueStore,
    load_ai_modifiers,
    load_benchmark_modifiers,
    save_ai_modifiers,
    save_benchmark_modifiers,
)
from Campaign_analyzer.visualization import plotly_figure

PAGE_CONFIG = {
    "page_title": "Campaign Performance Analyzer",
    "layout": "wide",
    "initial_sidebar_state": "expanded",
}


def _session() -> AnalyzerSession:
    if "analyzer" not in st.session_state:
        settings = AnalyzerSettings.from_env()
        settings.resolve_paths()
        store = JsonKeyValueStore(settings.state_path)
        st.session_state["store"] = store
        st.session_state["analyzer"] = AnalyzerSession(
            settings,
            benchmarks=load_benchmark_modifiers(store),
            ai_modifiers=load_ai_modifiers(store),
        )
    return st.session_state["analyzer"]


def _store() -> JsonKeyValueStore:
    return st.session_state["store"]


def _is_new_upload(state_key: str, upload) -> bool:
    """True once per distinct upload, so a same-named corrected file still replaces the old one."""
    if st.session_state.get(state_key) == upload.file_id:
        return False
    st.session_state[state_key] = upload.file_id
    return True


def render_inputs(session: AnalyzerSession) -> None:
    st.header("1. Campaign data")
    order_url = st.text_input("Order URL or id", placeholder="https://.../orders/<24-character id>")
    if st.button("Fetch campaign", disabled=not order_url):
        try:
            tactics = session.fetch_campaign(order_url)
            st.success(f"Loaded campaign with {len(tactics)} tactic(s).")
        except AnalyzerError as exc:
            st.error(str(exc))
    campaign_file = st.file_uploader("...or upload campaign JSON", type=["json"])
    if campaign_file is not None and _is_new_upload("campaign_file", campaign_file):
        try:
            session.load_campaign_text(decode_upload(campaign_file.getvalue(), campaign_file.name))
        except AnalyzerError as exc:
            st.error(str(exc))

    if session.detected_tactics:
        st.markdown("**Detected tactics:** " + ", ".join(session.detected_tactics))

    st.header("2. Company information")
    company_file = st.file_uploader("Company description (.txt)", type=["txt"])
    if company_file is not None and _is_new_upload("company_file", company_file):
        try:
            session.set_company_info(decode_upload(company_file.getvalue(), company_file.name))
        except AnalyzerError as exc:
            st.error(str(exc))
    text = st.text_area("Company context", value=session.company_info, height=160)
    if text != session.company_info:
        session.set_company_info(text)

    st.header("3. Time range")
    session.settings.time_range = st.selectbox(
        "Analysis window (days)",
        TIME_RANGE_CHOICES,
        index=TIME_RANGE_CHOICES.index(session.settings.time_range),
    )


def render_uploads(session: AnalyzerSession) -> None:
    st.header("4. Performance tables")
    if not session.detected_tactics:
        st.info("Load campaign data to see the expected tables for each tactic.")
        return

    bulk = st.file_uploader("Bulk upload CSV exports", type=["csv"], accept_multiple_files=True)
    if bulk and st.button("Auto-assign uploaded files"):
        files: List[UploadedFile] = [UploadedFile(name=item.name, content=item.getvalue()) for item in bulk]
        summary = session.bulk_upload(files)
        st.success(summary.describe())
        for message in summary.messages:
            st.warning(message)

    for tactic in session.detected_tactics:
        tables = session.expected_tables(tactic)
        with st.expander(f"{tactic} ({session.uploaded_table_count(tactic)}/{len(tables)} tables)"):
            for table_name in tables:
                existing = session.tables.get(tactic, table_name)
                label = f"{table_name}" + (f" ✓ {existing.file_name}" if existing else "")
                slot = f"{tactic}_{table_name}"
                upload = st.file_uploader(label, type=["csv"], key=slot)
                if upload is not None and _is_new_upload(f"ingested_{slot}", upload):
                    try:
                        existing = session.upload_table(
                            tactic, table_name, upload.name, decode_upload(upload.getvalue(), upload.name)
                        )
                    except AnalyzerError as exc:
                        st.error(str(exc))
                if existing is not None:
                    st.dataframe(existing.to_frame().head(20), use_container_width=True)


def render_result(session: AnalyzerSession) -> None:
    result = session.result
    if result is None:
        return
    st.header("Analysis")
    st.download_button("Download analysis text", session.analysis_text(), file_name="campaign_analysis.txt")
    for title, body in (
        ("Executive Summary", result.executive_summary),
        ("Performance Analysis", result.performance_analysis),
        ("Trend Analysis", result.trend_analysis),
    ):
        st.subheader(title)
        st.markdown(body)
    if result.visualizations:
        st.subheader("Visualizations")
        for chart in result.visualizations:
            st.plotly_chart(plotly_figure(chart), use_container_width=True)
    st.subheader("Optimization Recommendations")
    st.markdown(result.recommendations)


def render_analyzer() -> None:
    session = _session()
    st.title("Campaign Performance Analyzer")
    if session.settings.completion.requires_api_key() and not session.settings.completion.api_key():
        st.warning(
            f"API key is not configured. Set {session.settings.completion.api_key_env} before running an analysis."
        )

    render_inputs(session)
    render_uploads(session)

    st.header("5. Generate")
    col_run, col_reset = st.columns(2)
    if col_run.button("Analyze campaign" if session.result is None else "Re-analyze", type="primary"):
        try:
            with st.spinner("Analyzing campaign data and performance tables..."):
                if session.request_reanalysis() == REANALYSIS_CONFIRM:
                    st.session_state["confirm_reanalysis"] = True
        except AnalyzerError as exc:
            st.error(f"Error generating analysis: {exc}")

    if st.session_state.get("confirm_reanalysis"):
        pending = ", ".join(session.new_files_uploaded) or "no new files"
        st.info(f"Replace the current analysis? New uploads since the last run: {pending}.")
        if st.button("Confirm re-analysis"):
            st.session_state["confirm_reanalysis"] = False
            try:
                with st.spinner("Re-analyzing..."):
                    session.confirm_reanalysis()
            except AnalyzerError as exc:
                st.error(f"Error generating analysis: {exc}")

    if col_reset.button("Clear and reset"):
        session.clear_and_reset()
        for key in ("campaign_file", "company_file", "confirm_reanalysis"):
            st.session_state.pop(key, None)

    render_result(session)


def _metric_editor(title: str, rows: dict, columns: tuple[str, ...]) -> pd.DataFrame:
    st.subheader(title)
    frame = pd.DataFrame(
        [{"name": name, **{col: metrics.to_dict().get(col, 0.0) for col in columns}} for name, metrics in rows.items()]
    )
    if frame.empty:
        st.caption("No benchmarks defined.")
        return frame
    return st.data_editor(frame, hide_index=True, disabled=["name"], key=f"editor_{title}")


def render_modifiers() -> None:
    session = _session()
    st.title("Campaign Modifier Settings")
    st.caption(
        "These benchmarks are injected into the analysis prompt. Adjust them based on industry knowledge "
        "and historical performance."
    )
    benchmarks = session.benchmarks or default_benchmark_modifiers()
    options = session.detected_tactics or list(benchmarks.keys())
    tactic = st.selectbox("Tactic", options)
    current = benchmarks.get(tactic)
    updated = dict(benchmarks)

    if current is not None:
        seasonal = _metric_editor(
            "Seasonal performance", dict(current.performance_patterns.seasonal), seasonal_columns(tactic)
        )
        for _, row in seasonal.iterrows():
            for metric in seasonal_columns(tactic):
                updated = update_seasonal_metric(updated, tactic, row["name"], metric, row[metric])
        regions = _metric_editor(
            "Geographic baselines", dict(current.geographic_baselines.regions), region_columns(tactic)
        )
        for _, row in regions.iterrows():
            for metric in region_columns(tactic):
                updated = update_region_metric(updated, tactic, row["name"], metric, row[metric])
    else:
        st.info("No benchmarks for this tactic yet; add a Q1 baseline to start.")
        ctr = st.number_input("Q1 (Winter) CTR (%)", min_value=0.0, step=0.01)
        if ctr:
            updated = update_seasonal_metric(updated, tactic, "Q1 (Winter)", "ctr", ctr)

    if st.button("Save benchmarks", type="primary"):
        save_benchmark_modifiers(_store(), updated)
        session.benchmarks = updated
        st.success("Benchmarks saved.")

    st.header("AI response settings")
    ai = session.ai_modifiers
    temperature = st.slider("Temperature", 0.0, 1.0, float(ai.temperature), 0.05)
    tone = st.selectbox("Tone", TONE_CHOICES, index=TONE_CHOICES.index(ai.tone))
    instructions = st.text_area("Additional instructions", value=ai.additional_instructions)
    show_charts = st.checkbox("Include visualizations", value=ai.show_visualizations)
    if st.button("Save AI settings"):
        session.ai_modifiers = AIModifiers(
            temperature=temperature,
            tone=tone,
            additional_instructions=instructions,
            show_visualizations=show_charts,
        )
        save_ai_modifiers(_store(), session.ai_modifiers)
        st.success("AI settings saved.")


def render_fallback(exc: BaseException) -> None:
    st.title("Something went wrong")
    st.error("The application encountered an error. Refresh the page to try again.")
    if os.getenv("ANALYZER_DEBUG"):
        st.code("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))


def main() -> None:
    st.set_page_config(**PAGE_CONFIG)
    section = st.sidebar.radio("Go to", ("Analyzer", "Modifier Settings"))
    renderer = {"Analyzer": render_analyzer, "Modifier Settings": render_modifiers}[section]
    try:
        renderer()
    except Exception as exc:  # pragma: no cover - top-level error view
        print(f"[UI] Unhandled error: {exc}")
        render_fallback(exc)


if __name__ == "__main__":  # pragma: no cover
    main()
