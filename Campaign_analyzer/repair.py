"""Best-effort recovery of the analysis JSON returned by the model."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional, Tuple

from Campaign_analyzer.models import AnalysisResult

_FENCE_OPEN = re.compile(r"```json\n?")
_FENCE_CLOSE = re.compile(r"```\n?")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")

FALLBACK_MESSAGE = (
    "The analysis could not be generated because the model response was not valid JSON. "
    "Please run the analysis again."
)

STAGE_DIRECT = "direct"
STAGE_BRACES = "braces"
STAGE_SANITIZED = "sanitized"
STAGE_FALLBACK = "fallback"


def strip_code_fences(text: str) -> str:
    return _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text)).strip()


def extract_brace_block(text: str) -> Optional[str]:
    """Substring from the first ``{`` to the last ``}``, or ``None``."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    return text[start : end + 1]


def strip_control_characters(text: str) -> str:
    """Drop C0/C1 control characters, keeping tab, newline and carriage return."""
    return _CONTROL_CHARS.sub("", text)


def _load_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    if not text:
        return None
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def repair_json_payload(raw: Any) -> Tuple[Optional[Dict[str, Any]], str]:
    """Run the recovery ladder and return ``(payload, stage)``.

    ``payload`` is ``None`` only when the stage is :data:`STAGE_FALLBACK`.
    """

    text = raw if isinstance(raw, str) else ("" if raw is None else str(raw))

    cleaned = strip_code_fences(text)
    payload = _load_object(cleaned)
    if payload is not None:
        return payload, STAGE_DIRECT

    block = extract_brace_block(cleaned)
    payload = _load_object(block)
    if payload is not None:
        return payload, STAGE_BRACES

    if block is not None:
        payload = _load_object(strip_control_characters(block))
        if payload is not None:
            return payload, STAGE_SANITIZED

    return None, STAGE_FALLBACK


def fallback_result() -> AnalysisResult:
    return AnalysisResult(
        executive_summary=FALLBACK_MESSAGE,
        performance_analysis=FALLBACK_MESSAGE,
        trend_analysis=FALLBACK_MESSAGE,
        recommendations=FALLBACK_MESSAGE,
        visualizations=[],
    )


def repair_analysis_response(raw: Any) -> AnalysisResult:
    """Always returns a usable :class:`AnalysisResult`; never raises."""
    payload, stage = repair_json_payload(raw)
    if payload is None:
        print("[Repair] Response was not valid JSON after all recovery attempts; using fallback.")
        return fallback_result()
    if stage != STAGE_DIRECT:
        print(f"[Repair] Recovered analysis JSON at stage '{stage}'.")
    return AnalysisResult.from_dict(payload)
