"""Campaign metadata: order lookup, file loading and tactic detection."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import requests

from Campaign_analyzer.config import CampaignSourceConfig
from Campaign_analyzer.errors import CampaignError
from Campaign_analyzer.tactics import normalize_tactic_name

_ORDER_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")
_TACTIC_FIELDS = ("product", "subProduct", "tacticTypeSpecial")


def extract_order_id(value: str) -> str:
    """Pull the 24-character hexadecimal order id out of a URL or raw id."""
    match = _ORDER_ID_PATTERN.search(value or "")
    if not match:
        raise CampaignError(f"No 24-character order id found in {value!r}")
    return match.group(0)


def parse_campaign_json(text: str) -> Dict[str, Any]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CampaignError(f"Error parsing JSON file: {exc}") from exc
    if not isinstance(payload, dict):
        raise CampaignError("Campaign data must be a JSON object")
    return payload


def load_campaign_file(path: str | Path) -> Dict[str, Any]:
    source = Path(path)
    if not source.exists():
        raise CampaignError(f"Campaign file not found: {source}")
    return parse_campaign_json(source.read_text(encoding="utf-8"))


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or "Unknown error"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if error:
            return str(error)
        if body.get("message"):
            return str(body["message"])
    return "Unknown error"


def fetch_campaign(
    order_id: str,
    config: Optional[CampaignSourceConfig] = None,
    *,
    session: Optional[requests.Session] = None,
) -> Dict[str, Any]:
    """GET the campaign JSON for ``order_id`` from the order-management endpoint."""
    source = config or CampaignSourceConfig()
    url = source.order_url(extract_order_id(order_id))
    http = session or requests
    print(f"[Campaign] Fetching {url}")
    try:
        response = http.get(url, timeout=source.timeout)
    except requests.RequestException as exc:
        raise CampaignError(f"Campaign request failed: {exc}") from exc
    if not response.ok:
        raise CampaignError(
            f"Campaign request failed: {response.status_code} - {_error_message(response)}",
            status_code=response.status_code,
        )
    return parse_campaign_json(response.text)


def _labels(value: Any) -> Iterable[str]:
    items = value if isinstance(value, list) else [value]
    for item in items:
        if isinstance(item, str) and item.strip():
            yield item.strip()


def extract_raw_tactics(campaign: Dict[str, Any]) -> List[str]:
    line_items = campaign.get("lineItems")
    if not isinstance(line_items, list):
        return []
    seen: Dict[str, None] = {}
    for item in line_items:
        if not isinstance(item, dict):
            continue
        for key in _TACTIC_FIELDS:
            for label in _labels(item.get(key)):
                seen.setdefault(label, None)
    return list(seen.keys())


def extract_tactics(campaign: Dict[str, Any]) -> List[str]:
    """Canonical tactic names found in the campaign line items, first-seen order."""
    seen: Dict[str, None] = {}
    for label in extract_raw_tactics(campaign):
        seen.setdefault(normalize_tactic_name(label), None)
    return list(seen.keys())


def campaign_name(campaign: Dict[str, Any]) -> str:
    for key in ("campaignName", "name", "orderName", "advertiser"):
        value = campaign.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return "Campaign"
