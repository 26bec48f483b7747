"""Configuration models for the campaign performance analyzer."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, MutableMapping, Optional


DEFAULT_ORDER_URL_TEMPLATE = "https://orders.example.com/api/orders/{order_id}"
DEFAULT_PROXY_URL = "http://localhost:3000/api/analyze"
DEFAULT_STATE_PATH = Path(".campaign_analyzer") / "state.json"

TIME_RANGE_CHOICES = ("30", "60", "90", "120", "150", "180")


@dataclass(slots=True)
class CompletionConfig:
    """Settings for the LLM completion call."""

    provider: str = "anthropic"  # "anthropic", "openai" or "proxy"
    model: str = "claude-3-5-sonnet-20241022"
    api_key_env: str = "ANTHROPIC_API_KEY"
    proxy_url: str = DEFAULT_PROXY_URL
    temperature: float = 0.7
    max_tokens: int = 8192
    timeout: float = 300.0

    def requires_api_key(self) -> bool:
        return self.provider.lower() != "proxy"

    def api_key(self) -> str:
        return os.getenv(self.api_key_env, "").strip()


@dataclass(slots=True)
class CampaignSourceConfig:
    """Where campaign metadata is fetched from."""

    order_url_template: str = DEFAULT_ORDER_URL_TEMPLATE
    timeout: float = 30.0

    def order_url(self, order_id: str) -> str:
        return self.order_url_template.format(order_id=order_id)


@dataclass(slots=True)
class AnalyzerSettings:
    """Execution parameters for one analyzer session."""

    output_dir: Path = Path("reports")
    state_path: Path = DEFAULT_STATE_PATH
    time_range: str = "30"
    campaign_objective: Optional[str] = None
    include_visuals: bool = True
    completion: CompletionConfig = field(default_factory=CompletionConfig)
    campaign: CampaignSourceConfig = field(default_factory=CampaignSourceConfig)

    def resolve_paths(self) -> None:
        self.output_dir = self.output_dir.expanduser().resolve()
        self.state_path = self.state_path.expanduser().resolve()

    def ensure_output_tree(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        (self.output_dir / "figures").mkdir(exist_ok=True)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AnalyzerSettings":
        env = os.environ if environ is None else environ
        settings = cls()
        completion = settings.completion
        if env.get("ANALYZER_PROVIDER"):
            completion.provider = env["ANALYZER_PROVIDER"].strip().lower()
            if completion.provider == "openai":
                completion.api_key_env = "OPENAI_API_KEY"
                completion.model = "gpt-4o-mini"
        if env.get("ANALYZER_MODEL"):
            completion.model = env["ANALYZER_MODEL"].strip()
        if env.get("ANALYZER_MAX_TOKENS"):
            completion.max_tokens = _safe_int(env["ANALYZER_MAX_TOKENS"], completion.max_tokens)
        if env.get("ANALYZER_PROXY_URL"):
            completion.proxy_url = env["ANALYZER_PROXY_URL"].strip()
        if env.get("ANALYZER_ORDER_URL"):
            settings.campaign.order_url_template = env["ANALYZER_ORDER_URL"].strip()
        if env.get("ANALYZER_STATE_PATH"):
            settings.state_path = Path(env["ANALYZER_STATE_PATH"])
        return settings


def _safe_int(value: Optional[str], default: int) -> int:
    try:
        if value is None:
            return default
        return int(value)
    except (TypeError, ValueError):
        return default


def settings_from_dict(payload: MutableMapping[str, object], *, base_path: Path | None = None) -> AnalyzerSettings:
    """Create :class:`AnalyzerSettings` from a dictionary (e.g., parsed JSON)."""

    if not isinstance(payload, MutableMapping):
        raise ValueError("Configuration payload must be a JSON object")

    base = base_path or Path.cwd()
    settings = AnalyzerSettings.from_env()

    completion_payload = payload.get("completion")
    if isinstance(completion_payload, MutableMapping):
        completion_kwargs = {
            key: completion_payload.get(key)
            for key in CompletionConfig.__dataclass_fields__.keys()
            if key in completion_payload
        }
        if "temperature" in completion_kwargs:
            completion_kwargs["temperature"] = float(completion_kwargs["temperature"])
        if "max_tokens" in completion_kwargs:
            completion_kwargs["max_tokens"] = int(completion_kwargs["max_tokens"])
        settings.completion = CompletionConfig(**completion_kwargs)

    campaign_payload = payload.get("campaign")
    if isinstance(campaign_payload, MutableMapping):
        settings.campaign = CampaignSourceConfig(
            order_url_template=str(
                campaign_payload.get("order_url_template", settings.campaign.order_url_template)
            ),
            timeout=float(campaign_payload.get("timeout", settings.campaign.timeout)),
        )

    if payload.get("output_dir"):
        settings.output_dir = Path(str(payload["output_dir"]))
    if payload.get("state_path"):
        settings.state_path = Path(str(payload["state_path"]))
    time_range = str(payload.get("time_range", settings.time_range))
    if time_range not in TIME_RANGE_CHOICES:
        raise ValueError(f"`time_range` must be one of {list(TIME_RANGE_CHOICES)}, got {time_range!r}")
    settings.time_range = time_range
    objective = payload.get("campaign_objective")
    settings.campaign_objective = str(objective) if objective else None
    settings.include_visuals = bool(payload.get("include_visuals", True))

    if not settings.output_dir.is_absolute():
        settings.output_dir = base / settings.output_dir
    if not settings.state_path.is_absolute():
        settings.state_path = base / settings.state_path
    settings.resolve_paths()
    return settings
