"""JSON-file key-value store for settings that survive between sessions."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from Campaign_analyzer.modifiers import (
    AIModifiers,
    BenchmarkModifiers,
    benchmark_modifiers_from_dict,
    benchmark_modifiers_to_dict,
)

CAMPAIGN_MODIFIERS_KEY = "campaignModifiers"
AI_MODIFIERS_KEY = "aiModifiers"


class JsonKeyValueStore:
    """Whole-value key-value store backed by a single JSON document."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._data: Dict[str, Any] = self._read()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            print(f"[Store] Could not read {self.path}: {exc}; starting empty.")
            return {}
        if not isinstance(payload, dict):
            print(f"[Store] Ignoring {self.path}: expected a JSON object.")
            return {}
        return payload

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")

    def keys(self) -> list[str]:
        return list(self._data.keys())


def load_benchmark_modifiers(store: JsonKeyValueStore) -> Optional[BenchmarkModifiers]:
    payload = store.get(CAMPAIGN_MODIFIERS_KEY)
    if payload is None:
        return None
    return benchmark_modifiers_from_dict(payload)


def save_benchmark_modifiers(store: JsonKeyValueStore, modifiers: BenchmarkModifiers) -> None:
    store.set(CAMPAIGN_MODIFIERS_KEY, benchmark_modifiers_to_dict(modifiers))


def load_ai_modifiers(store: JsonKeyValueStore) -> AIModifiers:
    return AIModifiers.from_dict(store.get(AI_MODIFIERS_KEY))


def save_ai_modifiers(store: JsonKeyValueStore, modifiers: AIModifiers) -> None:
    store.set(AI_MODIFIERS_KEY, modifiers.to_dict())
