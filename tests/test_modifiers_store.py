from __future__ import annotations

import copy
import json

import pytest

from Campaign_analyzer.modifiers import (
    DEFAULT_BENCHMARK_PAYLOAD,
    AIModifiers,
    MetricSet,
    benchmark_modifiers_to_dict,
    default_benchmark_modifiers,
    region_columns,
    seasonal_columns,
    update_monthly_metric,
    update_region_metric,
    update_seasonal_metric,
)
from Campaign_analyzer.store import (
    AI_MODIFIERS_KEY,
    CAMPAIGN_MODIFIERS_KEY,
    JsonKeyValueStore,
    load_ai_modifiers,
    load_benchmark_modifiers,
    save_ai_modifiers,
    save_benchmark_modifiers,
)


def test_defaults_serialize_back_to_stored_layout() -> None:
    assert benchmark_modifiers_to_dict(default_benchmark_modifiers()) == DEFAULT_BENCHMARK_PAYLOAD


def test_seasonal_update_returns_new_tree() -> None:
    baseline = default_benchmark_modifiers()
    snapshot = copy.deepcopy(benchmark_modifiers_to_dict(baseline))

    updated = update_seasonal_metric(baseline, "Meta", "Q1 (Winter)", "ctr", "1.5")

    assert updated["Meta"].performance_patterns.seasonal["Q1 (Winter)"].ctr == 1.5
    assert updated["Meta"].performance_patterns.seasonal["Q1 (Winter)"].cpm == 11.50
    assert benchmark_modifiers_to_dict(baseline) == snapshot


def test_invalid_values_become_zero() -> None:
    updated = update_region_metric(default_benchmark_modifiers(), "TrueView", "West", "viewRate", "abc")

    assert updated["TrueView"].geographic_baselines.regions["West"].view_rate == 0.0
    assert updated["TrueView"].geographic_baselines.regions["West"].ctr == 0.82


def test_updates_create_missing_tactic_and_month() -> None:
    updated = update_monthly_metric({}, "SEM", "January", "cpc", 2.25)

    assert benchmark_modifiers_to_dict(updated) == {
        "SEM": {"performancePatterns": {"monthly": {"January": {"cpc": 2.25}}}}
    }


def test_unknown_metric_is_rejected() -> None:
    with pytest.raises(KeyError):
        MetricSet().with_metric("roas", 1)


def test_editor_columns_depend_on_tactic() -> None:
    assert seasonal_columns("TrueView") == ("ctr", "cpv", "viewRate")
    assert seasonal_columns("Meta") == ("ctr", "cpm", "cpc")
    assert region_columns("Meta") == ("ctr", "cpc", "cvr")


def test_ai_modifiers_clamp_and_validate() -> None:
    assert AIModifiers(temperature=1.7).temperature == 1.0
    assert AIModifiers(temperature=-2).temperature == 0.0
    with pytest.raises(ValueError):
        AIModifiers(tone="sarcastic")
    assert AIModifiers.from_dict({"tone": "Sarcastic"}).tone == "constructive"
    assert AIModifiers.from_dict(None) == AIModifiers()


def test_store_round_trips_settings(tmp_path) -> None:
    path = tmp_path / "state" / "settings.json"
    store = JsonKeyValueStore(path)
    assert load_benchmark_modifiers(store) is None
    assert load_ai_modifiers(store) == AIModifiers()

    modifiers = update_seasonal_metric(default_benchmark_modifiers(), "Meta", "Q2 (Spring)", "cpc", 1.1)
    save_benchmark_modifiers(store, modifiers)
    save_ai_modifiers(store, AIModifiers(temperature=0.3, tone="formal", additional_instructions="Be brief"))

    reopened = JsonKeyValueStore(path)
    assert reopened.keys() == [CAMPAIGN_MODIFIERS_KEY, AI_MODIFIERS_KEY]
    assert load_benchmark_modifiers(reopened) == modifiers
    ai = load_ai_modifiers(reopened)
    assert (ai.temperature, ai.tone, ai.additional_instructions) == (0.3, "formal", "Be brief")

    stored = json.loads(path.read_text(encoding="utf-8"))
    assert stored[AI_MODIFIERS_KEY]["additionalInstructions"] == "Be brief"
    assert stored[CAMPAIGN_MODIFIERS_KEY]["Meta"]["performancePatterns"]["seasonal"]["Q2 (Spring)"]["cpc"] == 1.1


def test_corrupt_store_starts_empty(tmp_path, capsys) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    store = JsonKeyValueStore(path)

    assert store.keys() == []
    assert "[Store]" in capsys.readouterr().out
    store.set("aiModifiers", {"tone": "direct"})
    assert load_ai_modifiers(JsonKeyValueStore(path)).tone == "direct"


@pytest.mark.parametrize("raw", ["inf", "-inf", float("inf"), "nan"])
def test_non_finite_values_become_zero(raw) -> None:
    updated = update_monthly_metric(default_benchmark_modifiers(), "Meta", "March", "cpc", raw)

    assert updated["Meta"].performance_patterns.monthly["March"].cpc == 0.0
    assert MetricSet().with_metric("ctr", raw).ctr == 0.0
