from __future__ import annotations

from types import SimpleNamespace

import pytest

import Campaign_analyzer.dashboard as dashboard


@pytest.fixture()
def fake_state(monkeypatch: pytest.MonkeyPatch) -> dict:
    state: dict = {}
    monkeypatch.setattr(dashboard, "st", SimpleNamespace(session_state=state))
    return state


def test_same_named_corrected_upload_is_ingested_again(fake_state) -> None:
    first = SimpleNamespace(name="meta-monthly-performance.csv", file_id="a1")
    corrected = SimpleNamespace(name="meta-monthly-performance.csv", file_id="b2")

    assert dashboard._is_new_upload("ingested_Meta_Monthly Performance", first)
    assert not dashboard._is_new_upload("ingested_Meta_Monthly Performance", first)
    assert dashboard._is_new_upload("ingested_Meta_Monthly Performance", corrected)
    assert fake_state["ingested_Meta_Monthly Performance"] == "b2"


def test_upload_identity_is_tracked_per_slot(fake_state) -> None:
    upload = SimpleNamespace(name="campaign.json", file_id="c3")

    assert dashboard._is_new_upload("campaign_file", upload)
    assert dashboard._is_new_upload("company_file", upload)
    assert not dashboard._is_new_upload("campaign_file", upload)
