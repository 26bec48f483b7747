from __future__ import annotations

import json

import pandas as pd

from Campaign_analyzer.csv_tables import ParsedTable, TableStore, normalize_numeric_field, parse_csv_text


def test_header_row_maps_every_column_in_order() -> None:
    parsed = parse_csv_text('Month,Impressions,Clicks\nJan,1000,12\n"Feb",2000,30\n')

    assert parsed["headers"] == ["Month", "Impressions", "Clicks"]
    assert parsed["rows"] == [
        {"Month": "Jan", "Impressions": "1000", "Clicks": "12"},
        {"Month": "Feb", "Impressions": "2000", "Clicks": "30"},
    ]
    for row in parsed["rows"]:
        assert list(row.keys()) == parsed["headers"]


def test_short_input_yields_empty_table() -> None:
    assert parse_csv_text("") == {"headers": [], "rows": []}
    assert parse_csv_text("Month,Clicks") == {"headers": [], "rows": []}
    assert parse_csv_text("   \n\n") == {"headers": [], "rows": []}


def test_missing_trailing_fields_become_empty_strings() -> None:
    parsed = parse_csv_text("A,B,C\n1\n1,2")

    assert parsed["rows"] == [{"A": "1", "B": "", "C": ""}, {"A": "1", "B": "2", "C": ""}]


def test_quoted_commas_are_split_naively() -> None:
    parsed = parse_csv_text('City,Clicks\n"Austin, TX",12')

    assert parsed["rows"] == [{"City": "Austin", "Clicks": "TX"}]


def test_duplicate_headers_keep_later_value() -> None:
    parsed = parse_csv_text("Clicks,Clicks\n1,2")

    assert parsed["headers"] == ["Clicks", "Clicks"]
    assert parsed["rows"] == [{"Clicks": "2"}]


def test_thousands_separators_are_removed_from_single_fields() -> None:
    assert normalize_numeric_field("12,345") == "12345"
    assert normalize_numeric_field("1,234,567") == "1234567"
    assert normalize_numeric_field("12,34") == "12,34"
    assert normalize_numeric_field("Austin") == "Austin"


def test_to_frame_converts_numeric_columns() -> None:
    table = ParsedTable.from_text(
        "Month,Impressions,CTR\nJan,1000,0.5\nFeb,,0.7",
        file_name="monthly.csv",
        tactic="Meta",
        table_name="Monthly Performance",
    )

    frame = table.to_frame()

    assert list(frame.columns) == ["Month", "Impressions", "CTR"]
    assert frame["Month"].tolist() == ["Jan", "Feb"]
    assert frame["Impressions"].iloc[0] == 1000
    assert pd.isna(frame["Impressions"].iloc[1])
    assert frame["CTR"].tolist() == [0.5, 0.7]


def test_store_keeps_last_write_per_slot() -> None:
    store = TableStore()
    first = ParsedTable.from_text("A,B\n1,2", file_name="one.csv", tactic="Meta", table_name="Monthly Performance")
    second = ParsedTable.from_text("A,B\n3,4", file_name="two.csv", tactic="Meta", table_name="Monthly Performance")
    other = ParsedTable.from_text("A\n9", file_name="three.csv", tactic="SEM", table_name="Monthly Performance")

    store.put(first)
    store.put(second)
    store.put(other)

    assert len(store) == 2
    assert store.get("Meta", "Monthly Performance").file_name == "two.csv"
    assert ("SEM", "Monthly Performance") in store
    assert [table.file_name for table in store.for_tactic("Meta")] == ["two.csv"]


def test_store_payload_is_keyed_by_tactic_and_table() -> None:
    store = TableStore()
    store.put(ParsedTable.from_text("A,B\n1,2", file_name="x.csv", tactic="Meta", table_name="Region Performance"))

    payload = json.loads(store.to_json())

    assert payload == {
        "Meta_Region Performance": {
            "fileName": "x.csv",
            "tableName": "Region Performance",
            "tactic": "Meta",
            "headers": ["A", "B"],
            "rows": [{"A": "1", "B": "2"}],
        }
    }

    store.clear()
    assert len(store) == 0


def test_decimal_with_separator_is_left_alone() -> None:
    assert normalize_numeric_field("1,234.56") == "1,234.56"


def test_reparsing_same_file_into_same_slot_is_idempotent() -> None:
    text = "Month,Clicks\nJan,10\nFeb,12"
    once = TableStore()
    once.put(ParsedTable.from_text(text, file_name="m.csv", tactic="Meta", table_name="Monthly Performance"))
    twice = TableStore()
    for _ in range(2):
        twice.put(ParsedTable.from_text(text, file_name="m.csv", tactic="Meta", table_name="Monthly Performance"))

    assert len(twice) == 1
    assert twice.get("Meta", "Monthly Performance") == once.get("Meta", "Monthly Performance")


def test_only_ascii_digits_count_as_thousands_groups() -> None:
    assert normalize_numeric_field("١٢,٣٤٥") == "١٢,٣٤٥"
    assert normalize_numeric_field("12,345") == "12345"
