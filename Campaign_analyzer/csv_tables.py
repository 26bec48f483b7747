"""CSV ingestion for uploaded performance tables.

The parser is intentionally naive: fields are split on every comma and double
quotes are removed, so a quoted value that itself contains commas is split into
several fields. Quoting is not RFC-4180 aware.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

import pandas as pd


_THOUSANDS_PATTERN = re.compile(r"^\d{1,3}(,\d{3})*$", re.ASCII)

TableKey = Tuple[str, str]


def _clean_field(raw: str) -> str:
    return raw.strip().replace('"', "")


def normalize_numeric_field(value: str) -> str:
    """Strip thousands separators from values such as ``12,345``."""
    if _THOUSANDS_PATTERN.match(value):
        return value.replace(",", "")
    return value


def parse_csv_text(text: str) -> Dict[str, list]:
    """Return ``{"headers": [...], "rows": [...]}`` for raw CSV text.

    Fewer than two lines yields empty headers and rows. Duplicate header names
    are kept as-is; the later column wins when the row mapping is built.
    """

    lines = text.strip().split("\n")
    if len(lines) < 2:
        return {"headers": [], "rows": []}

    headers = [_clean_field(part) for part in lines[0].split(",")]
    rows: List[Dict[str, str]] = []
    for line in lines[1:]:
        values = [normalize_numeric_field(_clean_field(part)) for part in line.split(",")]
        row: Dict[str, str] = {}
        for index, header in enumerate(headers):
            row[header] = values[index] if index < len(values) else ""
        rows.append(row)
    return {"headers": headers, "rows": rows}


@dataclass(slots=True)
class ParsedTable:
    """One uploaded performance table bound to a tactic slot."""

    file_name: str
    table_name: str
    tactic: str
    headers: List[str] = field(default_factory=list)
    rows: List[Dict[str, str]] = field(default_factory=list)

    @property
    def key(self) -> TableKey:
        return (self.tactic, self.table_name)

    @classmethod
    def from_text(cls, text: str, *, file_name: str, tactic: str, table_name: str) -> "ParsedTable":
        parsed = parse_csv_text(text)
        return cls(
            file_name=file_name,
            table_name=table_name,
            tactic=tactic,
            headers=parsed["headers"],
            rows=parsed["rows"],
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "fileName": self.file_name,
            "tableName": self.table_name,
            "tactic": self.tactic,
            "headers": list(self.headers),
            "rows": [dict(row) for row in self.rows],
        }

    def to_frame(self) -> pd.DataFrame:
        """Rows as a DataFrame with fully numeric columns converted to numbers."""
        columns = list(dict.fromkeys(self.headers))
        if not columns:
            return pd.DataFrame()
        frame = pd.DataFrame(self.rows, columns=columns)
        for column in frame.columns:
            cleaned = frame[column].astype(str).str.strip()
            non_empty = cleaned[cleaned != ""]
            if non_empty.empty:
                continue
            converted = pd.to_numeric(non_empty, errors="coerce")
            if converted.notna().all():
                frame[column] = pd.to_numeric(cleaned.mask(cleaned == ""), errors="coerce")
        return frame


class TableStore:
    """In-memory slots of parsed tables keyed by ``(tactic, table name)``.

    Writes replace the whole slot; the last upload for a key wins.
    """

    def __init__(self) -> None:
        self._tables: Dict[TableKey, ParsedTable] = {}

    def put(self, table: ParsedTable) -> None:
        self._tables[table.key] = table

    def get(self, tactic: str, table_name: str) -> ParsedTable | None:
        return self._tables.get((tactic, table_name))

    def has(self, tactic: str, table_name: str) -> bool:
        return (tactic, table_name) in self._tables

    def for_tactic(self, tactic: str) -> List[ParsedTable]:
        return [table for (owner, _), table in self._tables.items() if owner == tactic]

    def clear(self) -> None:
        self._tables.clear()

    def __len__(self) -> int:
        return len(self._tables)

    def __iter__(self) -> Iterator[ParsedTable]:
        return iter(list(self._tables.values()))

    def __contains__(self, key: object) -> bool:
        return key in self._tables

    def to_payload(self) -> Dict[str, Dict[str, object]]:
        """Serialisable view keyed ``"<tactic>_<table>"`` for prompts and exports."""
        return {f"{tactic}_{table_name}": table.to_dict() for (tactic, table_name), table in self._tables.items()}

    def to_json(self, *, indent: int = 2) -> str:
        return json.dumps(self.to_payload(), indent=indent)
