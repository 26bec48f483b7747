"""Route bulk-uploaded CSV exports to their ``(tactic, table)`` slots by filename."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from Campaign_analyzer.csv_tables import ParsedTable, TableStore
from Campaign_analyzer.errors import InputError
from Campaign_analyzer.tactic_tables import tables_for_tactic

_REPORT_PREFIX = re.compile(r"^report-")
_DUPLICATE_SUFFIX = re.compile(r"\s*\(\d+\)(?=\.csv$)")
_NON_LETTER = re.compile(r"[^a-z]")


def decode_upload(data: Union[str, bytes], file_name: str) -> str:
    """Decode uploaded CSV bytes as UTF-8, dropping a leading BOM."""
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise InputError(f"{file_name} is not UTF-8 encoded text ({exc.reason} at byte {exc.start})") from exc


@dataclass(slots=True)
class UploadedFile:
    """A file handed to the bulk uploader: its display name and raw content.

    Content may be bytes straight from disk or a browser upload; it is decoded
    only when the file is processed.
    """

    name: str
    content: Union[str, bytes]

    @classmethod
    def from_path(cls, path: str | Path) -> "UploadedFile":
        source = Path(path)
        return cls(name=source.name, content=source.read_bytes())

    def text(self) -> str:
        return decode_upload(self.content, self.name)


@dataclass(slots=True)
class Assignment:
    file_name: str
    product: str
    tactic: str
    table_name: str


@dataclass(slots=True)
class BulkUploadSummary:
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    assignments: List[Assignment] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)

    def describe(self) -> str:
        text = f"Processed {self.processed} file(s)"
        if self.skipped:
            text += f", skipped {self.skipped}"
        if self.errors:
            text += f", {self.errors} error(s)"
        return text + "."


def normalize_filename(file_name: str) -> str:
    """Lower-case and drop the ``report-`` prefix and `` (N)`` duplicate counter."""
    normalized = file_name.lower()
    normalized = _REPORT_PREFIX.sub("", normalized)
    normalized = _DUPLICATE_SUFFIX.sub("", normalized)
    return normalized


def _compact(name: str) -> str:
    return _NON_LETTER.sub("", name.lower())


def _hyphenate(name: str) -> str:
    return name.lower().replace(" ", "-")


def detect_product(normalized_name: str, products: Sequence[str]) -> Optional[str]:
    for product in products:
        compact = _compact(product)
        if (compact and compact in normalized_name) or _hyphenate(product) in normalized_name:
            return product
    return None


def detect_table(normalized_name: str, tables: Sequence[str]) -> Optional[str]:
    for table in tables:
        if _hyphenate(table) in normalized_name:
            return table
    for table in tables:
        words = [_hyphenate(word) for word in table.lower().split()]
        if words and all(word in normalized_name for word in words):
            return table
    return None


def classify_filename(
    file_name: str,
    product_groups: Mapping[str, Sequence[str]],
    *,
    table_lookup: Callable[[str], List[str]] = tables_for_tactic,
) -> Tuple[Optional[Assignment], Optional[str]]:
    """Return ``(assignment, None)`` on success or ``(None, reason)`` when unmatched."""

    normalized = normalize_filename(file_name)
    product = detect_product(normalized, list(product_groups.keys()))
    if product is None:
        return None, f"Could not detect product for {file_name}"

    tactics = list(product_groups[product])
    tactic = tactics[0] if tactics else product
    table = detect_table(normalized, table_lookup(tactic))
    if table is None:
        return None, f"Could not detect table type for {file_name} (product: {product})"

    return Assignment(file_name=file_name, product=product, tactic=tactic, table_name=table), None


def classify_uploads(
    files: Iterable[UploadedFile],
    product_groups: Mapping[str, Sequence[str]],
    store: TableStore,
    *,
    table_lookup: Callable[[str], List[str]] = tables_for_tactic,
) -> BulkUploadSummary:
    """Assign each CSV to a slot and store its parsed contents.

    A file that cannot be matched or parsed is counted and reported; the rest
    of the batch keeps going.
    """

    summary = BulkUploadSummary()
    for upload in files:
        if not upload.name.lower().endswith(".csv"):
            summary.skipped += 1
            summary.messages.append(f"Skipped non-CSV file {upload.name}")
            continue

        assignment, reason = classify_filename(upload.name, product_groups, table_lookup=table_lookup)
        if assignment is None:
            print(f"[Bulk] {reason}")
            summary.skipped += 1
            summary.messages.append(str(reason))
            continue

        try:
            table = ParsedTable.from_text(
                upload.text(),
                file_name=upload.name,
                tactic=assignment.tactic,
                table_name=assignment.table_name,
            )
        except (InputError, TypeError, ValueError) as exc:
            print(f"[Bulk] Error processing {upload.name}: {exc}")
            summary.errors += 1
            summary.messages.append(f"Error processing {upload.name}: {exc}")
            continue

        store.put(table)
        summary.processed += 1
        summary.assignments.append(assignment)
        print(f"[Bulk] {upload.name} -> {assignment.tactic} / {assignment.table_name}")

    print(f"[Bulk] {summary.describe()}")
    return summary


def group_summary(summary: BulkUploadSummary) -> Dict[str, List[str]]:
    """Tables assigned per tactic, in assignment order."""
    grouped: Dict[str, List[str]] = {}
    for item in summary.assignments:
        grouped.setdefault(item.tactic, []).append(item.table_name)
    return grouped
