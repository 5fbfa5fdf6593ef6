"""Search-index summary CLI.

Loads a documentation search index (plain JSON or the ``var ... = {...}``
wrapper), validates its records and prints per-page tables. Rows may
optionally be exported to CSV for downstream analysis.
"""
from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List

import pandas as pd

from .docstrings import parse_docstring
from .io import load
from .records import Category, IndexFormatError, SearchIndex
from .validation import ValidationIssue, validate_index

logger = logging.getLogger(__name__)


@dataclass
class IndexSummary:
    """Structured summary of a loaded search index."""

    index: SearchIndex = field(default_factory=SearchIndex)
    issues: list[ValidationIssue] = field(default_factory=list)
    page_rows: list[dict[str, Any]] = field(default_factory=list)
    symbol_rows: list[dict[str, Any]] = field(default_factory=list)

    def as_records(self) -> list[dict[str, Any]]:
        """Flatten page and symbol rows with row type markers."""
        records: list[dict[str, Any]] = []
        records.extend({"row_type": "page", **row} for row in self.page_rows)
        records.extend({"row_type": "symbol", **row} for row in self.symbol_rows)
        return records


def _page_rows(index: SearchIndex) -> list[dict[str, Any]]:
    counts = index.counts()
    rows = []
    for page in index.pages():
        row: dict[str, Any] = {"page": page, "records": 0}
        for category in Category:
            count = counts.get((page, category.value), 0)
            row[f"{category.value}_records"] = count
            row["records"] += count
        rows.append(row)
    return rows


def _symbol_rows(index: SearchIndex) -> list[dict[str, Any]]:
    rows = []
    for title, record in index.symbols().items():
        sections = parse_docstring(record.text)
        rows.append({
            "symbol": title,
            "page": record.page,
            "category": record.category.value,
            "summary": sections.summary.splitlines()[0] if sections.summary else "",
            "inputs": len(sections.inputs),
            "outputs": len(sections.outputs),
            "references": len(sections.references),
        })
    return rows


def summarise_index(path: Path | str, *, allow_root_location: bool = True) -> IndexSummary:
    """Load and validate the index at ``path``."""
    index = load(path)
    summary = IndexSummary(index=index)
    summary.issues = validate_index(index, allow_root_location=allow_root_location)
    for issue in summary.issues:
        logger.warning("%s", issue)
    summary.page_rows = _page_rows(index)
    summary.symbol_rows = _symbol_rows(index)
    return summary


def _print_table(title: str, rows: Iterable[dict[str, Any]], columns: List[str]) -> None:
    rows_list = list(rows)
    if not rows_list:
        return
    df = pd.DataFrame(rows_list)
    missing_cols = [col for col in columns if col not in df.columns]
    for col in missing_cols:
        df[col] = None
    df = df[columns]
    print(f"\n{title}")
    print(df.to_string(index=False))


def _save_records(path: Path, records: list[dict[str, Any]]) -> None:
    if not records:
        logger.info("No records to persist to %s", path)
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(records)
    df.to_csv(path, index=False)
    logger.info("Wrote index summary to %s", path)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Summarise and validate a documentation search index.")
    parser.add_argument("--index", type=str, required=True, help="Path to search_index.js or a JSON index.")
    parser.add_argument("--output", type=str, default=None, help="Optional CSV path for page and symbol rows.")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject empty locations and exit non-zero when any issue is found.",
    )
    parser.add_argument("--log-level", type=str, default="INFO")
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper()))

    index_path = Path(args.index)
    if not index_path.exists():
        logger.error("Index file %s does not exist", index_path)
        return 1
    try:
        summary = summarise_index(index_path, allow_root_location=not args.strict)
    except IndexFormatError as exc:
        logger.error("Malformed search index %s: %s", index_path, exc)
        return 1

    if not len(summary.index):
        logger.warning("No records found in %s", index_path)
        return 0

    categories = [f"{category.value}_records" for category in Category]
    _print_table("Pages", summary.page_rows, ["page", "records", *categories])
    _print_table(
        "Documented Symbols",
        summary.symbol_rows,
        ["symbol", "category", "summary", "inputs", "outputs", "references"],
    )
    print(f"\n{len(summary.index)} records, {len(summary.issues)} issue(s)")

    if args.output:
        _save_records(Path(args.output), summary.as_records())

    if args.strict and summary.issues:
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
