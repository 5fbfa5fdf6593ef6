"""Structural checks for search indexes."""

from __future__ import annotations

from dataclasses import dataclass

from .io import dumps, loads
from .records import SearchIndex


@dataclass(frozen=True)
class ValidationIssue:
    position: int
    field: str
    message: str

    def __str__(self) -> str:
        return f"record {self.position} [{self.field}]: {self.message}"


def validate_index(index: SearchIndex, *, allow_root_location: bool = True) -> list[ValidationIssue]:
    """Return every structural problem found; an empty list means the index is clean.

    Documenter gives the home page an empty ``location``; that is only
    reported when ``allow_root_location`` is False.
    """
    issues: list[ValidationIssue] = []
    seen: dict[tuple[str, str, str], int] = {}
    for position, record in enumerate(index):
        if not record.location and not allow_root_location:
            issues.append(ValidationIssue(position, "location", "empty location"))
        if not record.page:
            issues.append(ValidationIssue(position, "page", "empty page"))
        if not record.title:
            issues.append(ValidationIssue(position, "title", "empty title"))
        if record.category.is_symbol and not record.text.strip():
            issues.append(ValidationIssue(position, "text", f"{record.category.value} '{record.title}' has no docstring"))
        key = (record.location, record.title, record.text)
        if key in seen:
            issues.append(ValidationIssue(position, "location", f"duplicate of record {seen[key]}"))
        else:
            seen[key] = position
    return issues


def check_round_trip(index: SearchIndex) -> bool:
    """Whether serialising and re-parsing reproduces the same records."""
    return loads(dumps(index)) == index and loads(dumps(index, js_variable="documenterSearchIndex")) == index
