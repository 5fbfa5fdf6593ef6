"""Documentation search-index records: loading, validation and queries."""

from __future__ import annotations

from .docstrings import DocstringSections, Parameter, parse_docstring
from .io import dump, dumps, load, loads
from .records import Category, IndexFormatError, IndexRecord, SearchIndex
from .validation import ValidationIssue, check_round_trip, validate_index

__all__ = [
    "Category",
    "DocstringSections",
    "IndexFormatError",
    "IndexRecord",
    "Parameter",
    "SearchIndex",
    "ValidationIssue",
    "check_round_trip",
    "dump",
    "dumps",
    "load",
    "loads",
    "parse_docstring",
    "validate_index",
]
