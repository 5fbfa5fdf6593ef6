"""Search-index records emitted by the documentation build."""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence, overload

import pandas as pd

RECORD_FIELDS = ("location", "page", "title", "text", "category")


class IndexFormatError(ValueError):
    """Raised when a search index or one of its records is malformed."""


class Category(str, Enum):
    PAGE = "page"
    TYPE = "type"
    METHOD = "method"
    FUNCTION = "function"
    SECTION = "section"

    @property
    def is_symbol(self) -> bool:
        """Whether records of this category document an API symbol."""
        return self in (Category.TYPE, Category.METHOD, Category.FUNCTION)


@dataclass(frozen=True)
class IndexRecord:
    location: str
    page: str
    title: str
    text: str
    category: Category

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, position: Optional[int] = None) -> "IndexRecord":
        where = f"record {position}" if position is not None else "record"
        if not isinstance(data, Mapping):
            raise IndexFormatError(f"{where}: expected an object, got {type(data).__name__}")
        missing = [key for key in RECORD_FIELDS if key not in data]
        if missing:
            raise IndexFormatError(f"{where}: missing field(s) {', '.join(missing)}")
        for key in RECORD_FIELDS:
            if not isinstance(data[key], str):
                raise IndexFormatError(f"{where}: field '{key}' must be a string")
        try:
            category = Category(data["category"])
        except ValueError:
            raise IndexFormatError(f"{where}: unknown category '{data['category']}'") from None
        return cls(
            location=data["location"],
            page=data["page"],
            title=data["title"],
            text=data["text"],
            category=category,
        )

    def to_dict(self) -> dict[str, str]:
        data = asdict(self)
        data["category"] = self.category.value
        return {key: data[key] for key in RECORD_FIELDS}

    @property
    def path(self) -> str:
        return self.location.partition("#")[0]

    @property
    def anchor(self) -> str:
        return self.location.partition("#")[2]


class SearchIndex(Sequence[IndexRecord]):
    """Immutable, ordered collection of index records.

    A documentation build replaces the whole index, so there are no mutators;
    filters return a new ``SearchIndex``.
    """

    __slots__ = ("_records",)

    def __init__(self, records: Iterable[IndexRecord] = ()) -> None:
        items = tuple(records)
        for position, record in enumerate(items):
            if not isinstance(record, IndexRecord):
                raise TypeError(f"record {position} is {type(record).__name__}, expected IndexRecord")
        self._records = items

    @classmethod
    def from_dicts(cls, items: Iterable[Mapping[str, Any]]) -> "SearchIndex":
        return cls(IndexRecord.from_dict(item, position=i) for i, item in enumerate(items))

    @overload
    def __getitem__(self, index: int) -> IndexRecord: ...

    @overload
    def __getitem__(self, index: slice) -> "SearchIndex": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return SearchIndex(self._records[index])
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[IndexRecord]:
        return iter(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SearchIndex):
            return NotImplemented
        return self._records == other._records

    def __hash__(self) -> int:
        return hash(self._records)

    def __repr__(self) -> str:
        return f"SearchIndex({len(self._records)} records, pages={self.pages()})"

    @property
    def records(self) -> tuple[IndexRecord, ...]:
        return self._records

    def to_dicts(self) -> list[dict[str, str]]:
        return [record.to_dict() for record in self._records]

    def pages(self) -> list[str]:
        """Distinct page names in first-seen order."""
        return list(dict.fromkeys(record.page for record in self._records))

    def by_category(self, category: Category | str) -> "SearchIndex":
        category = Category(category)
        return SearchIndex(r for r in self._records if r.category is category)

    def by_page(self, page: str) -> "SearchIndex":
        return SearchIndex(r for r in self._records if r.page == page)

    def lookup(self, title: str) -> list[IndexRecord]:
        return [r for r in self._records if r.title == title]

    def filter(
        self,
        *,
        category: Category | str | None = None,
        page: Optional[str] = None,
        contains: Optional[str] = None,
    ) -> "SearchIndex":
        """Select records by category, page and a case-insensitive substring of title or text."""
        wanted = Category(category) if category is not None else None
        needle = contains.casefold() if contains else None
        selected = []
        for record in self._records:
            if wanted is not None and record.category is not wanted:
                continue
            if page is not None and record.page != page:
                continue
            if needle is not None and needle not in record.title.casefold() and needle not in record.text.casefold():
                continue
            selected.append(record)
        return SearchIndex(selected)

    def symbols(self) -> dict[str, IndexRecord]:
        """Documented API symbols keyed by fully qualified title.

        Methods documented for several signatures share a title; the first
        record wins.
        """
        symbols: dict[str, IndexRecord] = {}
        for record in self._records:
            if record.category.is_symbol:
                symbols.setdefault(record.title, record)
        return symbols

    def counts(self) -> Counter:
        return Counter((record.page, record.category.value) for record in self._records)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.to_dicts(), columns=list(RECORD_FIELDS))
