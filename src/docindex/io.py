"""Reading and writing search indexes as JSON or as the site's JavaScript wrapper."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Optional

from .records import IndexFormatError, SearchIndex

logger = logging.getLogger(__name__)

DEFAULT_JS_VARIABLE = "documenterSearchIndex"

_JS_WRAPPER = re.compile(r"^\s*(?:var|let|const)\s+([A-Za-z_$][\w$]*)\s*=\s*(.*?)\s*;?\s*$", re.DOTALL)


def _strip_js_wrapper(text: str) -> str:
    match = _JS_WRAPPER.match(text)
    if match is None:
        return text
    logger.debug("Unwrapping JavaScript variable '%s'", match.group(1))
    return match.group(2)


def loads(text: str) -> SearchIndex:
    """Parse ``{"docs": [...]}``, optionally wrapped as ``var name = {...}``."""
    payload = _strip_js_wrapper(text)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise IndexFormatError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise IndexFormatError(f"top level must be an object, got {type(data).__name__}")
    if "docs" not in data:
        raise IndexFormatError("missing 'docs' key")
    docs = data["docs"]
    if not isinstance(docs, list):
        raise IndexFormatError(f"'docs' must be an array, got {type(docs).__name__}")
    return SearchIndex.from_dicts(docs)


def load(path: Path | str) -> SearchIndex:
    path = Path(path)
    with path.open("r", encoding="utf-8") as fp:
        index = loads(fp.read())
    logger.info("Loaded %d records from %s", len(index), path)
    return index


def dumps(index: SearchIndex, *, indent: Optional[int] = None, js_variable: Optional[str] = None) -> str:
    """Serialise an index; ``js_variable`` emits ``var <name> = {...}``."""
    body = json.dumps({"docs": index.to_dicts()}, ensure_ascii=False, indent=indent)
    if js_variable is None:
        return body
    if not re.fullmatch(r"[A-Za-z_$][\w$]*", js_variable):
        raise ValueError(f"Invalid JavaScript identifier '{js_variable}'.")
    return f"var {js_variable} = {body}\n"


def dump(
    index: SearchIndex,
    path: Path | str,
    *,
    indent: Optional[int] = None,
    js_variable: Optional[str] = None,
) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fp:
        fp.write(dumps(index, indent=indent, js_variable=js_variable))
    logger.info("Wrote %d records to %s", len(index), path)
    return path
