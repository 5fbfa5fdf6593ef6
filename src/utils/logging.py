"""Artifact logging helpers (JSON summaries)."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


def write_summary_json(path: Path | str, summary: Dict[str, Any]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fp:
        json.dump(summary, fp, indent=2)
    logger.debug("Wrote summary to %s", path)
    return path


__all__ = [
    "write_summary_json",
]
