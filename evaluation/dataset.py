from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List

from utils.logger import get_logger

logger = get_logger(__name__)


def _load_jsonl(p: Path) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    with p.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning("dataset_line_skipped", path=str(p), line=lineno, error=str(e))
                continue
            if not isinstance(obj, dict):
                logger.warning("dataset_line_skipped", path=str(p), line=lineno, error="not a JSON object")
                continue
            rows.append(obj)
    return rows


def _load_csv(p: Path) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    with p.open("r", encoding="utf-8", newline="") as f:
        for row in csv.DictReader(f):
            datum: Dict[str, Any] = dict(row)
            if not datum.get("expected"):
                datum.pop("expected", None)
            rows.append(datum)
    return rows


def load_dataset(path: str | Path) -> List[Dict[str, Any]]:
    """Read evaluation data: one mapping per row with ``input`` and optional ``expected``."""
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".jsonl":
        return _load_jsonl(p)
    if suffix == ".csv":
        return _load_csv(p)
    raise ValueError(f"Unsupported dataset format: {p.suffix}")


__all__ = ["load_dataset"]
