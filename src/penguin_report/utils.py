from __future__ import annotations

import hashlib
import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_run_id() -> str:
    """
    Run ids sort chronologically: UTC timestamp plus a short random suffix.
    """
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
    return f"{stamp}_{uuid.uuid4().hex[:8]}"


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def write_json(path: Path, obj: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2, sort_keys=True, ensure_ascii=False) + "\n", encoding="utf-8")


def merge_json(path: Path, payload: dict[str, Any]) -> None:
    """Best-effort merge of top-level keys into a JSON object on disk."""
    try:
        existing = read_json(path) if path.exists() else {}
        if not isinstance(existing, dict):
            existing = {}
        existing.update(payload)
        write_json(path, existing)
    except (OSError, ValueError):
        # Never fail the run due to logging.
        return


def append_json_list(path: Path, key: str, item: Any) -> None:
    """Best-effort append of `item` to the list stored under `key`."""
    try:
        existing = read_json(path) if path.exists() else {}
        if not isinstance(existing, dict):
            existing = {}
        items = existing.get(key)
        if not isinstance(items, list):
            items = []
        items.append(item)
        existing[key] = items
        write_json(path, existing)
    except (OSError, ValueError):
        return


def sha256_file(path: Path, chunk_size: int = 1024 * 1024) -> str:
    """
    Computes a sha256 fingerprint of the CSV file for traceability.
    """
    h = hashlib.sha256()
    with path.open("rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            h.update(chunk)
    return h.hexdigest()
