"""Integration version, read from manifest.json."""

from __future__ import annotations

import json
from functools import cache
from pathlib import Path


@cache
def get_version() -> str:
    manifest_path = Path(__file__).with_name("manifest.json")
    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return "0.0.0"
    return str(data.get("version") or "").strip() or "0.0.0"
