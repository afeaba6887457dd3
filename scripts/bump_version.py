#!/usr/bin/env python3
"""Set the release version in manifest.json and pyproject.toml together."""

from __future__ import annotations

import argparse
import json
import re
from pathlib import Path

MANIFEST = Path("custom_components/workout_planner/manifest.json")
PYPROJECT = Path("pyproject.toml")

_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+([.-]?[0-9A-Za-z.]+)?$")
_PYPROJECT_VERSION_RE = re.compile(r'^version = "[^"]*"$', re.MULTILINE)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser()
    p.add_argument("--version", required=True, help="New version, e.g. 0.2.0")
    p.add_argument("--dry-run", action="store_true", help="Print the change without writing")
    return p.parse_args()


def main() -> int:
    args = parse_args()
    version = str(args.version).strip()
    if not _VERSION_RE.match(version):
        raise SystemExit(f"Invalid --version: {version!r}")

    manifest = json.loads(MANIFEST.read_text(encoding="utf-8"))
    old = manifest.get("version")
    manifest["version"] = version

    pyproject = PYPROJECT.read_text(encoding="utf-8")
    pyproject, count = _PYPROJECT_VERSION_RE.subn(f'version = "{version}"', pyproject, count=1)
    if count != 1:
        raise SystemExit(f"No version line found in {PYPROJECT}")

    print(f"{old} -> {version}")
    if args.dry_run:
        return 0
    MANIFEST.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
    PYPROJECT.write_text(pyproject, encoding="utf-8")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
