#!/usr/bin/env python3
"""
Export the mentorship API's OpenAPI schema.
Run from the repository root:
  poetry run python scripts/export_openapi.py
  PYTHONPATH=. python scripts/export_openapi.py -o docs/openapi.json
  PYTHONPATH=. python scripts/export_openapi.py -o - --tag mentorship
Use "-" as the output to print to stdout; --tag keeps only matching routes.
"""
import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from clstr.main import app


def _filter_tags(schema: dict, tags: set[str]) -> dict:
    paths = {}
    for path, operations in schema.get("paths", {}).items():
        kept = {
            method: op
            for method, op in operations.items()
            if tags & set(op.get("tags", []))
        }
        if kept:
            paths[path] = kept
    return {**schema, "paths": paths}


def main() -> None:
    parser = argparse.ArgumentParser(description="Export OpenAPI schema to JSON")
    parser.add_argument(
        "-o",
        "--output",
        default="openapi.json",
        help='Output JSON file path, or "-" for stdout (default: openapi.json)',
    )
    parser.add_argument(
        "--tag",
        action="append",
        default=[],
        help="Only export routes with this tag (repeatable)",
    )
    args = parser.parse_args()

    schema = app.openapi()
    if args.tag:
        schema = _filter_tags(schema, set(args.tag))

    text = json.dumps(schema, indent=2, ensure_ascii=False)
    if args.output == "-":
        print(text)
        return

    out_path = Path(args.output)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text + "\n", encoding="utf-8")
    print(f"Exported {len(schema['paths'])} path(s) to {out_path.absolute()}")


if __name__ == "__main__":
    main()
