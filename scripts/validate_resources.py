#!/usr/bin/env python3
"""Validate a resources JSON file against schema.json.

Usage:
    python scripts/validate_resources.py data/outputs/weekly/merged-resources.json
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from merge.validate import load_schema, validate_document

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate resources JSON against the schema")
    parser.add_argument("resources_file", type=Path, help="Resources JSON document")
    parser.add_argument("--schema", type=Path, help="JSON Schema (default: schema.json)")
    args = parser.parse_args()

    try:
        schema = load_schema(args.schema)
        with open(args.resources_file, "r", encoding="utf-8") as f:
            document = json.load(f)
    except (OSError, ValueError) as e:
        logger.error("Cannot load input: %s", e)
        sys.exit(1)

    result = validate_document(document, schema)

    print(f"Errors: {len(result.errors)}")
    for error in result.errors:
        print(f"  - {error}")
    print(f"Warnings: {len(result.warnings)}")
    for warning in result.warnings:
        print(f"  - {warning}")

    sys.exit(0 if result.ok else 1)


if __name__ == "__main__":
    main()
