"""Validate a resource list against schema.json plus data-quality checks.

Schema violations are hard errors and block publication. Duplicate keys,
scores outside the nominal band and missing risk coverage are warnings only.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from jsonschema import FormatChecker
from jsonschema.validators import validator_for

from practitioner_types import resource_key

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schema.json"

# Nominal quality band; scores outside it are flagged, not rejected
SCORE_BAND = (60, 100)
SCORE_FIELDS = ("overall_score", "highest_score")


@dataclass
class ValidationResult:
    """Outcome of validating a resource list."""

    ok: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def load_schema(path: Optional[Path] = None) -> dict:
    """Load the JSON Schema document.

    Raises:
        FileNotFoundError: If the schema file does not exist
    """
    schema_path = Path(path) if path else SCHEMA_PATH
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")
    with open(schema_path, "r", encoding="utf-8") as f:
        return json.load(f)


def _schema_errors(document, schema: dict) -> list[str]:
    cls = validator_for(schema)
    cls.check_schema(schema)
    validator = cls(schema, format_checker=FormatChecker())
    errors = sorted(validator.iter_errors(document), key=lambda e: e.json_path)
    return [f"{e.json_path}: {e.message}" for e in errors]


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _quality_warnings(resources: list) -> list[str]:
    warnings = []
    seen = set()

    for index, resource in enumerate(resources):
        if not isinstance(resource, dict):
            continue
        title = resource.get("title")

        key = resource_key(resource)
        if key in seen:
            warnings.append(f"Duplicate resource at index {index}: {title}")
        seen.add(key)

        if not resource.get("risk_coverage"):
            warnings.append(f"Missing risk_coverage at index {index}: {title}")

        low, high = SCORE_BAND
        for score_field in SCORE_FIELDS:
            value = resource.get(score_field)
            if _is_number(value) and not (low <= value <= high):
                warnings.append(
                    f"Invalid {score_field} at index {index}: {value} ({title})"
                )

    return warnings


def validate_document(document, schema: Optional[dict] = None) -> ValidationResult:
    """Validate a whole published document ({resources: [...], ...}).

    Args:
        document: Parsed JSON document
        schema: JSON Schema dict; loaded from schema.json when omitted

    Returns:
        ValidationResult with hard errors and soft warnings
    """
    if schema is None:
        schema = load_schema()

    errors = _schema_errors(document, schema)

    resources = document.get("resources") if isinstance(document, dict) else None
    warnings = _quality_warnings(resources) if isinstance(resources, list) else []

    for message in errors:
        logger.error("Schema violation: %s", message)
    for message in warnings:
        logger.warning("%s", message)

    count = len(resources) if isinstance(resources, list) else 0
    if errors:
        logger.error("Schema validation failed: %d error(s) in %d resources", len(errors), count)
    else:
        logger.info(
            "Schema validation passed for %d resources (%d warning(s))",
            count,
            len(warnings),
        )

    return ValidationResult(ok=not errors, errors=errors, warnings=warnings)


def validate(resources: list[dict], schema: Optional[dict] = None) -> ValidationResult:
    """Validate a bare resource list.

    Args:
        resources: Resource dicts
        schema: JSON Schema dict; loaded from schema.json when omitted

    Returns:
        ValidationResult with hard errors and soft warnings
    """
    return validate_document({"resources": resources}, schema)
