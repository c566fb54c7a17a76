"""Reconcile a newly generated resource list against the published one."""

import logging
from typing import Optional

from practitioner_types import is_matchable, resource_key

logger = logging.getLogger(__name__)


def _previous_weeks(resource: dict) -> int:
    """Previous weeks_on_list as an int; missing, zero or unreadable counts as 1."""
    value = resource.get("weeks_on_list")
    if value is None or isinstance(value, bool):
        return 1
    try:
        count = int(value)
    except (TypeError, ValueError):
        logger.warning(
            "Unreadable weeks_on_list %r for '%s', counting as 1",
            value,
            resource.get("title"),
        )
        return 1
    return count or 1


def reconcile(previous: list[dict], generated: list[dict]) -> list[dict]:
    """Annotate generated resources with their weeks_on_list continuity.

    Resources are matched on exact (title, source). A match carries the
    previous count forward incremented by one (a missing previous count
    counts as 1); anything else starts at 1. The result has exactly the
    generated resources in their original order; previous-only resources
    are not retained. Inputs are not mutated.

    Args:
        previous: Resources from the last published list
        generated: Resources from the current generation

    Returns:
        New list of resource dicts with weeks_on_list set
    """
    previous_by_key = {}
    for resource in previous:
        key = resource_key(resource)
        if is_matchable(key):
            # Later duplicates win
            previous_by_key[key] = resource

    reconciled = []
    for resource in generated:
        updated = dict(resource)
        key = resource_key(resource)
        existing = previous_by_key.get(key) if is_matchable(key) else None

        if existing is not None:
            updated["weeks_on_list"] = _previous_weeks(existing) + 1
        else:
            updated["weeks_on_list"] = 1

        reconciled.append(updated)

    return reconciled


def _resources_of(document: Optional[dict], label: str) -> list[dict]:
    if document is None:
        return []
    resources = document.get("resources") if isinstance(document, dict) else None
    if not isinstance(resources, list):
        raise ValueError(f"{label} document does not contain a resources array")
    return resources


def reconcile_documents(previous_doc: Optional[dict], generated_doc: dict) -> dict:
    """Reconcile whole documents and report what changed.

    Args:
        previous_doc: Published document, or None on the first run
        generated_doc: Freshly generated document

    Returns:
        Dictionary with:
        - 'document': generated_doc with its resources reconciled
        - 'matched': Count of resources carried forward
        - 'new': Count of resources starting at week 1
        - 'dropped': Keys of previous resources absent from the generation

    Raises:
        ValueError: If either document is malformed or the generation is empty
    """
    generated = _resources_of(generated_doc, "Generated")
    if not generated:
        raise ValueError("Generated document contains no resources")
    previous = _resources_of(previous_doc, "Previous")

    logger.info(
        "Reconciling %d generated resources against %d previous resources",
        len(generated),
        len(previous),
    )

    reconciled = reconcile(previous, generated)
    matched = sum(1 for r in reconciled if r["weeks_on_list"] > 1)

    generated_keys = {resource_key(r) for r in generated}
    dropped = []
    for resource in previous:
        key = resource_key(resource)
        if key not in generated_keys and key not in dropped:
            dropped.append(key)

    for title, source in dropped:
        logger.warning("Resource dropped from the list: '%s' (%s)", title, source)

    document = dict(generated_doc)
    document["resources"] = reconciled

    logger.info(
        "Reconcile complete - Matched: %d, New: %d, Dropped: %d",
        matched,
        len(reconciled) - matched,
        len(dropped),
    )

    return {
        "document": document,
        "matched": matched,
        "new": len(reconciled) - matched,
        "dropped": dropped,
    }
