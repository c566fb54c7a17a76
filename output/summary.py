"""Run summary for the weekly resource update.

Builds the statistics for a run, saves them as JSON next to the run outputs
and renders the markdown appended to the GitHub Actions step summary.
"""

import json
import logging
import math
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import Environment, FileSystemLoader

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def _resources(document: Optional[Dict]) -> Optional[List[Dict]]:
    if document is None:
        return None
    return document.get("resources") or []


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _score_stats(values: List[float]) -> tuple:
    if not values:
        return 0, None
    average = _round_half_up(sum(values) / len(values))
    return average, {"min": min(values), "max": max(values)}


def build_summary(
    current_doc: Optional[Dict] = None,
    generated_doc: Optional[Dict] = None,
    merged_doc: Optional[Dict] = None,
    timestamp: Optional[str] = None,
) -> Dict:
    """Build run statistics from the three documents of a weekly cycle.

    Args:
        current_doc: Previously published document
        generated_doc: Freshly generated document
        merged_doc: Reconciled document that was (or would be) published
        timestamp: ISO timestamp; defaults to now (UTC)

    Returns:
        Summary dictionary with current/generated/merged totals and statistics
    """
    summary = {
        "timestamp": timestamp or datetime.now(timezone.utc).isoformat(),
        "current": None,
        "generated": None,
        "merged": None,
        "statistics": {},
    }

    current = _resources(current_doc)
    if current is not None:
        summary["current"] = {"total": len(current)}

    generated = _resources(generated_doc)
    if generated is not None:
        summary["generated"] = {"total": len(generated)}

    merged = _resources(merged_doc)
    if merged is None:
        return summary

    summary["merged"] = {"total": len(merged)}

    type_counts = Counter(r.get("type") for r in merged)
    overall = [r["overall_score"] for r in merged if r.get("overall_score") is not None]
    highest = [r["highest_score"] for r in merged if r.get("highest_score") is not None]
    average_overall, overall_range = _score_stats(overall)
    average_highest, highest_range = _score_stats(highest)

    summary["statistics"] = {
        "typeDistribution": dict(type_counts),
        "newResources": sum(1 for r in merged if r.get("weeks_on_list") == 1),
        "continuingResources": sum(1 for r in merged if (r.get("weeks_on_list") or 0) > 1),
        "averageOverallScore": average_overall,
        "averageHighestScore": average_highest,
        "overallScoreRange": overall_range,
        "highestScoreRange": highest_range,
    }
    return summary


def log_summary(summary: Dict) -> None:
    stats = summary.get("statistics", {})
    logger.info(
        "Summary: current=%s generated=%s final=%s new=%s continuing=%s",
        (summary.get("current") or {}).get("total", 0),
        (summary.get("generated") or {}).get("total", 0),
        (summary.get("merged") or {}).get("total", 0),
        stats.get("newResources", 0),
        stats.get("continuingResources", 0),
    )
    for resource_type, count in (stats.get("typeDistribution") or {}).items():
        logger.info("  %s: %d", resource_type, count)


def render_step_summary(summary: Dict, templates_dir: Optional[Path] = None) -> str:
    env = Environment(
        loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
        keep_trailing_newline=True,
    )
    return env.get_template("step_summary.md.j2").render(summary=summary)


def save_summary(summary: Dict, outdir: Path, step_summary_path: Optional[str] = None) -> Path:
    """Write automation-summary.json and append markdown to the step summary.

    Args:
        summary: Output of build_summary
        outdir: Directory for automation-summary.json
        step_summary_path: GITHUB_STEP_SUMMARY file, if running in Actions

    Returns:
        Path of the JSON summary
    """
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    summary_path = outdir / "automation-summary.json"
    with open(summary_path, "w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2)
    logger.info("Summary saved to %s", summary_path)

    if step_summary_path:
        with open(step_summary_path, "a", encoding="utf-8") as f:
            f.write(render_step_summary(summary))
        logger.info("Summary added to GitHub Actions step summary")

    return summary_path
