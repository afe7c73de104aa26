"""
Clone reports: mapping.json, report.md and the console summary.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from config import ClonerConfig
from models import CloneOutcome, count_statuses, utc_now_iso

logger = logging.getLogger(__name__)

STATUS_ICONS = {"success": "✅", "failed": "❌", "skipped": "⏭️"}


@dataclass(frozen=True)
class CloneReport:
    """Aggregate of every outcome of one run."""

    cloned_at: str
    source: Dict[str, Optional[str]]
    destination: Dict[str, Optional[str]]
    mappings: Tuple[CloneOutcome, ...]
    summary: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_outcomes(
        cls, outcomes: List[CloneOutcome], config: ClonerConfig
    ) -> "CloneReport":
        return cls(
            cloned_at=utc_now_iso(),
            source={"org_id": config.src_org_id, "project_id": config.src_project_id},
            destination={
                "org_id": config.dst_org_id,
                "project_id": config.dst_project_id,
            },
            mappings=tuple(outcomes),
            summary=count_statuses(list(outcomes)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cloned_at": self.cloned_at,
            "source": dict(self.source),
            "destination": dict(self.destination),
            "mappings": [o.to_dict() for o in self.mappings],
            "summary": dict(self.summary),
        }


def render_markdown(report: CloneReport) -> str:
    """Render a report as Markdown."""
    lines: List[str] = []

    def scope(s: Dict[str, Optional[str]]) -> str:
        return f"{s.get('org_id') or 'N/A'} / {s.get('project_id') or 'N/A'}"

    lines.append("# Clone Report")
    lines.append("")
    lines.append(f"**Date:** {report.cloned_at}")
    lines.append(f"**Source:** {scope(report.source)}")
    lines.append(f"**Destination:** {scope(report.destination)}")
    lines.append("")

    lines.append("## Summary")
    lines.append("")
    lines.append(f"- Total: {report.summary['total']} assistants")
    lines.append(f"- ✅ Success: {report.summary['success']}")
    lines.append(f"- ❌ Failed: {report.summary['failed']}")
    lines.append(f"- ⏭️ Skipped: {report.summary['skipped']}")
    lines.append("")

    lines.append("## Details")
    lines.append("")
    for outcome in report.mappings:
        icon = STATUS_ICONS.get(outcome.status, "")
        lines.append(f"### {icon} {outcome.name}")
        lines.append("")
        lines.append(f"- **Source ID:** {outcome.src_id}")
        if outcome.dst_id:
            lines.append(f"- **Destination ID:** {outcome.dst_id}")
        lines.append(f"- **Status:** {outcome.status}")
        lines.append(
            f"- **Assistant Operation:** {outcome.operations.get('assistant', 'N/A')}"
        )
        if "file_search" in outcome.operations:
            lines.append(f"- **File Search:** {outcome.operations['file_search']}")
        if "code_interpreter" in outcome.operations:
            lines.append(
                f"- **Code Interpreter:** {outcome.operations['code_interpreter']}"
            )
        if outcome.error:
            lines.append(f"- **Error:** {outcome.error}")
        lines.append("")

    lines.append("---")
    lines.append("")
    lines.append(f"Generated at {datetime.now().isoformat()}")
    return "\n".join(lines) + "\n"


class Reporter:
    """Writes clone reports to an output directory."""

    def __init__(self, output_dir: str):
        self.output_dir = output_dir

    def generate(self, report: CloneReport) -> Tuple[str, str]:
        """
        Write mapping.json and report.md.

        Args:
            report: Report to write

        Returns:
            Tuple of (json path, markdown path)
        """
        if not os.path.isdir(self.output_dir):
            os.makedirs(self.output_dir, exist_ok=True)
            logger.info(f"Created output directory: {self.output_dir}")

        json_path = os.path.join(self.output_dir, "mapping.json")
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Mapping exported to: {json_path}")

        md_path = os.path.join(self.output_dir, "report.md")
        with open(md_path, "w", encoding="utf-8") as f:
            f.write(render_markdown(report))
        logger.info(f"Markdown report exported to: {md_path}")

        return json_path, md_path


def print_summary(outcomes: List[CloneOutcome]) -> Dict[str, int]:
    """Log the status counts of a run and the failed assistants."""
    counts = count_statuses(outcomes)

    logger.info("")
    logger.info("=" * 70)
    logger.info("CLONE SUMMARY")
    logger.info("=" * 70)
    for k, v in counts.items():
        logger.info(f"{k:20s}: {v}")

    failed = [o for o in outcomes if o.status == "failed"]
    if failed:
        logger.info("")
        logger.info("FAILED ASSISTANTS")
        logger.info("-" * 40)
        logger.info(f"{'Source ID':<32} {'Error'}")
        logger.info("-" * 70)
        for o in failed:
            error = (
                (o.error[:60] + "...")
                if o.error and len(o.error) > 60
                else (o.error or "Unknown")
            )
            logger.info(f"{o.src_id:<32} {error}")

    logger.info("=" * 70)
    return counts
