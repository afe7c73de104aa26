"""
Export source assistants to JSON and import such a file into the destination.
"""

import json
import logging
import os
from datetime import datetime
from typing import Dict, List, Optional

from clients import OpenAIRestClient
from cloner import run_bounded, upsert_assistant
from config import ClonerConfig
from errors import ConfigurationError, ResourceCloneError
from models import AssistantSnapshot, CloneOutcome, utc_now_iso
from retry import RetryOptions

logger = logging.getLogger(__name__)

IMPORT_LINEAGE_KEY = "imported_from"
IMPORT_TIMESTAMP_KEY = "imported_at"


def export_assistants(
    provider: OpenAIRestClient,
    output_dir: str,
    source: Optional[Dict[str, Optional[str]]] = None,
) -> str:
    """
    Write every assistant of a scope to a timestamped JSON file.

    Args:
        provider: Client for the scope to export
        output_dir: Directory to write into (created if missing)
        source: Scope identifiers recorded in the file

    Returns:
        Path of the export file
    """
    assistants = provider.list_assistants()
    logger.info(f"Exporting {len(assistants)} assistant(s)")

    data = {
        "exported_at": utc_now_iso(),
        "source": source or {},
        "assistants": [a.to_dict() for a in assistants],
    }

    os.makedirs(output_dir, exist_ok=True)
    filename = f"assistants-export-{datetime.now().strftime('%Y%m%d-%H%M%S')}.json"
    path = os.path.join(output_dir, filename)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)

    logger.info(f"Export written to: {path}")
    return path


def load_export(path: str) -> List[AssistantSnapshot]:
    """
    Read an export file.

    Raises:
        ConfigurationError: If the file is unreadable or has no assistants list
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read import file {path}: {e}")

    if not isinstance(data, dict) or not isinstance(data.get("assistants"), list):
        raise ConfigurationError(
            f"Invalid import file {path}: expected {{\"assistants\": [...]}}"
        )

    try:
        return [AssistantSnapshot.from_api(a) for a in data["assistants"]]
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid assistant in {path}: {e!r}")


class AssistantImporter:
    """Imports exported assistants into the destination scope."""

    def __init__(
        self,
        config: ClonerConfig,
        destination: Optional[OpenAIRestClient] = None,
        retry_options: Optional[RetryOptions] = None,
    ):
        self.config = config
        self.retry_options = retry_options or RetryOptions()
        self.destination = destination or OpenAIRestClient(
            config.dst_api_key, config.dst_org_id, config.dst_project_id
        )

    def import_one(self, snapshot: AssistantSnapshot) -> CloneOutcome:
        """Create or update the destination copy of one exported assistant."""
        outcome = CloneOutcome(
            src_id=snapshot.id or "",
            name=snapshot.name,
            operations={"assistant": "created"},
        )
        logger.info(f"Importing: {snapshot.name} ({snapshot.id})")

        try:
            dst, operation = upsert_assistant(
                self.destination,
                snapshot,
                IMPORT_LINEAGE_KEY,
                IMPORT_TIMESTAMP_KEY,
                retry_options=self.retry_options,
            )
        except ResourceCloneError as e:
            logger.error(f"Error importing {snapshot.id}: {e}")
            outcome.status = "failed"
            outcome.operations["assistant"] = "failed"
            outcome.error = str(e)
        else:
            outcome.dst_id = dst.id
            outcome.operations["assistant"] = operation
            logger.info(f"✓ Imported: {snapshot.id} -> {dst.id}")

        outcome.timestamp = utc_now_iso()
        return outcome

    def plan(self, snapshots: List[AssistantSnapshot]) -> List[CloneOutcome]:
        """Report what an import would do without writing anything."""
        outcomes = []
        for snapshot in snapshots:
            existing = self.destination.find_by_metadata(IMPORT_LINEAGE_KEY, snapshot.id)
            outcomes.append(
                CloneOutcome(
                    src_id=snapshot.id or "",
                    name=snapshot.name,
                    status="skipped",
                    dst_id=existing.id if existing else None,
                    operations={"assistant": "updated" if existing else "created"},
                )
            )
        return outcomes

    def run(self, snapshots: List[AssistantSnapshot]) -> List[CloneOutcome]:
        """
        Import every snapshot, at most max_concurrency at a time.

        Returns:
            One outcome per snapshot
        """
        if self.config.dry_run:
            logger.info("DRY RUN: no changes will be made")
            return self.plan(snapshots)

        def on_error(snapshot: AssistantSnapshot, error: Exception) -> CloneOutcome:
            return CloneOutcome(
                src_id=snapshot.id or "",
                name=snapshot.name,
                status="failed",
                operations={"assistant": "failed"},
                error=str(error),
            )

        return run_bounded(
            snapshots, self.import_one, self.config.max_concurrency, on_error
        )
