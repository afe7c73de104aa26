"""
Assistant cloning logic: plan, clone and nested file cloning.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from clients import OpenAIRestClient
from config import ClonerConfig
from errors import (
    ClonerError,
    NestedCloneError,
    PerFileTransferError,
    ResourceCloneError,
)
from models import AssistantSnapshot, CloneOutcome, utc_now_iso
from retry import RetryOptions, with_retry
from selection import check_selection_params, select_assistants

logger = logging.getLogger(__name__)

LINEAGE_KEY = "cloned_from"
LINEAGE_TIMESTAMP_KEY = "cloned_at"

T = TypeVar("T")
R = TypeVar("R")


def build_payload(
    snapshot: AssistantSnapshot,
    name_prefix: Optional[str] = None,
    lineage_key: str = LINEAGE_KEY,
    timestamp_key: str = LINEAGE_TIMESTAMP_KEY,
    now: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the destination write body for a source assistant.

    The name gets the optional prefix and the metadata is stamped with the
    source id and the clone time; source values for those two keys are
    overwritten.

    Args:
        snapshot: Source assistant
        name_prefix: Literal text put in front of the name
        lineage_key: Metadata key recording the source id
        timestamp_key: Metadata key recording the clone time
        now: ISO timestamp to stamp (defaults to the current UTC time)

    Returns:
        Payload without id or tool_resources
    """
    metadata = dict(snapshot.metadata)
    metadata[lineage_key] = snapshot.id or ""
    metadata[timestamp_key] = now or utc_now_iso()

    derived = replace(
        snapshot,
        id=None,
        name=f"{name_prefix}{snapshot.name}" if name_prefix else snapshot.name,
        metadata=metadata,
    )
    return derived.to_payload()


def upsert_assistant(
    destination: OpenAIRestClient,
    snapshot: AssistantSnapshot,
    lineage_key: str,
    timestamp_key: str,
    name_prefix: Optional[str] = None,
    retry_options: Optional[RetryOptions] = None,
) -> Tuple[AssistantSnapshot, str]:
    """
    Create the destination copy of an assistant, or update the existing one.

    An existing copy is the destination assistant whose metadata[lineage_key]
    equals the source id.

    Returns:
        Tuple of (destination assistant, "created" or "updated")

    Raises:
        ResourceCloneError: If the lookup or the write fails
    """
    try:
        existing = destination.find_by_metadata(lineage_key, snapshot.id)
        payload = build_payload(snapshot, name_prefix, lineage_key, timestamp_key)

        if existing:
            logger.info(
                f"{snapshot.id} already exists in destination, updating {existing.id}"
            )
            dst = with_retry(
                lambda: destination.update_assistant(existing.id, payload),
                retry_options,
                f"update {existing.id}",
            )
            return dst, "updated"

        dst = with_retry(
            lambda: destination.create_assistant(payload),
            retry_options,
            f"create copy of {snapshot.id}",
        )
        return dst, "created"
    except ClonerError as e:
        raise ResourceCloneError(snapshot.id, e) from e


def run_bounded(
    items: Sequence[T],
    worker: Callable[[T], R],
    max_workers: int,
    on_error: Callable[[T, Exception], R],
) -> List[R]:
    """
    Run worker over items with at most max_workers in flight.

    Results are stored at the index of their item, so every item yields
    exactly one result whatever order the workers finish in. A worker that
    raises is turned into a result by on_error; siblings keep running.
    """
    if not items:
        return []

    results: List[Optional[R]] = [None] * len(items)
    with ThreadPoolExecutor(
        max_workers=max(1, max_workers), thread_name_prefix="cloner"
    ) as executor:
        futures = {executor.submit(worker, item): i for i, item in enumerate(items)}
        for future in as_completed(futures):
            index = futures[future]
            try:
                results[index] = future.result()
            except Exception as e:
                logger.error(f"Worker for item {index} raised: {e}")
                results[index] = on_error(items[index], e)

    return results


class AssistantCloner:
    """Clones assistants from a source scope into a destination scope."""

    def __init__(
        self,
        config: ClonerConfig,
        source: Optional[OpenAIRestClient] = None,
        destination: Optional[OpenAIRestClient] = None,
        retry_options: Optional[RetryOptions] = None,
    ):
        """
        Initialize the cloner.

        Args:
            config: Run configuration
            source: Provider for the source scope (built from config if None)
            destination: Provider for the destination scope (built from config if None)
            retry_options: Backoff policy for mutating calls and downloads
        """
        self.config = config
        self.retry_options = retry_options or RetryOptions()

        self.source = source or OpenAIRestClient(
            config.src_api_key, config.src_org_id, config.src_project_id
        )
        self.destination = destination or OpenAIRestClient(
            config.dst_api_key, config.dst_org_id, config.dst_project_id
        )

    def get_assistants_to_clone(self) -> List[AssistantSnapshot]:
        """
        List the source scope and apply the configured selection.

        Raises:
            ConfigurationError: If the selection parameters are invalid
        """
        check_selection_params(
            self.config.clone_mode, self.config.clone_ids, self.config.clone_name_prefix
        )
        all_assistants = self.source.list_assistants()
        selected = select_assistants(
            all_assistants,
            self.config.clone_mode,
            ids=self.config.clone_ids,
            name_prefix=self.config.clone_name_prefix,
        )
        logger.info(
            f"Found {len(all_assistants)} assistant(s) in source, {len(selected)} selected ({self.config.clone_mode})"
        )
        return selected

    def _nested_verdict(self, enabled: bool) -> str:
        return "cloned" if enabled else "skipped"

    def plan(self) -> List[CloneOutcome]:
        """
        Simulate a clone run without writing anything.

        Returns:
            One skipped outcome per selected assistant, recording whether it
            would be created or updated
        """
        logger.info("Starting planning...")
        outcomes: List[CloneOutcome] = []

        for assistant in self.get_assistants_to_clone():
            existing = self.destination.find_by_metadata(LINEAGE_KEY, assistant.id)
            operation = "updated" if existing else "created"
            logger.info(f"[plan] {assistant.name} ({assistant.id}) would be {operation}")
            outcomes.append(
                CloneOutcome(
                    src_id=assistant.id,
                    name=assistant.name,
                    status="skipped",
                    dst_id=existing.id if existing else None,
                    operations={
                        "assistant": operation,
                        "file_search": self._nested_verdict(
                            self.config.include_file_search
                        ),
                        "code_interpreter": self._nested_verdict(
                            self.config.include_code_interpreter
                        ),
                    },
                )
            )

        return outcomes

    def clone(self) -> List[CloneOutcome]:
        """
        Clone every selected assistant into the destination.

        With dry_run set this is exactly plan().

        Returns:
            One outcome per selected assistant
        """
        if self.config.dry_run:
            logger.info("DRY RUN: no changes will be made")
            return self.plan()

        logger.info("=" * 70)
        logger.info("Assistant Clone")
        logger.info("=" * 70)
        logger.info(f"Mode: {self.config.clone_mode}")
        logger.info(f"File search: {self.config.include_file_search}")
        logger.info(f"Code interpreter: {self.config.include_code_interpreter}")
        logger.info(f"Max concurrency: {self.config.max_concurrency}")
        logger.info("=" * 70)

        assistants = self.get_assistants_to_clone()
        return run_bounded(
            assistants,
            self.clone_one,
            self.config.max_concurrency,
            on_error=self._unexpected_failure,
        )

    def _unexpected_failure(
        self, src: AssistantSnapshot, error: Exception
    ) -> CloneOutcome:
        return CloneOutcome(
            src_id=src.id,
            name=src.name,
            status="failed",
            operations={"assistant": "failed"},
            error=str(error),
        )

    def clone_one(self, src: AssistantSnapshot) -> CloneOutcome:
        """
        Clone one assistant, then its file_search and code_interpreter files.

        A failed primary write marks the outcome failed; a failed nested
        clone only marks that capability failed.

        Args:
            src: Source assistant

        Returns:
            The outcome for this assistant
        """
        outcome = CloneOutcome(
            src_id=src.id,
            name=src.name,
            operations={
                "assistant": "created",
                "file_search": "skipped",
                "code_interpreter": "skipped",
            },
        )
        logger.info(f"Cloning assistant: {src.name} ({src.id})")

        try:
            dst, operation = upsert_assistant(
                self.destination,
                src,
                LINEAGE_KEY,
                LINEAGE_TIMESTAMP_KEY,
                name_prefix=self.config.clone_name_prefix,
                retry_options=self.retry_options,
            )
        except ResourceCloneError as e:
            logger.error(f"Error cloning assistant {src.id}: {e}")
            outcome.status = "failed"
            outcome.operations["assistant"] = "failed"
            outcome.error = str(e)
            outcome.timestamp = utc_now_iso()
            return outcome

        outcome.operations["assistant"] = operation
        outcome.dst_id = dst.id
        logger.info(f"✓ Assistant {operation}: {src.id} -> {dst.id}")

        # Tool resources written so far; each nested update resends them
        tool_resources: Dict[str, Any] = {}

        if self.config.include_file_search and src.vector_store_ids:
            try:
                self.clone_file_search(src, dst.id, tool_resources)
                outcome.operations["file_search"] = "cloned"
            except Exception as e:
                logger.error(f"Error cloning file search for {src.id}: {e}")
                outcome.operations["file_search"] = "failed"

        if self.config.include_code_interpreter and src.code_interpreter_file_ids:
            try:
                self.clone_code_interpreter(src, dst.id, tool_resources)
                outcome.operations["code_interpreter"] = "cloned"
            except Exception as e:
                logger.error(f"Error cloning code interpreter for {src.id}: {e}")
                outcome.operations["code_interpreter"] = "failed"

        outcome.status = "success"
        outcome.timestamp = utc_now_iso()
        return outcome

    def _transfer_file(self, file_id: str) -> str:
        """
        Copy one file from the source scope to the destination scope.

        Returns:
            The new file id

        Raises:
            PerFileTransferError: If any step fails
        """
        try:
            info = self.source.get_file(file_id)
            content = with_retry(
                lambda: self.source.download_file_content(file_id),
                self.retry_options,
                f"download {file_id}",
            )
            new_file = with_retry(
                lambda: self.destination.upload_file(content, info.filename),
                self.retry_options,
                f"upload {info.filename}",
            )
        except Exception as e:
            raise PerFileTransferError(file_id, e) from e

        logger.debug(f"File cloned: {file_id} -> {new_file.id}")
        return new_file.id

    def _transfer_files(self, file_ids: Sequence[str]) -> List[str]:
        """Copy files one by one, dropping the ones that fail."""
        new_ids: List[str] = []
        for file_id in file_ids:
            try:
                new_ids.append(self._transfer_file(file_id))
            except PerFileTransferError as e:
                logger.warning(f"Failed to clone {e}; leaving it out")
        return new_ids

    def _set_tool_resource(
        self, dst_id: str, tool_resources: Dict[str, Any], key: str, value: Dict
    ) -> None:
        """Write one tool_resources sub-key, keeping the ones already written."""
        merged = dict(tool_resources)
        merged[key] = value
        with_retry(
            lambda: self.destination.update_assistant(
                dst_id, {"tool_resources": merged}
            ),
            self.retry_options,
            f"update {key} of {dst_id}",
        )
        tool_resources[key] = value

    def clone_file_search(
        self,
        src: AssistantSnapshot,
        dst_id: str,
        tool_resources: Dict[str, Any],
    ) -> List[str]:
        """
        Clone the assistant's vector stores and attach them to the copy.

        Each vector store is rebuilt as "Clone of <name>" from whichever of
        its files could be copied.

        Args:
            src: Source assistant
            dst_id: Destination assistant id
            tool_resources: Tool resources already written to dst_id

        Returns:
            The new vector store ids

        Raises:
            NestedCloneError: If a store cannot be read or created, or the
                final assistant update fails
        """
        vs_ids = src.vector_store_ids
        logger.info(f"Cloning {len(vs_ids)} vector store(s) for {src.id}...")
        new_store_ids: List[str] = []

        try:
            for vs_id in vs_ids:
                store = self.source.get_vector_store(vs_id)
                files = self.source.list_vector_store_files(vs_id)
                logger.info(f"Vector store {vs_id}: {len(files)} file(s)")

                new_file_ids = self._transfer_files([f.id for f in files])
                new_store = with_retry(
                    lambda: self.destination.create_vector_store(
                        f"Clone of {store.name}", new_file_ids
                    ),
                    self.retry_options,
                    f"create copy of {vs_id}",
                )
                new_store_ids.append(new_store.id)
                logger.info(
                    f"✓ Vector store cloned: {vs_id} -> {new_store.id} ({len(new_file_ids)}/{len(files)} files)"
                )

            self._set_tool_resource(
                dst_id,
                tool_resources,
                "file_search",
                {"vector_store_ids": new_store_ids},
            )
        except ClonerError as e:
            raise NestedCloneError("file_search", str(e)) from e

        return new_store_ids

    def clone_code_interpreter(
        self,
        src: AssistantSnapshot,
        dst_id: str,
        tool_resources: Dict[str, Any],
    ) -> List[str]:
        """
        Copy the assistant's code_interpreter files and attach them to the copy.

        Raises:
            NestedCloneError: If the final assistant update fails
        """
        file_ids = src.code_interpreter_file_ids
        logger.info(f"Cloning {len(file_ids)} code interpreter file(s) for {src.id}...")

        new_file_ids = self._transfer_files(file_ids)
        try:
            self._set_tool_resource(
                dst_id,
                tool_resources,
                "code_interpreter",
                {"file_ids": new_file_ids},
            )
        except ClonerError as e:
            raise NestedCloneError("code_interpreter", str(e)) from e

        logger.info(
            f"✓ Code interpreter cloned for {src.id} ({len(new_file_ids)}/{len(file_ids)} files)"
        )
        return new_file_ids
