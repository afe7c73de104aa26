"""
In-memory stand-in for OpenAIRestClient used by the engine tests.
"""

import itertools
import threading
import time
from typing import Dict, List, Optional, Set, Tuple

from errors import PermanentProviderError
from models import AssistantSnapshot, FileObject, VectorStore, VectorStoreFile


def make_assistant(
    assistant_id: str,
    name: str,
    metadata: Optional[Dict[str, str]] = None,
    vector_store_ids: Tuple[str, ...] = (),
    file_ids: Tuple[str, ...] = (),
) -> AssistantSnapshot:
    tool_resources = {}
    if vector_store_ids:
        tool_resources["file_search"] = {"vector_store_ids": list(vector_store_ids)}
    if file_ids:
        tool_resources["code_interpreter"] = {"file_ids": list(file_ids)}
    return AssistantSnapshot.from_api(
        {
            "id": assistant_id,
            "name": name,
            "model": "gpt-4o",
            "instructions": f"You are {name}.",
            "tools": [{"type": "file_search"}, {"type": "code_interpreter"}],
            "tool_resources": tool_resources,
            "metadata": metadata or {},
        }
    )


class FakeProvider:
    """Thread-safe fake of one OpenAI scope."""

    def __init__(
        self,
        prefix: str,
        assistants: Optional[List[AssistantSnapshot]] = None,
        delay: float = 0.0,
    ):
        self.prefix = prefix
        self.delay = delay
        self._assistants: List[AssistantSnapshot] = list(assistants or [])
        self.files: Dict[str, Tuple[FileObject, bytes]] = {}
        self.vector_stores: Dict[str, Tuple[VectorStore, List[str]]] = {}

        self.writes: List[Tuple[str, object]] = []
        self.fail_names: Set[str] = set()
        self.fail_downloads: Set[str] = set()
        self.fail_uploads: Set[str] = set()
        self.fail_tool_resource_updates = False

        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()
        self._ids = itertools.count(1)

    def _new_id(self, kind: str) -> str:
        with self._lock:
            return f"{self.prefix}_{kind}_{next(self._ids)}"

    def _track(self, op: str, arg: object) -> None:
        with self._lock:
            self.writes.append((op, arg))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
        finally:
            with self._lock:
                self.in_flight -= 1

    # Seeding helpers

    def add_file(self, file_id: str, filename: str, content: bytes) -> None:
        self.files[file_id] = (
            FileObject(id=file_id, filename=filename, bytes=len(content)),
            content,
        )

    def add_vector_store(self, vs_id: str, name: str, file_ids: List[str]) -> None:
        self.vector_stores[vs_id] = (VectorStore(id=vs_id, name=name), list(file_ids))

    # Provider interface

    def list_assistants(self) -> List[AssistantSnapshot]:
        with self._lock:
            return list(self._assistants)

    def get_assistant(self, assistant_id: str) -> AssistantSnapshot:
        for a in self.list_assistants():
            if a.id == assistant_id:
                return a
        raise PermanentProviderError(f"No assistant {assistant_id}", status_code=404)

    def find_by_metadata(self, key: str, value: str) -> Optional[AssistantSnapshot]:
        for a in self.list_assistants():
            if a.metadata.get(key) == value:
                return a
        return None

    def create_assistant(self, payload: Dict) -> AssistantSnapshot:
        self._track("create_assistant", payload)
        if payload.get("name") in self.fail_names:
            raise PermanentProviderError("Invalid model", status_code=400)
        created = AssistantSnapshot.from_api({**payload, "id": self._new_id("asst")})
        with self._lock:
            self._assistants.insert(0, created)
        return created

    def update_assistant(self, assistant_id: str, payload: Dict) -> AssistantSnapshot:
        self._track("update_assistant", (assistant_id, payload))
        if "tool_resources" in payload and self.fail_tool_resource_updates:
            raise PermanentProviderError("Invalid vector store", status_code=400)
        if payload.get("name") in self.fail_names:
            raise PermanentProviderError("Invalid model", status_code=400)

        current = self.get_assistant(assistant_id)
        data = current.to_dict()
        data.update(payload)
        updated = AssistantSnapshot.from_api(data)
        with self._lock:
            self._assistants = [
                updated if a.id == assistant_id else a for a in self._assistants
            ]
        return updated

    def list_vector_store_files(self, vector_store_id: str) -> List[VectorStoreFile]:
        _, file_ids = self.vector_stores[vector_store_id]
        return [VectorStoreFile(id=f, vector_store_id=vector_store_id) for f in file_ids]

    def get_vector_store(self, vector_store_id: str) -> VectorStore:
        if vector_store_id not in self.vector_stores:
            raise PermanentProviderError("No vector store", status_code=404)
        return self.vector_stores[vector_store_id][0]

    def create_vector_store(self, name: str, file_ids: List[str]) -> VectorStore:
        self._track("create_vector_store", (name, list(file_ids)))
        vs_id = self._new_id("vs")
        self.add_vector_store(vs_id, name, file_ids)
        return self.vector_stores[vs_id][0]

    def get_file(self, file_id: str) -> FileObject:
        if file_id not in self.files:
            raise PermanentProviderError("No such file", status_code=404)
        return self.files[file_id][0]

    def download_file_content(self, file_id: str) -> bytes:
        if file_id in self.fail_downloads:
            raise PermanentProviderError("Download forbidden", status_code=403)
        return self.files[file_id][1]

    def upload_file(self, content: bytes, filename: str, purpose: str = "assistants") -> FileObject:
        self._track("upload_file", filename)
        if filename in self.fail_uploads:
            raise PermanentProviderError("Upload rejected", status_code=400)
        file_id = self._new_id("file")
        self.add_file(file_id, filename, content)
        return self.files[file_id][0]

    def mutating_calls(self) -> List[str]:
        return [op for op, _ in self.writes]
