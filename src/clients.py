"""
REST API client for the OpenAI Assistants v2 API.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

import requests

from errors import PermanentProviderError, TransientProviderError
from models import (
    AssistantSnapshot,
    FileObject,
    VectorStore,
    VectorStoreFile,
)

logger = logging.getLogger(__name__)

API_BASE = "https://api.openai.com/v1"
PAGE_LIMIT = 100

T = TypeVar("T")


class OpenAIRestClient:
    """REST client bound to one OpenAI organization/project scope."""

    RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

    def __init__(
        self,
        api_key: str,
        org_id: Optional[str] = None,
        project_id: Optional[str] = None,
        timeout_s: int = 60,
        base_url: str = API_BASE,
    ):
        """
        Initialize the OpenAI REST client.

        Args:
            api_key: OpenAI API key for this scope
            org_id: Optional organization ID (OpenAI-Organization header)
            project_id: Optional project ID (OpenAI-Project header)
            timeout_s: Request timeout in seconds
            base_url: API root URL
        """
        self.org_id = org_id
        self.project_id = project_id
        self.timeout_s = timeout_s
        self.base_url = base_url.rstrip("/")

        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "OpenAI-Beta": "assistants=v2",
            }
        )
        if org_id:
            self.session.headers["OpenAI-Organization"] = org_id
        if project_id:
            self.session.headers["OpenAI-Project"] = project_id

    def _url(self, path: str) -> str:
        """Construct full API URL from path."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Execute one HTTP request and map failures onto provider errors.

        Args:
            method: HTTP method (GET, POST)
            path: API path relative to the base URL
            **kwargs: Additional request parameters

        Returns:
            The successful response

        Raises:
            TransientProviderError: Throttling, 5xx, or transport failure
            PermanentProviderError: Any other non-2xx status
        """
        url = self._url(path)
        try:
            resp = self.session.request(method, url, timeout=self.timeout_s, **kwargs)
        except requests.RequestException as e:
            raise TransientProviderError(f"{method} {path} failed: {e}") from e

        if 200 <= resp.status_code < 300:
            return resp

        error_info = ""
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict):
                error_info = error.get("message") or ""
            elif isinstance(error, str):
                error_info = error
        message = f"{method} {path}: {error_info or resp.text[:200]}"

        if resp.status_code in self.RETRYABLE_STATUS_CODES:
            raise TransientProviderError(message, status_code=resp.status_code)
        raise PermanentProviderError(message, status_code=resp.status_code)

    def _json(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        resp = self._request(method, path, **kwargs)
        try:
            return resp.json()
        except ValueError as e:
            raise PermanentProviderError(
                f"{method} {path}: response is not JSON", status_code=resp.status_code
            ) from e

    @staticmethod
    def _parse(parser: Callable[[Dict[str, Any]], T], data: Dict[str, Any], what: str) -> T:
        """Validate a response payload into a typed model."""
        try:
            return parser(data)
        except (KeyError, TypeError, ValueError) as e:
            raise PermanentProviderError(f"Unexpected {what} payload: {e!r}") from e

    def _paginate(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict]:
        """Follow ``after`` cursors until ``has_more`` is false."""
        items: List[Dict] = []
        after: Optional[str] = None

        while True:
            query = {"limit": PAGE_LIMIT, **(params or {})}
            if after:
                query["after"] = after

            data = self._json("GET", path, params=query)
            page = data.get("data", [])
            items.extend(page)

            if not data.get("has_more") or not page:
                break
            after = data.get("last_id") or page[-1].get("id")
            if not after:
                break

        return items

    # Assistants

    def list_assistants(self) -> List[AssistantSnapshot]:
        """
        List every assistant in this scope, newest first.

        Returns:
            List of AssistantSnapshot objects
        """
        raw = self._paginate("assistants", params={"order": "desc"})
        return [self._parse(AssistantSnapshot.from_api, a, "assistant") for a in raw]

    def get_assistant(self, assistant_id: str) -> AssistantSnapshot:
        """Retrieve one assistant."""
        data = self._json("GET", f"assistants/{assistant_id}")
        return self._parse(AssistantSnapshot.from_api, data, "assistant")

    def create_assistant(self, payload: Dict[str, Any]) -> AssistantSnapshot:
        """
        Create an assistant.

        Args:
            payload: Create body (see AssistantSnapshot.to_payload)

        Returns:
            The created assistant
        """
        body = {k: v for k, v in payload.items() if k != "id"}
        data = self._json("POST", "assistants", json=body)
        return self._parse(AssistantSnapshot.from_api, data, "assistant")

    def update_assistant(
        self, assistant_id: str, payload: Dict[str, Any]
    ) -> AssistantSnapshot:
        """
        Modify an existing assistant; only keys present in payload change.

        Args:
            assistant_id: Assistant to modify
            payload: Partial update body

        Returns:
            The updated assistant
        """
        body = {k: v for k, v in payload.items() if k != "id"}
        data = self._json("POST", f"assistants/{assistant_id}", json=body)
        return self._parse(AssistantSnapshot.from_api, data, "assistant")

    def find_by_metadata(self, key: str, value: str) -> Optional[AssistantSnapshot]:
        """
        Find the first assistant whose metadata[key] equals value.

        The listing is newest first, so duplicates resolve to the most
        recently created assistant.

        Returns:
            Matching AssistantSnapshot, or None
        """
        for assistant in self.list_assistants():
            if assistant.metadata.get(key) == value:
                return assistant
        return None

    # Files and vector stores

    def list_vector_store_files(self, vector_store_id: str) -> List[VectorStoreFile]:
        """List every file attached to a vector store."""
        raw = self._paginate(f"vector_stores/{vector_store_id}/files")
        return [
            self._parse(VectorStoreFile.from_api, f, "vector store file") for f in raw
        ]

    def get_vector_store(self, vector_store_id: str) -> VectorStore:
        """Retrieve one vector store."""
        data = self._json("GET", f"vector_stores/{vector_store_id}")
        return self._parse(VectorStore.from_api, data, "vector store")

    def create_vector_store(self, name: str, file_ids: List[str]) -> VectorStore:
        """Create a vector store seeded with already uploaded files."""
        data = self._json(
            "POST", "vector_stores", json={"name": name, "file_ids": list(file_ids)}
        )
        return self._parse(VectorStore.from_api, data, "vector store")

    def get_file(self, file_id: str) -> FileObject:
        """Retrieve file metadata."""
        data = self._json("GET", f"files/{file_id}")
        return self._parse(FileObject.from_api, data, "file")

    def download_file_content(self, file_id: str) -> bytes:
        """Download the raw bytes of a file."""
        return self._request("GET", f"files/{file_id}/content").content

    def upload_file(
        self, content: bytes, filename: str, purpose: str = "assistants"
    ) -> FileObject:
        """
        Upload bytes as a new file in this scope.

        Args:
            content: File contents
            filename: Name to upload under
            purpose: OpenAI file purpose

        Returns:
            The uploaded file's metadata
        """
        data = self._json(
            "POST",
            "files",
            files={"file": (filename, content)},
            data={"purpose": purpose},
        )
        return self._parse(FileObject.from_api, data, "file")
