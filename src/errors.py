"""
Exception hierarchy for the Assistant Cloner.
"""

from typing import Optional


class ClonerError(Exception):
    """Base class for all cloner errors."""


class ConfigurationError(ClonerError):
    """Invalid or missing configuration, raised before any provider call."""


class ProviderError(ClonerError):
    """A call to the OpenAI API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"HTTP {self.status_code}: {self.message}"
        return self.message


class TransientProviderError(ProviderError):
    """Provider failure that may succeed on retry (throttling, 5xx, network)."""


class PermanentProviderError(ProviderError):
    """Provider failure that will not succeed on retry (4xx, bad payload)."""


class ResourceCloneError(ClonerError):
    """The primary write of one assistant failed."""

    def __init__(self, src_id: str, cause: Exception):
        super().__init__(str(cause))
        self.src_id = src_id
        self.cause = cause


class NestedCloneError(ClonerError):
    """A file_search or code_interpreter clone step failed."""

    def __init__(self, capability: str, message: str):
        super().__init__(f"{capability}: {message}")
        self.capability = capability


class PerFileTransferError(ClonerError):
    """Downloading or re-uploading a single file failed."""

    def __init__(self, file_id: str, cause: Exception):
        super().__init__(f"file {file_id}: {cause}")
        self.file_id = file_id
        self.cause = cause
